"""Exceptions for the link shortener service layer.

This module contains the exception hierarchy for the service layer,
providing domain-specific exceptions that abstract underlying implementation details.
Messages are the ones shown to API clients.
"""


class ServiceError(Exception):
    """Base exception for all service-level errors."""
    pass


class LinkError(ServiceError):
    """Base exception for link-related errors."""
    pass


class LinkNotFoundError(LinkError):
    """No live link has the requested hash."""

    def __init__(self, hash: str):
        self.hash = hash
        super().__init__("Link não encontrado")


class LinkExpiredError(LinkError):
    """The link exists but its expiry is in the past."""

    def __init__(self, hash: str):
        self.hash = hash
        super().__init__("Link expirado")


class LinkForbiddenError(LinkError):
    """The caller does not own the link, or is anonymous."""

    def __init__(self, message: str = "Ação não permitida"):
        super().__init__(message)


class HashGenerationError(LinkError):
    """Failed to find an unused hash within the attempt limit."""
    pass


class UserError(ServiceError):
    """Base exception for account-related errors."""
    pass


class EmailAlreadyInUseError(UserError):
    """An account with this e-mail already exists."""

    def __init__(self, email: str):
        self.email = email
        super().__init__("E-mail já está sendo usado")


class InvalidCredentialsError(UserError):
    """Unknown e-mail or wrong password."""

    def __init__(self):
        super().__init__("Credenciais inválidas.")


class ClickFlushError(ServiceError):
    """A flush run could not read the click accumulator."""
    pass
