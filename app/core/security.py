"""Password hashing and access token helpers.

Passwords are hashed with bcrypt and access tokens are HS256 JWTs whose
``sub`` claim carries the user id.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

import bcrypt
import jwt

from app.core.config import settings


class InvalidTokenError(Exception):
    """The access token is malformed, badly signed or expired."""
    pass


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a plain-text password with a fresh bcrypt salt."""
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_SALT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(
    subject: str,
    expires_delta: Optional[timedelta] = None,
) -> Tuple[str, datetime]:
    """
    Sign an access token for the given subject.

    Args:
        subject: Value of the ``sub`` claim (the user id)
        expires_delta: Token lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Tuple of the encoded token and its expiry timestamp (UTC)
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    issued_at = datetime.now(timezone.utc)
    expires_at = issued_at + expires_delta
    payload: Dict[str, Any] = {
        "sub": str(subject),
        "iat": issued_at,
        "exp": expires_at,
    }
    token = jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return token, expires_at


def decode_access_token(token: str) -> str:
    """
    Validate an access token and return its subject.

    Raises:
        InvalidTokenError: If the token cannot be trusted
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.PyJWTError as e:
        raise InvalidTokenError(str(e)) from e

    subject = payload.get("sub")
    if not subject:
        raise InvalidTokenError("Token has an empty subject")
    return subject


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token.strip():
        return None
    return token.strip()
