"""Service layer for the link shortener application.

This package contains service classes implementing the business logic of the application.
Services orchestrate interactions between repositories and provide domain-specific operations.
"""

from app.services.auth import AuthService
from app.services.click_accumulator import ClickAccumulator
from app.services.click_flush import ClickFlushService
from app.services.hash_generator import HashGenerator
from app.services.links import LinkService
from app.services.users import UserService

__all__ = [
    "AuthService",
    "ClickAccumulator",
    "ClickFlushService",
    "HashGenerator",
    "LinkService",
    "UserService",
]
