"""Repository layer for the link shortener application.

This module provides repository classes that abstract database operations
and implement the Repository pattern for clean separation of concerns.
"""

from app.repositories.base import (
    BaseRepository,
    RepositoryError,
    EntityNotFoundError,
    DuplicateEntityError
)
from app.repositories.link_repository import LinkRepository
from app.repositories.user_repository import UserRepository

__all__ = [
    # Base classes and exceptions
    "BaseRepository",
    "RepositoryError",
    "EntityNotFoundError",
    "DuplicateEntityError",

    # Concrete repositories
    "LinkRepository",
    "UserRepository",
]
