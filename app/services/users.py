"""User registration service."""

import asyncio
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import hash_password
from app.db.session import db_transaction
from app.models.user import UserView
from app.repositories.base import DuplicateEntityError
from app.repositories.user_repository import UserRepository
from app.services.exceptions import EmailAlreadyInUseError

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """Service for account creation."""

    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    @db_transaction(db_param_name="db")
    async def register_user(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        name: Optional[str] = None,
    ) -> UserView:
        """
        Register a new account.

        Raises:
            EmailAlreadyInUseError: If the e-mail is already registered
            RepositoryError: On database errors
        """
        email = normalize_email(email)
        if await self.user_repository.email_exists(db, email):
            raise EmailAlreadyInUseError(email)

        # bcrypt is CPU bound, keep it off the event loop
        password_hash = await asyncio.to_thread(hash_password, password)

        try:
            user = await self.user_repository.create_user(db, {
                "email": email,
                "name": name,
                "password_hash": password_hash,
            })
        except DuplicateEntityError as e:
            raise EmailAlreadyInUseError(email) from e

        logger.info(f"Registered user {user.id}")
        return UserView(id=user.id, email=user.email, name=user.name, created_at=user.created_at)
