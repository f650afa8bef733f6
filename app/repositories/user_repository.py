"""User Repository for the link shortener application."""

from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.models.user import User
from app.repositories.base import BaseRepository, RepositoryError, DuplicateEntityError


class UserRepository(BaseRepository[User]):
    """Repository for User model database operations."""

    def __init__(self):
        super().__init__(User)

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        """
        Find a live user by e-mail.

        Raises:
            RepositoryError: On database errors
        """
        try:
            query = self._not_deleted(select(User).where(User.email == email))
            result = await db.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error retrieving user by email: {e}") from e

    async def email_exists(self, db: AsyncSession, email: str) -> bool:
        # The unique index covers deleted accounts too
        return await self.exists(db, include_deleted=True, email=email)

    async def create_user(self, db: AsyncSession, data: Dict[str, Any]) -> User:
        """
        Create a user.

        Raises:
            DuplicateEntityError: If the e-mail is already registered
            RepositoryError: On other database errors
        """
        try:
            return await self.create(db, data)
        except RepositoryError as e:
            if isinstance(e.__cause__, IntegrityError):
                raise DuplicateEntityError(self.model_type, "email", data.get("email")) from e.__cause__
            raise
