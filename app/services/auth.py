"""Login service issuing access tokens."""

import asyncio
import logging
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import create_access_token, verify_password
from app.repositories.user_repository import UserRepository
from app.services.exceptions import InvalidCredentialsError
from app.services.users import normalize_email

logger = logging.getLogger(__name__)


class AuthService:
    """Checks credentials and signs JWT access tokens."""

    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    async def login(self, db: AsyncSession, email: str, password: str) -> Dict[str, Any]:
        """
        Authenticate with e-mail and password.

        Returns:
            Dict with access_token, token_type and expires_at

        Raises:
            InvalidCredentialsError: For an unknown e-mail or a wrong password
        """
        user = await self.user_repository.get_by_email(db, normalize_email(email))
        if user is None:
            raise InvalidCredentialsError()

        if not await asyncio.to_thread(verify_password, password, user.password_hash):
            logger.info(f"Failed login for user {user.id}")
            raise InvalidCredentialsError()

        token, expires_at = create_access_token(str(user.id))
        return {
            "access_token": token,
            "token_type": "bearer",
            "expires_at": expires_at,
        }
