"""API dependencies for FastAPI.

This module provides dependency injection functions for FastAPI endpoints
to access the Redis client, service instances and the caller's identity.
"""

import uuid
from typing import Optional

import redis.asyncio as redis
from fastapi import Depends, Header, HTTPException, status

from app.core.config import settings
from app.core.redis import redis_manager
from app.core.security import InvalidTokenError, decode_access_token, extract_bearer_token
from app.repositories.link_repository import LinkRepository
from app.repositories.user_repository import UserRepository
from app.services.auth import AuthService
from app.services.click_accumulator import ClickAccumulator
from app.services.hash_generator import HashGenerator
from app.services.links import LinkService
from app.services.users import UserService

MISSING_TOKEN_MESSAGE = "Token de autenticação não fornecido."
INVALID_TOKEN_MESSAGE = "Token de autenticação inválido."


def get_redis() -> redis.Redis:
    """Get a client on the shared Redis connection pool."""
    return redis_manager.get_client()


def get_base_url() -> str:
    """Get the base URL for short links."""
    return settings.BASE_URL


async def get_link_repository() -> LinkRepository:
    return LinkRepository()


async def get_user_repository() -> UserRepository:
    return UserRepository()


async def get_click_accumulator(client: redis.Redis = Depends(get_redis)) -> ClickAccumulator:
    return ClickAccumulator(client)


async def get_link_service(
    link_repo: LinkRepository = Depends(get_link_repository),
    click_accumulator: ClickAccumulator = Depends(get_click_accumulator),
    base_url: str = Depends(get_base_url),
) -> LinkService:
    """Get an instance of the link lifecycle service."""
    return LinkService(
        link_repository=link_repo,
        click_accumulator=click_accumulator,
        hash_generator=HashGenerator(),
        base_url=base_url,
    )


async def get_user_service(user_repo: UserRepository = Depends(get_user_repository)) -> UserService:
    return UserService(user_repository=user_repo)


async def get_auth_service(user_repo: UserRepository = Depends(get_user_repository)) -> AuthService:
    return AuthService(user_repository=user_repo)


def _user_id_from_token(token: str) -> uuid.UUID:
    subject = decode_access_token(token)
    try:
        return uuid.UUID(subject)
    except ValueError as e:
        raise InvalidTokenError(f"Subject is not a user id: {subject}") from e


async def get_current_user_id(authorization: Optional[str] = Header(None)) -> Optional[uuid.UUID]:
    """Caller's user id, or None for anonymous callers and unusable tokens."""
    token = extract_bearer_token(authorization)
    if token is None:
        return None
    try:
        return _user_id_from_token(token)
    except InvalidTokenError:
        return None


async def require_user_id(authorization: Optional[str] = Header(None)) -> uuid.UUID:
    """Caller's user id; fails with 401 when no valid token is presented."""
    token = extract_bearer_token(authorization)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=MISSING_TOKEN_MESSAGE,
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return _user_id_from_token(token)
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_TOKEN_MESSAGE,
            headers={"WWW-Authenticate": "Bearer"},
        )
