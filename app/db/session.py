"""Session management for database operations.

This module provides utilities for handling SQLAlchemy async sessions
with proper lifecycle management, error handling, and transaction support.
It includes dependency injection patterns optimized for FastAPI.
"""

from typing import AsyncGenerator, Callable, TypeVar
import logging
import inspect
from contextlib import asynccontextmanager
from functools import wraps

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from app.db.base import get_session

logger = logging.getLogger(__name__)

# Generic return type for function decorators
T = TypeVar("T")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions.

    This is the primary dependency to inject a database session into route handlers.
    It properly manages the session lifecycle, handling cleanup even in case of exceptions.

    Yields:
        AsyncSession: A SQLAlchemy async session object.
    """
    async with get_session() as session:
        try:
            yield session
        except SQLAlchemyError:
            logger.exception("Database error occurred")
            await session.rollback()
            raise
        except Exception:
            await session.rollback()
            raise


def db_transaction(db_param_name: str = "db") -> Callable:
    """Decorator to wrap a coroutine in a database transaction.

    The session is looked up by parameter name (positionally or by keyword);
    the transaction commits when the coroutine returns and rolls back when it
    raises.

    Args:
        db_param_name: Name of the AsyncSession parameter, ``db`` by convention.

    Example:
        ```python
        @db_transaction()
        async def rename(self, db: AsyncSession, link: Link, url: str) -> Link:
            link.current_url = url
            db.add(link)
            return link
        ```

    Raises:
        ValueError: If the decorated function has no such parameter
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        parameters = list(inspect.signature(func).parameters)
        if db_param_name not in parameters:
            raise ValueError(
                f"Function '{func.__name__}' has no '{db_param_name}' parameter to run a transaction on"
            )
        db_param_pos = parameters.index(db_param_name)

        @wraps(func)
        async def wrapper(*args, **kwargs):
            if db_param_name in kwargs:
                db = kwargs[db_param_name]
            elif len(args) > db_param_pos:
                db = args[db_param_pos]
            else:
                raise ValueError(f"Database session not passed to '{func.__name__}'")

            try:
                result = await func(*args, **kwargs)
                await db.commit()
                return result
            except Exception:
                await db.rollback()
                raise

        return wrapper
    return decorator


class SessionManager:
    """Session manager for database operations outside of request handling."""

    @staticmethod
    @asynccontextmanager
    async def transaction_context() -> AsyncGenerator[AsyncSession, None]:
        """Context manager for a database session with transaction support.

        Automatically commits on successful completion or rolls back on error.

        Yields:
            AsyncSession: SQLAlchemy async session
        """
        async with get_session() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error(f"Transaction failed: {e}")
                raise

