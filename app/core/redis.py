"""
Redis client management module.

This module provides a Redis client manager with connection pooling
and error handling for async Redis operations.
"""

import asyncio
import random
from typing import Optional

import redis.asyncio as redis
from loguru import logger
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError

from app.core.config import settings


class RedisClientManager:
    """
    Async Redis client manager with connection pooling.

    Features:
    - Lazy connection pool creation
    - Per-command socket timeouts
    - Connection health checking
    - Reconnection with exponential backoff
    """

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.REDIS_URI
        self._connection_pool: Optional[ConnectionPool] = None
        self._client: Optional[redis.Redis] = None
        self._is_connected = False

    def _initialize(self) -> None:
        """Initialize the Redis connection pool."""
        self._connection_pool = redis.ConnectionPool.from_url(
            self.url,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
            decode_responses=True,
        )
        logger.debug(f"Redis connection pool created for {self.url}")

    def get_client(self) -> redis.Redis:
        """
        Get a Redis client instance bound to the connection pool.

        Returns:
            redis.Redis: Redis client instance
        """
        if self._client is None:
            if self._connection_pool is None:
                self._initialize()
            self._client = redis.Redis(connection_pool=self._connection_pool)
        return self._client

    async def ping(self) -> bool:
        """
        Test the Redis connection with a ping command.

        Returns:
            bool: True if successful, False otherwise
        """
        try:
            result = await self.get_client().ping()
            self._is_connected = bool(result)
            return self._is_connected
        except (RedisError, OSError) as e:
            logger.error(f"Redis ping failed: {str(e)}")
            self._is_connected = False
            return False

    async def is_connected(self) -> bool:
        if not self._is_connected:
            return await self.ping()
        return self._is_connected

    async def reconnect(self, max_retries: int = 3, delay: float = 1.0) -> bool:
        """
        Attempt to reconnect to Redis with exponential backoff.

        Args:
            max_retries: Maximum number of reconnection attempts
            delay: Initial delay between attempts (seconds)

        Returns:
            bool: True if reconnection was successful
        """
        await self.close()

        for attempt in range(max_retries):
            logger.debug(f"Redis reconnection attempt {attempt + 1}/{max_retries}")
            if await self.ping():
                logger.info("Redis reconnection successful")
                return True

            # Exponential backoff with jitter
            await asyncio.sleep(delay * (2 ** attempt) * random.uniform(0.9, 1.1))

        logger.error(f"Redis reconnection failed after {max_retries} attempts")
        return False

    async def close(self) -> None:
        """Close the Redis client and connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

        if self._connection_pool is not None:
            await self._connection_pool.disconnect()
            self._connection_pool = None

        self._is_connected = False
        logger.debug("Redis connections closed")


# Shared instance used by the application lifecycle and dependencies
redis_manager = RedisClientManager()
