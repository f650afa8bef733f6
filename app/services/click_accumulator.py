"""Redis-backed click accumulator.

Redirects bump a per-link counter in Redis instead of writing to the
database; the flush job later moves the counts into ``links.times_clicked``.
"""

import uuid
from typing import List, Optional, Union

import redis.asyncio as redis

from app.core.config import settings

LinkId = Union[uuid.UUID, str]


class ClickAccumulator:
    """
    Per-link pending click counters stored under ``<prefix><link id>``.

    Every operation is a single Redis command, so increments are atomic per
    key and nothing here holds a lock across an await.
    """

    def __init__(self, client: redis.Redis, prefix: Optional[str] = None):
        """
        Args:
            client: Redis client created with ``decode_responses=True``
            prefix: Key prefix, defaults to CLICK_KEY_PREFIX
        """
        self.client = client
        self.prefix = prefix if prefix is not None else settings.CLICK_KEY_PREFIX

    def key_for(self, link_id: LinkId) -> str:
        return f"{self.prefix}{link_id}"

    def link_id_from_key(self, key: str) -> Optional[uuid.UUID]:
        """Parse the link id out of a counter key; None when the key is foreign."""
        if not key.startswith(self.prefix):
            return None
        try:
            return uuid.UUID(key[len(self.prefix):])
        except ValueError:
            return None

    async def increment(self, link_id: LinkId) -> int:
        """Record one click, returning the pending count."""
        return await self.client.incr(self.key_for(link_id))

    async def get(self, link_id: LinkId) -> Optional[int]:
        value = await self.client.get(self.key_for(link_id))
        return int(value) if value is not None else None

    async def delete(self, link_id: LinkId) -> None:
        await self.client.delete(self.key_for(link_id))

    async def delete_key(self, key: str) -> None:
        await self.client.delete(key)

    async def list_keys(self) -> List[str]:
        """Every pending counter key, gathered with SCAN rather than KEYS."""
        return [key async for key in self.client.scan_iter(match=f"{self.prefix}*")]

    async def drain(self, link_id: LinkId) -> int:
        """
        Atomically read and remove a link's pending count (GETDEL).

        Clicks recorded after this call start a fresh counter, so none of
        them can be lost between the read and the delete.

        Returns:
            The pending count, 0 if there was none
        """
        value = await self.client.getdel(self.key_for(link_id))
        return int(value) if value is not None else 0

    async def restore(self, link_id: LinkId, count: int) -> None:
        """Put drained clicks back after a failed flush (INCRBY)."""
        if count > 0:
            await self.client.incrby(self.key_for(link_id), count)
