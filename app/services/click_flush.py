"""Click flush service for the link shortener application.

Moves pending click counts from the Redis accumulator into
``links.times_clicked``.
"""

import logging
from typing import Any, Dict

from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.link_repository import LinkRepository
from app.services.click_accumulator import ClickAccumulator
from app.services.exceptions import ClickFlushError

logger = logging.getLogger(__name__)


class ClickFlushService:
    """
    Service for reconciling accumulated clicks into the link store.

    Each key is handled in its own transaction so that one failing link
    does not hold back the others.
    """

    def __init__(self, link_repository: LinkRepository, click_accumulator: ClickAccumulator):
        self.link_repository = link_repository
        self.click_accumulator = click_accumulator

    async def flush(self, db: AsyncSession) -> Dict[str, Any]:
        """
        Flush every pending counter.

        For a key whose link is gone (deleted or never existed) the counter is
        discarded. Otherwise the count is drained atomically and added to the
        link; if writing fails the count is put back for the next run.

        Args:
            db: Database session; committed once per flushed key

        Returns:
            Dict with keys, flushed_links, flushed_clicks, skipped and errors counts

        Raises:
            ClickFlushError: If the pending keys cannot be listed
        """
        try:
            keys = await self.click_accumulator.list_keys()
        except RedisError as e:
            logger.error(f"Could not list pending click counters: {e}")
            raise ClickFlushError(f"Failed to list click counters: {e}") from e

        summary = {
            "keys": len(keys),
            "flushed_links": 0,
            "flushed_clicks": 0,
            "skipped": 0,
            "errors": 0,
        }

        for key in keys:
            try:
                flushed = await self._flush_key(db, key)
            except Exception as e:
                await db.rollback()
                summary["errors"] += 1
                logger.error(f"Error flushing click counter {key}: {e}", exc_info=True)
                continue

            if flushed:
                summary["flushed_links"] += 1
                summary["flushed_clicks"] += flushed
            else:
                summary["skipped"] += 1

        logger.info(
            f"Click flush completed: keys={summary['keys']}, links={summary['flushed_links']}, "
            f"clicks={summary['flushed_clicks']}, skipped={summary['skipped']}, errors={summary['errors']}"
        )
        return summary

    async def _flush_key(self, db: AsyncSession, key: str) -> int:
        """Flush one counter, returning the number of clicks written (0 when skipped)."""
        link_id = self.click_accumulator.link_id_from_key(key)
        if link_id is None:
            logger.warning(f"Discarding click counter with malformed key {key}")
            await self.click_accumulator.delete_key(key)
            return 0

        link = await self.link_repository.find_by_id(db, link_id)
        if link is None:
            logger.info(f"Discarding clicks for missing link {link_id}")
            await self.click_accumulator.delete(link_id)
            return 0

        count = await self.click_accumulator.drain(link_id)
        if count <= 0:
            return 0

        try:
            await self.link_repository.add_clicks(db, link, count)
            await db.commit()
        except Exception:
            await db.rollback()
            await self.click_accumulator.restore(link_id, count)
            raise

        return count
