"""Tests for moving accumulated clicks into the link store."""

import uuid
from unittest.mock import patch

import pytest
from redis.exceptions import RedisError
from sqlalchemy import select

from app.models.link import Link
from app.repositories.base import RepositoryError
from app.services.exceptions import ClickFlushError
from tests.utils import create_test_link


async def stored_clicks(db, link_id) -> int:
    result = await db.execute(select(Link.times_clicked).where(Link.id == link_id))
    return result.scalar_one()


@pytest.mark.service
class TestClickFlush:

    @pytest.mark.asyncio
    async def test_access_then_flush(self, test_db, link_service, flush_service, mock_redis):
        view = await link_service.create_link(test_db, original_url="https://example.com/a")

        assert await link_service.access_link(test_db, view.hash) == "https://example.com/a"
        summary = await flush_service.flush(test_db)

        assert await stored_clicks(test_db, view.id) == 1
        assert summary["flushed_links"] == 1
        assert summary["flushed_clicks"] == 1
        assert mock_redis.data == {}

    @pytest.mark.asyncio
    async def test_n_clicks_counted_exactly(self, test_db, link_service, flush_service):
        link = await create_test_link(test_db, hash="many01", times_clicked=5)
        link_id = link.id
        await test_db.commit()

        for _ in range(7):
            await link_service.access_link(test_db, "many01")
        await flush_service.flush(test_db)

        assert await stored_clicks(test_db, link_id) == 12

    @pytest.mark.asyncio
    async def test_clicks_between_flushes_are_pending(self, test_db, link_service, flush_service, click_accumulator):
        link = await create_test_link(test_db, hash="pend01")
        link_id = link.id
        await test_db.commit()

        await link_service.access_link(test_db, "pend01")
        await flush_service.flush(test_db)
        await link_service.access_link(test_db, "pend01")
        await link_service.access_link(test_db, "pend01")

        assert await stored_clicks(test_db, link_id) == 1
        assert await click_accumulator.get(link_id) == 2

        await flush_service.flush(test_db)
        assert await stored_clicks(test_db, link_id) == 3

    @pytest.mark.asyncio
    async def test_missing_link_is_discarded(self, test_db, flush_service, click_accumulator, mock_redis):
        ghost = uuid.uuid4()
        await click_accumulator.increment(ghost)
        await click_accumulator.increment(ghost)

        summary = await flush_service.flush(test_db)

        assert summary["skipped"] == 1
        assert summary["errors"] == 0
        assert mock_redis.data == {}

    @pytest.mark.asyncio
    async def test_deleted_link_is_discarded(
        self, test_db, link_service, flush_service, link_repository, click_accumulator
    ):
        link = await create_test_link(test_db, hash="dele01")
        link_id = link.id
        await test_db.commit()
        await link_service.access_link(test_db, "dele01")
        await link_repository.soft_delete_link(test_db, link)
        await test_db.commit()

        summary = await flush_service.flush(test_db)

        assert summary["skipped"] == 1
        assert await click_accumulator.get(link_id) is None
        assert await stored_clicks(test_db, link_id) == 0

    @pytest.mark.asyncio
    async def test_malformed_key_is_discarded(self, test_db, flush_service, mock_redis):
        mock_redis.data["link-not-a-uuid"] = "3"
        mock_redis.data["unrelated"] = "9"

        summary = await flush_service.flush(test_db)

        assert summary["keys"] == 1
        assert summary["skipped"] == 1
        assert mock_redis.data == {"unrelated": "9"}

    @pytest.mark.asyncio
    async def test_failure_on_one_key_keeps_the_others(
        self, test_db, flush_service, link_repository, click_accumulator
    ):
        broken = await create_test_link(test_db, hash="brok01")
        healthy = await create_test_link(test_db, hash="heal01")
        broken_id, healthy_id = broken.id, healthy.id
        await test_db.commit()
        for _ in range(3):
            await click_accumulator.increment(broken_id)
        await click_accumulator.increment(healthy_id)

        original_add_clicks = link_repository.add_clicks

        async def flaky_add_clicks(db, link, clicks):
            if link.id == broken_id:
                raise RuntimeError("write failed")
            return await original_add_clicks(db, link, clicks)

        with patch.object(link_repository, "add_clicks", side_effect=flaky_add_clicks):
            summary = await flush_service.flush(test_db)

        assert summary["errors"] == 1
        assert summary["flushed_links"] == 1
        assert await stored_clicks(test_db, healthy_id) == 1
        assert await stored_clicks(test_db, broken_id) == 0
        # Drained clicks are put back for the next run
        assert await click_accumulator.get(broken_id) == 3

        await flush_service.flush(test_db)
        assert await stored_clicks(test_db, broken_id) == 3

    @pytest.mark.asyncio
    async def test_lookup_failure_rolls_back_and_keeps_the_others(
        self, test_db, flush_service, link_repository, click_accumulator
    ):
        broken = await create_test_link(test_db, hash="look01")
        healthy = await create_test_link(test_db, hash="look02")
        broken_id, healthy_id = broken.id, healthy.id
        await test_db.commit()
        await click_accumulator.increment(broken_id)
        await click_accumulator.increment(broken_id)
        await click_accumulator.increment(healthy_id)

        original_find_by_id = link_repository.find_by_id

        async def flaky_find_by_id(db, link_id):
            if link_id == broken_id:
                raise RepositoryError("connection dropped")
            return await original_find_by_id(db, link_id)

        with patch.object(link_repository, "find_by_id", side_effect=flaky_find_by_id), \
                patch.object(test_db, "rollback", wraps=test_db.rollback) as rollback:
            summary = await flush_service.flush(test_db)

        assert summary["errors"] == 1
        assert summary["flushed_links"] == 1
        rollback.assert_awaited()
        assert await stored_clicks(test_db, healthy_id) == 1
        # Nothing was drained for the failed lookup
        assert await click_accumulator.get(broken_id) == 2

    @pytest.mark.asyncio
    async def test_listing_failure_raises(self, test_db, flush_service, mock_redis):
        def broken_scan(match=None, count=None):
            raise RedisError("connection lost")

        mock_redis.scan_iter = broken_scan

        with pytest.raises(ClickFlushError):
            await flush_service.flush(test_db)

    @pytest.mark.asyncio
    async def test_empty_accumulator(self, test_db, flush_service):
        summary = await flush_service.flush(test_db)

        assert summary == {
            "keys": 0,
            "flushed_links": 0,
            "flushed_clicks": 0,
            "skipped": 0,
            "errors": 0,
        }
