"""Tests for the link repository."""

import uuid
from datetime import timedelta

import pytest
from sqlalchemy import select

from app.models.base import utc_now
from app.models.link import Link
from app.repositories.link_repository import LinkRepository, DuplicateEntityError
from tests.utils import create_test_link, create_test_user, random_url


@pytest.mark.repository
class TestLinkRepository:
    """Test suite for link repository."""

    @pytest.fixture
    def link_repository(self):
        """Return link repository instance."""
        return LinkRepository()

    @pytest.mark.asyncio
    async def test_insert(self, test_db, link_repository):
        url = random_url()
        link = await link_repository.insert(test_db, {
            "hash": "insert",
            "original_url": url,
            "current_url": url,
        })

        assert link.id is not None
        assert link.times_clicked == 0
        assert link.created_at is not None

        found = await link_repository.find_by_hash(test_db, "insert")
        assert found is not None
        assert found.id == link.id

    @pytest.mark.asyncio
    async def test_insert_duplicate_hash(self, test_db, link_repository):
        await create_test_link(test_db, hash="dupdup")

        with pytest.raises(DuplicateEntityError) as excinfo:
            await link_repository.insert(test_db, {
                "hash": "dupdup",
                "original_url": random_url(),
                "current_url": random_url(),
            })

        assert excinfo.value.field_name == "hash"
        assert excinfo.value.value == "dupdup"

    @pytest.mark.asyncio
    async def test_find_by_hash_missing(self, test_db, link_repository):
        assert await link_repository.find_by_hash(test_db, "nohash") is None

    @pytest.mark.asyncio
    async def test_deleted_links_are_hidden(self, test_db, link_repository):
        link = await create_test_link(test_db, hash="gone01")
        await link_repository.soft_delete_link(test_db, link)
        await test_db.commit()

        assert await link_repository.find_by_hash(test_db, "gone01") is None
        assert await link_repository.find_by_id(test_db, link.id) is None

        # The row itself is kept
        result = await test_db.execute(select(Link).where(Link.hash == "gone01"))
        row = result.scalar_one()
        assert row.deleted_at is not None

    @pytest.mark.asyncio
    async def test_exists_by_hash_counts_deleted(self, test_db, link_repository):
        link = await create_test_link(test_db, hash="taken1")
        assert await link_repository.exists_by_hash(test_db, "taken1") is True
        assert await link_repository.exists_by_hash(test_db, "free01") is False

        await link_repository.soft_delete_link(test_db, link)
        assert await link_repository.exists_by_hash(test_db, "taken1") is True

    @pytest.mark.asyncio
    async def test_find_by_owner(self, test_db, link_repository):
        owner = await create_test_user(test_db)
        stranger = await create_test_user(test_db)
        now = utc_now()

        first = await create_test_link(test_db, hash="first1", user_id=owner.id)
        first.created_at = now - timedelta(minutes=2)
        second = await create_test_link(test_db, hash="secnd2", user_id=owner.id)
        second.created_at = now - timedelta(minutes=1)
        deleted = await create_test_link(test_db, hash="delet3", user_id=owner.id)
        await create_test_link(test_db, hash="other4", user_id=stranger.id)
        await create_test_link(test_db, hash="anony5")
        await test_db.flush()
        await link_repository.soft_delete_link(test_db, deleted)

        links = await link_repository.find_by_owner(test_db, owner.id)

        assert [link.hash for link in links] == ["first1", "secnd2"]

    @pytest.mark.asyncio
    async def test_find_by_owner_unknown(self, test_db, link_repository):
        assert await link_repository.find_by_owner(test_db, uuid.uuid4()) == []

    @pytest.mark.asyncio
    async def test_update_current_url(self, test_db, link_repository):
        link = await create_test_link(test_db, hash="upd001", original_url="https://example.com/a")
        before = link.updated_at

        updated = await link_repository.update_current_url(test_db, link, "https://example.com/b")

        assert updated.current_url == "https://example.com/b"
        assert updated.original_url == "https://example.com/a"
        assert updated.updated_at >= before

    @pytest.mark.asyncio
    async def test_add_clicks(self, test_db, link_repository):
        link = await create_test_link(test_db, hash="click1", times_clicked=3)

        updated = await link_repository.add_clicks(test_db, link, 4)

        assert updated.times_clicked == 7

    @pytest.mark.asyncio
    async def test_add_clicks_rejects_non_positive(self, test_db, link_repository):
        link = await create_test_link(test_db, hash="click2")

        with pytest.raises(ValueError):
            await link_repository.add_clicks(test_db, link, 0)
