"""Link lifecycle service for the link shortener application.

This module contains the LinkService class which implements the business logic
for creating, resolving, editing, deleting and listing short links.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db.session import db_transaction
from app.models.base import as_utc
from app.models.link import Link, LinkView
from app.repositories.base import DuplicateEntityError
from app.repositories.link_repository import LinkRepository
from app.services.click_accumulator import ClickAccumulator
from app.services.exceptions import (
    HashGenerationError,
    LinkExpiredError,
    LinkForbiddenError,
    LinkNotFoundError,
)
from app.services.hash_generator import HashGenerator

logger = logging.getLogger(__name__)


class LinkService:
    """
    Service for link lifecycle operations.

    Collaborators are passed in by the caller; the service keeps no state of
    its own between calls. Repository errors are not caught here and reach
    the caller unchanged.
    """

    def __init__(
        self,
        link_repository: LinkRepository,
        click_accumulator: ClickAccumulator,
        hash_generator: Optional[HashGenerator] = None,
        base_url: Optional[str] = None,
        max_attempts: Optional[int] = None,
    ):
        """
        Initialize the link service.

        Args:
            link_repository: Link store
            click_accumulator: Pending click counters
            hash_generator: Source of candidate hashes
            base_url: Prefix of every ``short_url``, defaults to BASE_URL
            max_attempts: Hash draws allowed per creation, defaults to LINK_HASH_MAX_ATTEMPTS
        """
        self.link_repository = link_repository
        self.click_accumulator = click_accumulator
        self.hash_generator = hash_generator or HashGenerator()
        self.base_url = base_url or settings.BASE_URL
        self.max_attempts = max_attempts or settings.LINK_HASH_MAX_ATTEMPTS

    def to_view(self, link: Link) -> LinkView:
        return LinkView.from_link(link, self.base_url)

    @db_transaction(db_param_name="db")
    async def create_link(
        self,
        db: AsyncSession,
        original_url: str,
        expires_at: Optional[datetime] = None,
        owner_id: Optional[uuid.UUID] = None,
    ) -> LinkView:
        """
        Create a short link for ``original_url``.

        Candidate hashes are drawn until one is unused. The unique index on
        ``hash`` settles races with concurrent creations: a rejected insert
        is rolled back and counts as a failed draw.

        Args:
            db: Database session
            original_url: Absolute URL, already validated by the caller
            expires_at: Optional expiry, naive values are taken as UTC
            owner_id: Owning user, None for an anonymous link

        Returns:
            LinkView: The created link with its short URL

        Raises:
            HashGenerationError: If no unused hash was found within the attempt limit
            RepositoryError: On database errors
        """
        original_url = str(original_url)
        expires_at = as_utc(expires_at)

        for attempt in range(1, self.max_attempts + 1):
            candidate = self.hash_generator.generate()
            if await self.link_repository.exists_by_hash(db, candidate):
                logger.debug(f"Hash collision on attempt {attempt}: {candidate}")
                continue

            try:
                link = await self.link_repository.insert(db, {
                    "hash": candidate,
                    "original_url": original_url,
                    "current_url": original_url,
                    "times_clicked": 0,
                    "expires_at": expires_at,
                    "user_id": owner_id,
                })
            except DuplicateEntityError:
                logger.warning(f"Hash {candidate} was taken concurrently, drawing again")
                await db.rollback()
                continue

            logger.info(f"Created link {link.hash} for {'user ' + str(owner_id) if owner_id else 'anonymous caller'}")
            return self.to_view(link)

        logger.error(f"No unused hash found after {self.max_attempts} attempts")
        raise HashGenerationError(f"Could not generate a unique hash after {self.max_attempts} attempts")

    async def access_link(self, db: AsyncSession, hash: str) -> str:
        """
        Resolve a hash to its redirect target and record one click.

        The click goes to the accumulator only; this path never writes to the
        link store.

        Returns:
            The link's ``current_url``

        Raises:
            LinkNotFoundError: If no live link has this hash
            LinkExpiredError: If the link's expiry is in the past
        """
        link = await self.link_repository.find_by_hash(db, hash)
        if link is None:
            raise LinkNotFoundError(hash)
        if link.is_expired():
            raise LinkExpiredError(hash)

        await self.click_accumulator.increment(link.id)
        return link.current_url

    async def _get_owned_link(self, db: AsyncSession, hash: str, caller_id: Optional[uuid.UUID]) -> Link:
        link = await self.link_repository.find_by_hash(db, hash)
        if link is None:
            raise LinkNotFoundError(hash)
        if not link.is_owned_by(caller_id):
            logger.info(f"Caller {caller_id or 'anonymous'} refused on link {hash}")
            raise LinkForbiddenError()
        return link

    @db_transaction(db_param_name="db")
    async def update_link(
        self,
        db: AsyncSession,
        hash: str,
        current_url: str,
        caller_id: Optional[uuid.UUID],
    ) -> LinkView:
        """
        Point a link at a new destination.

        Expired links can still be edited. Concurrent edits are not serialised:
        the last write wins.

        Raises:
            LinkNotFoundError: If no live link has this hash
            LinkForbiddenError: Unless the caller owns the link
        """
        link = await self._get_owned_link(db, hash, caller_id)
        link = await self.link_repository.update_current_url(db, link, str(current_url))
        logger.info(f"Link {hash} now points to {link.current_url}")
        return self.to_view(link)

    @db_transaction(db_param_name="db")
    async def delete_link(self, db: AsyncSession, hash: str, caller_id: Optional[uuid.UUID]) -> None:
        """
        Soft delete a link; its row stays and its hash remains reserved.

        Raises:
            LinkNotFoundError: If no live link has this hash
            LinkForbiddenError: Unless the caller owns the link
        """
        link = await self._get_owned_link(db, hash, caller_id)
        await self.link_repository.soft_delete_link(db, link)
        logger.info(f"Link {hash} deleted by {caller_id}")

    async def list_links_by_owner(self, db: AsyncSession, caller_id: Optional[uuid.UUID]) -> List[LinkView]:
        """
        List the caller's live links, oldest first.

        Raises:
            LinkForbiddenError: For an anonymous caller
        """
        if not caller_id:
            raise LinkForbiddenError()
        links = await self.link_repository.find_by_owner(db, caller_id)
        return [self.to_view(link) for link in links]
