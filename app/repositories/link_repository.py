"""Link Repository for the link shortener application.

This module provides the LinkRepository class for database operations related to Link models.
Every lookup except ``exists_by_hash`` ignores soft deleted links.
"""

import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.models.link import Link
from app.repositories.base import BaseRepository, RepositoryError, DuplicateEntityError


class LinkRepository(BaseRepository[Link]):
    """
    Repository for Link model database operations.

    This is the link store: creation, lookups by hash, id and owner, owner
    edits, soft deletion and folding flushed clicks into ``times_clicked``.
    """

    def __init__(self):
        """Initialize the repository with the Link model type."""
        super().__init__(Link)

    async def insert(self, db: AsyncSession, data: Dict[str, Any]) -> Link:
        """
        Persist a new link.

        The unique index on ``hash`` is the final guard against two requests
        picking the same code concurrently.

        Args:
            db: Database session
            data: Link field values

        Returns:
            The created Link entity

        Raises:
            DuplicateEntityError: If the hash is already taken
            RepositoryError: On other database errors
        """
        try:
            entity = Link(**data)
            db.add(entity)
            await db.flush()
            await db.refresh(entity)
            return entity
        except IntegrityError as e:
            message = str(e.orig if e.orig is not None else e).lower()
            if "unique" in message or "duplicate key" in message:
                raise DuplicateEntityError(self.model_type, "hash", data.get("hash")) from e
            raise RepositoryError(f"Database error creating link: {e}") from e
        except SQLAlchemyError as e:
            raise RepositoryError(f"Database error creating link: {e}") from e

    async def find_by_hash(self, db: AsyncSession, hash: str) -> Optional[Link]:
        """
        Find a live link by its hash.

        Args:
            db: Database session
            hash: The link hash to look up

        Returns:
            The Link if found and not deleted, None otherwise

        Raises:
            RepositoryError: On database errors
        """
        try:
            query = self._not_deleted(select(Link).where(Link.hash == hash))
            result = await db.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error retrieving link by hash: {e}") from e

    async def find_by_id(self, db: AsyncSession, link_id: uuid.UUID) -> Optional[Link]:
        return await self.get_by_id(db, link_id)

    async def find_by_owner(self, db: AsyncSession, owner_id: uuid.UUID) -> List[Link]:
        """
        List the live links owned by a user, oldest first.

        Raises:
            RepositoryError: On database errors
        """
        return await self.find_by(
            db,
            order_by=(Link.created_at, Link.id),
            user_id=owner_id,
        )

    async def exists_by_hash(self, db: AsyncSession, hash: str) -> bool:
        """
        Check whether a hash is taken.

        Soft deleted links keep their row and the unique index covers every
        row, so their hashes stay taken as well.
        """
        return await self.exists(db, include_deleted=True, hash=hash)

    async def update_current_url(self, db: AsyncSession, link: Link, current_url: str) -> Link:
        return await self.update(db, link, {"current_url": current_url})

    async def soft_delete_link(self, db: AsyncSession, link: Link) -> Link:
        return await self.soft_delete(db, link)

    async def add_clicks(self, db: AsyncSession, link: Link, clicks: int) -> Link:
        """
        Add flushed clicks to a link's counter.

        The increment is computed by the database (``times_clicked + n``), so a
        concurrent owner edit of the same row cannot overwrite the count.

        Args:
            db: Database session
            link: The link to credit
            clicks: Number of clicks to add; must be positive

        Returns:
            The refreshed Link

        Raises:
            RepositoryError: On database errors
        """
        if clicks <= 0:
            raise ValueError("clicks must be positive")
        return await self.update(db, link, {"times_clicked": Link.times_clicked + clicks})
