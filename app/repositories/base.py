"""Base repository implementation for the link shortener application.

This module provides a generic BaseRepository class that follows the Repository pattern
for database operations, serving as a foundation for more specific repositories.
Models carrying a ``deleted_at`` column are soft deleted: their rows stay in the
table but every read made through the repository skips them.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar
import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel

from app.models.base import utc_now

# Type variable for model types
T = TypeVar("T", bound=SQLModel)

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Base exception for repository errors."""
    pass


class EntityNotFoundError(RepositoryError):
    """Exception raised when an entity cannot be found."""

    def __init__(self, model_type: Type[SQLModel], entity_id: Any):
        self.model_type = model_type
        self.entity_id = entity_id
        model_name = getattr(model_type, "__name__", "Entity")
        super().__init__(f"{model_name} with id {entity_id} not found")


class DuplicateEntityError(RepositoryError):
    """Exception raised when a unique constraint is violated."""

    def __init__(self, model_type: Type[SQLModel], field_name: str, value: Any):
        self.model_type = model_type
        self.field_name = field_name
        self.value = value
        model_name = getattr(model_type, "__name__", "Entity")
        super().__init__(f"{model_name} with {field_name}={value} already exists")


class BaseRepository(Generic[T]):
    """
    Base repository implementing common CRUD operations for SQLModel entities.

    Type parameters:
        T: The SQLModel type this repository manages
    """

    def __init__(self, model_type: Type[T]):
        """
        Initialize the repository with a specific model type.

        Args:
            model_type: The SQLModel class this repository will work with
        """
        self.model_type = model_type

    @property
    def soft_deletes(self) -> bool:
        return hasattr(self.model_type, "deleted_at")

    def _not_deleted(self, query):
        """Restrict a select to rows that are not soft deleted."""
        if self.soft_deletes:
            return query.where(self.model_type.deleted_at.is_(None))
        return query

    async def get_by_id(self, db: AsyncSession, id: Any) -> Optional[T]:
        """
        Get a live entity by its ID.

        Args:
            db: Database session
            id: Entity ID

        Returns:
            The entity if found and not soft deleted, None otherwise
        """
        try:
            query = self._not_deleted(select(self.model_type).where(self.model_type.id == id))
            result = await db.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving {self.model_type.__name__} with id {id}: {e}")
            raise RepositoryError(f"Database error retrieving entity: {e}") from e

    async def get_by_id_or_raise(self, db: AsyncSession, id: Any) -> T:
        """
        Get a live entity by its ID.

        Raises:
            EntityNotFoundError: If the entity is missing or soft deleted
        """
        entity = await self.get_by_id(db, id)
        if entity is None:
            raise EntityNotFoundError(self.model_type, id)
        return entity

    async def find_by(self, db: AsyncSession, order_by: Optional[Any] = None, **filters) -> List[T]:
        """
        Get all live entities matching ``field=value`` filters.

        Args:
            db: Database session
            order_by: Column, expression or sequence of them to order by
            **filters: Field=value pairs to filter by

        Returns:
            List of entities
        """
        try:
            conditions = [getattr(self.model_type, field) == value for field, value in filters.items()]
            query = self._not_deleted(select(self.model_type).where(*conditions))
            if isinstance(order_by, (list, tuple)):
                query = query.order_by(*order_by)
            elif order_by is not None:
                query = query.order_by(order_by)

            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving {self.model_type.__name__} list: {e}")
            raise RepositoryError(f"Database error retrieving entities: {e}") from e

    async def create(self, db: AsyncSession, data: Dict[str, Any]) -> T:
        """
        Create a new entity.

        Args:
            db: Database session
            data: Entity field values

        Returns:
            The created entity

        Raises:
            RepositoryError: On database errors
        """
        try:
            entity = self.model_type(**data)
            db.add(entity)
            await db.flush()  # Flush to surface constraint errors but don't commit yet
            await db.refresh(entity)
            return entity
        except SQLAlchemyError as e:
            logger.error(f"Error creating {self.model_type.__name__}: {e}")
            raise RepositoryError(f"Database error creating entity: {e}") from e

    async def update(self, db: AsyncSession, entity: T, data: Dict[str, Any]) -> T:
        """
        Apply field changes to a loaded entity and write them.

        ``updated_at`` is advanced on every write when the model has one.

        Args:
            db: Database session
            entity: Entity previously loaded through this session
            data: Field=value pairs to change

        Returns:
            The updated entity

        Raises:
            RepositoryError: On database errors
        """
        try:
            for key, value in data.items():
                setattr(entity, key, value)
            if hasattr(entity, "updated_at"):
                entity.updated_at = utc_now()

            db.add(entity)
            await db.flush()
            await db.refresh(entity)
            return entity
        except SQLAlchemyError as e:
            logger.error(f"Error updating {self.model_type.__name__}: {e}")
            raise RepositoryError(f"Database error updating entity: {e}") from e

    async def soft_delete(self, db: AsyncSession, entity: T) -> T:
        """
        Mark an entity as deleted without removing its row.

        Raises:
            RepositoryError: On database errors, or if the model has no ``deleted_at``
        """
        if not self.soft_deletes:
            raise RepositoryError(f"{self.model_type.__name__} does not support soft delete")
        return await self.update(db, entity, {"deleted_at": utc_now()})

    async def exists(self, db: AsyncSession, include_deleted: bool = False, **filters) -> bool:
        """
        Check if an entity exists with the given filters.

        Args:
            db: Database session
            include_deleted: Also count soft deleted rows
            **filters: Field=value pairs to filter by

        Returns:
            True if entity exists, False otherwise

        Raises:
            RepositoryError: On database errors
        """
        if not filters:
            raise ValueError("No conditions provided for exists check")

        try:
            conditions = [getattr(self.model_type, field) == value for field, value in filters.items()]
            query = select(func.count()).select_from(self.model_type).where(*conditions)
            if not include_deleted:
                query = self._not_deleted(query)

            result = await db.execute(query)
            return result.scalar_one() > 0
        except SQLAlchemyError as e:
            logger.error(f"Error checking existence of {self.model_type.__name__}: {e}")
            raise RepositoryError(f"Database error checking entity existence: {e}") from e
