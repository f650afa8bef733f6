"""Shared model columns and time helpers.

Every timestamp is stored as a timezone-aware UTC value. Some backends
(SQLite) hand naive values back, so readers normalise through ``as_utc``.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TimestampedModel(SQLModel):
    """Columns maintained by the store for every persisted record."""

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
        description="When the record was created",
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
        description="When the record was last written",
    )
    deleted_at: Optional[datetime] = Field(
        default=None,
        sa_type=DateTime(timezone=True),
        description="Soft delete marker; set rows are invisible to normal lookups",
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
