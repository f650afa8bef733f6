"""Short link data models.

This module defines the Link table and the view returned to API callers.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Index, Text
from sqlmodel import Field, SQLModel

from app.models.base import TimestampedModel, as_utc, utc_now


class LinkBase(SQLModel):
    """Base model for link data."""

    original_url: str = Field(
        sa_type=Text,
        nullable=False,
        description="The URL supplied at creation; never changes",
    )
    current_url: str = Field(
        sa_type=Text,
        nullable=False,
        description="The redirect target, editable by the owner",
    )
    expires_at: Optional[datetime] = Field(
        default=None,
        sa_type=DateTime(timezone=True),
        description="When this link stops redirecting (null means never)",
    )


class Link(LinkBase, TimestampedModel, table=True):
    """
    Short link record.

    ``hash`` is the 6 character code used in the redirect path. ``times_clicked``
    only holds clicks that the flush job has already moved out of the click
    accumulator, so it lags behind live traffic by up to one flush interval.
    """

    __tablename__ = "links"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    hash: str = Field(
        max_length=6,
        unique=True,
        nullable=False,
        description="Unique code identifying the link",
    )
    times_clicked: int = Field(
        default=0,
        sa_type=BigInteger,
        nullable=False,
        sa_column_kwargs={"server_default": "0"},
        description="Clicks flushed from the accumulator",
    )
    user_id: Optional[uuid.UUID] = Field(
        default=None,
        foreign_key="users.id",
        ondelete="SET NULL",
        description="Owner; null for anonymous links",
    )

    __table_args__ = (
        Index("ix_links_user_id_created_at", "user_id", "created_at"),
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the link has expired.

        A link whose expiry equals ``now`` is still valid.
        """
        if self.expires_at is None:
            return False
        return as_utc(self.expires_at) < (now or utc_now())

    def is_owned_by(self, user_id: Optional[uuid.UUID]) -> bool:
        """True only for an owned link whose owner is ``user_id``."""
        if not user_id or self.user_id is None:
            return False
        return str(self.user_id) == str(user_id)


class LinkView(SQLModel):
    """A link as returned to callers, with its derived short URL."""

    id: uuid.UUID
    hash: str
    original_url: str
    current_url: str
    times_clicked: int
    user_id: Optional[uuid.UUID] = None
    expires_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    short_url: str

    @classmethod
    def from_link(cls, link: Link, base_url: str) -> "LinkView":
        return cls(
            id=link.id,
            hash=link.hash,
            original_url=link.original_url,
            current_url=link.current_url,
            times_clicked=link.times_clicked,
            user_id=link.user_id,
            expires_at=as_utc(link.expires_at),
            created_at=as_utc(link.created_at),
            updated_at=as_utc(link.updated_at),
            short_url=build_short_url(base_url, link.hash),
        )


def build_short_url(base_url: str, hash: str) -> str:
    return f"{base_url.rstrip('/')}/{hash}"
