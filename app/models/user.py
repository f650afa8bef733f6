"""User account data models."""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from app.models.base import TimestampedModel


class User(TimestampedModel, table=True):
    """Account that can own links and log in."""

    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: Optional[str] = Field(default=None, max_length=100)
    email: str = Field(max_length=150, unique=True, nullable=False)
    password_hash: str = Field(max_length=200, nullable=False)


class UserView(SQLModel):
    """Public representation of a user; never carries the password hash."""

    id: uuid.UUID
    email: str
    name: Optional[str] = None
    created_at: datetime
