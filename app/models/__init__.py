"""
Data models for the link shortener application.

This module imports and exports all SQLModel models used in the application.
"""

from sqlmodel import SQLModel

from app.models.base import TimestampedModel, as_utc, utc_now

# Table models in dependency order (users before links)
from app.models.user import User, UserView
from app.models.link import Link, LinkBase, LinkView, build_short_url

__all__ = [
    "SQLModel",
    "TimestampedModel",
    "as_utc",
    "utc_now",
    "User",
    "UserView",
    "Link",
    "LinkBase",
    "LinkView",
    "build_short_url",
]
