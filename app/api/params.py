"""Common API parameter definitions.

This module provides reusable parameter definitions for FastAPI endpoints.
"""

from fastapi import Path

from app.core.config import settings


def HashParam() -> str:
    """
    Link hash path parameter.

    Returns:
        A Path parameter accepting exactly LINK_HASH_LENGTH characters
    """
    return Path(
        ...,
        min_length=settings.LINK_HASH_LENGTH,
        max_length=settings.LINK_HASH_LENGTH,
        description="The link's short code",
    )
