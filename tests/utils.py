"""Test utilities for link shortener tests."""

import random
import string
import uuid
from datetime import datetime
from typing import Dict, Optional

from app.core.security import create_access_token, hash_password
from app.models.link import Link
from app.models.user import User

TEST_PASSWORD = "secret123"
TEST_BASE_URL = "http://testserver/link"


def random_string(length: int = 10) -> str:
    """Generate a random alphanumeric string."""
    return ''.join(random.choice(string.ascii_letters + string.digits) for _ in range(length))


def random_url() -> str:
    """Generate a random URL for testing."""
    domain = f"{random_string(8).lower()}.com"
    path = random_string(12)
    return f"https://{domain}/{path}"


async def create_test_user(
    db,
    email: Optional[str] = None,
    password: str = TEST_PASSWORD,
    name: Optional[str] = "Test User",
) -> User:
    """Create and persist a test User in the database."""
    user = User(
        email=email or f"{random_string(8).lower()}@example.com",
        name=name,
        password_hash=hash_password(password, rounds=4),
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


async def create_test_link(
    db,
    hash: Optional[str] = None,
    original_url: Optional[str] = None,
    user_id: Optional[uuid.UUID] = None,
    expires_at: Optional[datetime] = None,
    times_clicked: int = 0,
) -> Link:
    """Create and persist a test Link in the database."""
    url = original_url or random_url()
    link = Link(
        hash=hash or random_string(6),
        original_url=url,
        current_url=url,
        user_id=user_id,
        expires_at=expires_at,
        times_clicked=times_clicked,
    )
    db.add(link)
    await db.flush()
    await db.refresh(link)
    return link


def auth_headers(user_id) -> Dict[str, str]:
    """Authorization header carrying a fresh token for ``user_id``."""
    token, _ = create_access_token(str(user_id))
    return {"Authorization": f"Bearer {token}"}
