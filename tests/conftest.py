"""Test fixtures for the link shortener application."""

import fnmatch
import os

# Settings are read when app modules are first imported
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["LOG_TO_FILE"] = "false"
os.environ["DB_CREATE_TABLES"] = "false"
os.environ["BASE_URL"] = "http://testserver/link"
os.environ["BCRYPT_SALT_ROUNDS"] = "4"

from typing import AsyncGenerator, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app.api.dependencies import get_redis
from app.db.session import get_db
from app.main import app as main_app
from app.repositories.link_repository import LinkRepository
from app.services.click_accumulator import ClickAccumulator
from app.services.click_flush import ClickFlushService
from app.services.hash_generator import HashGenerator
from app.services.links import LinkService
from tests.utils import TEST_BASE_URL, create_test_user

# Test database URL - using SQLite in-memory
TEST_SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class MockRedis:
    """In-memory stand-in for the redis-py asyncio client (decode_responses=True)."""

    def __init__(self):
        self.data: Dict[str, str] = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = str(value)
        return True

    async def incr(self, key):
        return await self.incrby(key, 1)

    async def incrby(self, key, amount):
        value = int(self.data.get(key, 0)) + amount
        self.data[key] = str(value)
        return value

    async def getdel(self, key):
        return self.data.pop(key, None)

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    async def scan_iter(self, match=None, count=None):
        for key in list(self.data):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    async def ping(self):
        return True

    async def aclose(self):
        pass


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory SQLite database for each test."""
    engine = create_async_engine(
        TEST_SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Database session bound to the test engine."""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_redis() -> MockRedis:
    return MockRedis()


@pytest.fixture
def link_repository() -> LinkRepository:
    return LinkRepository()


@pytest.fixture
def click_accumulator(mock_redis) -> ClickAccumulator:
    return ClickAccumulator(mock_redis)


@pytest.fixture
def link_service(link_repository, click_accumulator) -> LinkService:
    return LinkService(
        link_repository=link_repository,
        click_accumulator=click_accumulator,
        hash_generator=HashGenerator(),
        base_url=TEST_BASE_URL,
    )


@pytest.fixture
def flush_service(link_repository, click_accumulator) -> ClickFlushService:
    return ClickFlushService(link_repository, click_accumulator)


@pytest_asyncio.fixture
async def test_user(test_db):
    user = await create_test_user(test_db, email="owner@example.com")
    await test_db.commit()
    return user


@pytest_asyncio.fixture
async def other_user(test_db):
    user = await create_test_user(test_db, email="other@example.com")
    await test_db.commit()
    return user


@pytest_asyncio.fixture
async def client(test_db, mock_redis) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client calling the app in-process with test database and Redis."""
    async def _override_get_db():
        yield test_db

    main_app.dependency_overrides[get_db] = _override_get_db
    main_app.dependency_overrides[get_redis] = lambda: mock_redis

    transport = ASGITransport(app=main_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client

    main_app.dependency_overrides.clear()
