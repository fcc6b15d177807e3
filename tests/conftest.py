"""Global pytest configuration and fixtures.

Cache tests run against an in-process fakeredis server; database tests use an
in-memory aiosqlite database with the portal schema created per test.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import fakeredis
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.app import create_app
from portal.cache import RedisCacheService
from portal.config import settings
from portal.persistence import Database

TEST_PREFIX = "test"


@pytest_asyncio.fixture
async def fake_redis() -> AsyncIterator[fakeredis.aioredis.FakeRedis]:
    """Redis client bound to a private fake server."""
    client = fakeredis.aioredis.FakeRedis(server=fakeredis.FakeServer())
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def cache(fake_redis: fakeredis.aioredis.FakeRedis) -> AsyncIterator[RedisCacheService]:
    """Cache store using the ``test`` namespace."""
    service = RedisCacheService(prefix=TEST_PREFIX, default_ttl=15, client=fake_redis)
    yield service
    # Let scheduled flushes finish before the client goes away
    await service.close()


@pytest_asyncio.fixture
async def database() -> AsyncIterator[Database]:
    database = Database("sqlite+aiosqlite:///:memory:")
    await database.create_schema()
    yield database
    await database.dispose()


@pytest_asyncio.fixture
async def session(database: Database) -> AsyncIterator[AsyncSession]:
    async with database.sessions() as session:
        yield session


@pytest_asyncio.fixture
async def client(cache: RedisCacheService, database: Database) -> AsyncIterator[AsyncClient]:
    """HTTP client for the full application.

    Lifespan hooks are not run, so no real database or Redis is contacted.
    Unhandled errors reach the generic handler instead of the test.
    """
    app = create_app(cache_service=cache, database=database)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http


@pytest.fixture
def invalidate_on_write(monkeypatch: pytest.MonkeyPatch) -> None:
    """Have cached collections drop their key after each write."""
    monkeypatch.setattr(settings, "cache_invalidate_on_write", True)
