"""Async database access for the portal.

One ``Database`` owns the SQLAlchemy 2.0 asyncio engine and session factory
for a URL. The application builds it at startup and keeps it on
``app.state``; PostgreSQL (asyncpg) is the production target, in-memory
SQLite (aiosqlite) serves local runs and tests.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from portal.config import settings


def _engine_options(url: str) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": settings.log_level.upper() == "DEBUG"}
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        if parsed.database in (None, "", ":memory:"):
            # Every session must see the same in-memory database
            options.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
        return options

    options.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=30,
        pool_recycle=1800,
        pool_pre_ping=True,
    )
    return options


class Database:
    """Engine and session factory for one database URL.

    Creating the engine does not connect; the first session does.
    """

    def __init__(self, url: str | None = None):
        self.url = url or settings.database_url
        self.engine = create_async_engine(self.url, **_engine_options(self.url))
        self.sessions = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session for one request and close it afterwards."""
        async with self.sessions() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Session that commits on success and rolls back on error."""
        async with self.sessions() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_schema(self) -> None:
        """Create missing tables."""
        from portal.persistence.tables import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    async def ping(self) -> bool:
        """Check database connectivity."""
        try:
            async with self.transaction() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception:
            return False
