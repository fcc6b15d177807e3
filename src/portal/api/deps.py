"""Shared FastAPI dependencies for portal routers.

The cache store and the database are created once by the application
factory and kept on ``app.state``; handlers receive them through these
dependencies rather than module-level singletons.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from portal.cache import RedisCacheService
from portal.persistence import Database, UnitOfWork


def get_cache(request: Request) -> RedisCacheService:
    """The application's cache store."""
    cache: RedisCacheService = request.app.state.cache
    return cache


def get_database(request: Request) -> Database:
    database: Database = request.app.state.database
    return database


async def get_session(
    database: Database = Depends(get_database),
) -> AsyncIterator[AsyncSession]:
    """One session per request, closed when the response is done."""
    async for session in database.session():
        yield session


async def get_unit_of_work(
    session: AsyncSession = Depends(get_session),
) -> UnitOfWork:
    """Repositories for this request, sharing one session."""
    return UnitOfWork(session)


CacheDep = Annotated[RedisCacheService, Depends(get_cache)]
DatabaseDep = Annotated[Database, Depends(get_database)]
UnitOfWorkDep = Annotated[UnitOfWork, Depends(get_unit_of_work)]
