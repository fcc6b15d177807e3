"""FastAPI application factory for the student portal.

Creates the application with:
- CRUD routers for students, staff, courses, payment methods,
  course registrations and student progress
- Cache administration and health endpoints
- Lifecycle management for the database and the cache-aside store
- Uniform Result/Message error responses
- ORJSON for fast JSON serialization
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse
from starlette.middleware.gzip import GZipMiddleware
from starlette.types import ExceptionHandler

from portal import __version__
from portal.api.errors import (
    PortalApiError,
    cache_exception_handler,
    generic_exception_handler,
    portal_api_exception_handler,
)
from portal.api.middleware import CorrelationMiddleware
from portal.api.routers import (
    cache,
    course_registrations,
    courses,
    health,
    payment_methods,
    staff,
    student_progress,
    students,
)
from portal.cache import CacheError, RedisCacheService
from portal.config import settings
from portal.observability import configure_logging
from portal.persistence import Database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    On startup the logging is configured and, in development, the tables are
    created. Redis and database connections open lazily on first use.

    On shutdown pending cache flushes are awaited before the cache and
    database connections close.
    """
    configure_logging(
        json_format=settings.env != "dev",
        level=settings.log_level,
    )

    logger.info(f"Starting {settings.app_name} ({settings.env})")
    if settings.env == "dev":
        await app.state.database.create_schema()

    yield

    logger.info(f"Shutting down {settings.app_name}")
    await app.state.cache.close()
    await app.state.database.dispose()
    logger.info(f"{settings.app_name} shutdown complete")


def create_app(
    cache_service: RedisCacheService | None = None,
    database: Database | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        cache_service: Cache-aside store to use. A store built from the
            settings is created when omitted.
        database: Database to use, likewise built from the settings when omitted.
    """
    app = FastAPI(
        title="Student Portal API",
        description="CRUD API for a student portal backed by a Redis cache-aside store",
        version=__version__,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.cache = cache_service if cache_service is not None else RedisCacheService()
    app.state.database = database if database is not None else Database()

    app.add_middleware(CorrelationMiddleware)
    if settings.enable_compression:
        app.add_middleware(GZipMiddleware, minimum_size=settings.compression_min_size)

    app.add_exception_handler(PortalApiError, cast(ExceptionHandler, portal_api_exception_handler))
    app.add_exception_handler(CacheError, cast(ExceptionHandler, cache_exception_handler))
    app.add_exception_handler(Exception, cast(ExceptionHandler, generic_exception_handler))

    app.include_router(health.router)
    app.include_router(cache.router)

    app.include_router(students.router)
    app.include_router(staff.router)
    app.include_router(courses.router)
    app.include_router(payment_methods.router)
    app.include_router(course_registrations.router)
    app.include_router(student_progress.router)

    return app
