"""Cache administration endpoints.

- GET    /cache/keys           - List namespaced keys matching a pattern
- DELETE /cache/keys           - Remove namespaced keys matching a pattern
- GET    /cache/hash/{name}    - All decoded field values of a hash record
- POST   /cache/reset          - Flush the whole namespace (fire-and-forget)

Patterns are relative to the namespace: ``Student*`` matches
``{prefix}:StudentData``.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Query
from pydantic import BaseModel

from portal.api.deps import CacheDep
from portal.api.errors import BadRequestError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cache", tags=["Cache"])

_MAX_PATTERN_LENGTH = 256


def _validate_pattern(pattern: str) -> str:
    cleaned = pattern.strip()
    if not cleaned:
        raise BadRequestError("Pattern must not be empty")
    if len(cleaned) > _MAX_PATTERN_LENGTH:
        raise BadRequestError("Pattern is too long")
    return cleaned


class InvalidationResult(BaseModel):
    """Result of a cache invalidation operation."""

    pattern: str
    succeeded: bool
    timestamp: datetime


@router.get("/keys", response_model=list[str])
async def list_cache_keys(
    cache: CacheDep,
    pattern: str = Query(default="*", description="Key pattern inside the namespace"),
) -> list[str]:
    return await cache.get_keys(cache.keys.pattern(_validate_pattern(pattern)))


@router.delete("/keys", response_model=InvalidationResult)
async def remove_cache_keys(
    cache: CacheDep,
    pattern: str = Query(default="*", description="Key pattern inside the namespace"),
) -> InvalidationResult:
    pattern = _validate_pattern(pattern)
    succeeded = await cache.remove_all_keys(pattern)
    return InvalidationResult(
        pattern=cache.keys.pattern(pattern),
        succeeded=succeeded,
        timestamp=datetime.now(UTC),
    )


@router.get("/hash/{name}", response_model=list[Any])
async def get_hash_values(name: str, cache: CacheDep) -> list[Any]:
    return await cache.get_values(name)


@router.post("/reset", status_code=202)
async def reset_cache(cache: CacheDep) -> dict[str, str]:
    """Schedule a flush of every key in the namespace."""
    cache.reset()
    logger.info(f"Scheduled flush of cache namespace {cache.keys.prefix}")
    return {"status": "accepted", "namespace": cache.keys.prefix}
