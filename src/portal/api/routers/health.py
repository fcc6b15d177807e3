"""Health probes.

- /health/live  - The process is up
- /health/ready - Database and Redis both answer (503 otherwise)
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Literal

from fastapi import APIRouter
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel

from portal.api.deps import CacheDep, DatabaseDep

router = APIRouter(prefix="/health", tags=["health"])

PROBE_TIMEOUT_SECONDS = 5.0

Status = Literal["healthy", "unhealthy"]


class ComponentHealth(BaseModel):
    name: str
    status: Status
    latency_ms: float
    message: str | None = None


class Readiness(BaseModel):
    status: Status
    components: list[ComponentHealth]


async def _probe(name: str, check: Callable[[], Awaitable[bool]]) -> ComponentHealth:
    started = time.perf_counter()
    try:
        ok = await asyncio.wait_for(check(), timeout=PROBE_TIMEOUT_SECONDS)
        message = None if ok else f"{name} check failed"
    except TimeoutError:
        ok, message = False, f"{name} check timed out"
    return ComponentHealth(
        name=name,
        status="healthy" if ok else "unhealthy",
        latency_ms=round((time.perf_counter() - started) * 1000, 2),
        message=message,
    )


@router.get("/live")
async def liveness() -> dict[str, Status]:
    return {"status": "healthy"}


@router.get("/ready", response_model=Readiness)
async def readiness(cache: CacheDep, database: DatabaseDep) -> ORJSONResponse:
    components = await asyncio.gather(
        _probe("database", database.ping),
        _probe("redis", cache.health_check),
    )
    ready = all(component.status == "healthy" for component in components)
    body = Readiness(status="healthy" if ready else "unhealthy", components=list(components))
    return ORJSONResponse(
        status_code=200 if ready else 503, content=body.model_dump(exclude_none=True)
    )
