"""CLI commands for inspecting and clearing the cache namespace.

Usage:
    portal cache keys
    portal cache keys "Student*"
    portal cache flush "Course*"
    portal cache reset
"""

from __future__ import annotations

import asyncio

import typer

from portal.cache import CacheError, RedisCacheService
from portal.observability import LogContext, configure_logging

app = typer.Typer(help="Inspect and clear the cache namespace", no_args_is_help=True)


def _service(redis_url: str | None, prefix: str | None) -> RedisCacheService:
    configure_logging(json_format=False, level="WARNING")
    return RedisCacheService(url=redis_url, prefix=prefix)


@app.command("keys")
def list_keys(
    pattern: str = typer.Argument("*", help="Key pattern inside the namespace"),
    redis_url: str | None = typer.Option(None, "--redis-url", help="Redis URL"),
    prefix: str | None = typer.Option(None, "--prefix", help="Cache namespace"),
) -> None:
    """List cache keys matching a pattern."""
    service = _service(redis_url, prefix)

    async def run() -> list[str]:
        try:
            return await service.get_keys(service.keys.pattern(pattern))
        finally:
            await service.close()

    try:
        keys = asyncio.run(run())
    except CacheError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    for key in sorted(keys):
        typer.echo(key)
    typer.echo(f"{len(keys)} key(s)", err=True)


@app.command("flush")
def flush(
    pattern: str = typer.Argument("*", help="Key pattern inside the namespace"),
    redis_url: str | None = typer.Option(None, "--redis-url", help="Redis URL"),
    prefix: str | None = typer.Option(None, "--prefix", help="Cache namespace"),
) -> None:
    """Remove every cache key matching a pattern."""
    service = _service(redis_url, prefix)

    async def run() -> bool:
        with LogContext(request_id="cli-flush"):
            try:
                return await service.remove_all_keys(pattern)
            finally:
                await service.close()

    try:
        succeeded = asyncio.run(run())
    except CacheError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    if not succeeded:
        typer.echo("Some keys could not be removed", err=True)
        raise typer.Exit(1)
    typer.echo("Removed")


@app.command("reset")
def reset(
    redis_url: str | None = typer.Option(None, "--redis-url", help="Redis URL"),
    prefix: str | None = typer.Option(None, "--prefix", help="Cache namespace"),
) -> None:
    """Flush every key of the namespace."""
    service = _service(redis_url, prefix)

    async def run() -> BaseException | None:
        with LogContext(request_id="cli-reset"):
            task = service.reset()
            try:
                await asyncio.gather(task, return_exceptions=True)
            finally:
                await service.close()
            return None if task.cancelled() else task.exception()

    failure = asyncio.run(run())
    if failure is not None:
        typer.echo(f"Error: {failure}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Flushed namespace {service.keys.prefix}")
