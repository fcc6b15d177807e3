"""Redis cache-aside store for the portal.

Provides async get-or-populate, hash get-or-populate and removal operations
over a namespaced Redis keyspace. Every value is round-tripped through the
JSON codec in ``portal.cache.codec``.

The Redis client is owned by the store instance. It is created on first use
behind a lock so concurrent first callers share one connection pool; the
application builds a single store at startup and hands it to handlers
explicitly.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from datetime import timedelta
from typing import TYPE_CHECKING, Any, TypeVar, cast

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from portal.cache.codec import decode, encode
from portal.cache.errors import BackingStoreUnavailableError, InvalidKeyError
from portal.cache.keys import CacheKeys
from portal.config import settings

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Zero-argument supplier of a value, sync or async
ValueFactory = Callable[[], T | Awaitable[T]]

Ttl = int | timedelta

# Deletes every key matching ARGV[1] in one server-side step
CLEAR_NAMESPACE_SCRIPT = """
for _, k in ipairs(redis.call('KEYS', ARGV[1])) do
    redis.call('DEL', k)
end
return 0
"""


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    """Translate Redis transport faults into BackingStoreUnavailableError."""
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError) as e:
        raise BackingStoreUnavailableError(f"Redis {operation} failed: {e}") from e


async def _produce(factory: ValueFactory[T]) -> T:
    """Invoke a value factory once, awaiting it when it is a coroutine."""
    value = factory()
    if inspect.isawaitable(value):
        value = await value
    return cast(T, value)


def _require(value: str | None, argument: str) -> str:
    if not value:
        raise InvalidKeyError(argument)
    return value


class RedisCacheService:
    """Cache-aside store over a namespaced Redis keyspace.

    Reads return the cached value when present, otherwise call the supplied
    factory, store its result with a TTL and return it. Nothing is retried:
    transport faults surface as BackingStoreUnavailableError.
    """

    def __init__(
        self,
        url: str | None = None,
        prefix: str | None = None,
        default_ttl: Ttl | None = None,
        client: Redis | None = None,
    ):
        self.url = url or settings.redis_url
        self.keys = CacheKeys(prefix or settings.cache_prefix)
        self.default_ttl: Ttl = (
            default_ttl if default_ttl is not None else settings.cache_default_ttl_seconds
        )
        self._client = client
        self._connection_lock = asyncio.Lock()
        self._background: set[asyncio.Task[None]] = set()

    async def _database(self) -> Redis:
        """Get or create the Redis client."""
        if self._client is not None:
            return self._client

        async with self._connection_lock:
            if self._client is None:
                self._client = redis.from_url(  # type: ignore[no-untyped-call]
                    self.url,
                    encoding="utf-8",
                    decode_responses=False,
                )
                logger.info(f"Connected cache store to {self.url} (prefix={self.keys.prefix})")
            return self._client

    async def close(self) -> None:
        """Wait for pending flushes and close the Redis connection pool."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
        async with self._connection_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None

    # -------------------------------------------------------------------------
    # Read-through operations
    # -------------------------------------------------------------------------

    async def get_or_set(
        self,
        key: str,
        factory: ValueFactory[T],
        ttl: Ttl | None = None,
        *,
        model: Any = None,
    ) -> T:
        """Return the cached value for ``key`` or populate it from ``factory``.

        Args:
            key: Logical key, namespaced with the configured prefix
            factory: Supplier called at most once, only on a miss
            ttl: Expiration override (seconds or timedelta)
            model: Type to validate cached payloads against, e.g. ``list[Student]``

        Returns:
            The decoded cached value on a hit, the factory result on a miss.
            A factory result of None is returned but never stored.

        Raises:
            InvalidKeyError: If ``key`` is empty
            BackingStoreUnavailableError: If the lookup cannot reach Redis
            SerializationError: If the cached payload does not match ``model``
        """
        full_key = self.keys.key(_require(key, "key"))
        db = await self._database()

        with _store_errors("GET"):
            raw = await db.get(full_key)

        if raw:
            logger.debug(f"Cache hit: {full_key}")
            return cast(T, decode(full_key, raw, model))

        logger.debug(f"Cache miss: {full_key}")
        value = await _produce(factory)
        if value is not None:
            payload = encode(full_key, value)
            expiration = ttl if ttl is not None else self.default_ttl
            try:
                with _store_errors("SET"):
                    await db.set(full_key, payload, ex=expiration)
            except BackingStoreUnavailableError as e:
                logger.warning(f"Returning uncached value for {full_key}: {e}")
        return value

    async def hash_get_or_set(
        self,
        key: str,
        field: str,
        factory: ValueFactory[T],
        *,
        model: Any = None,
    ) -> T:
        """Return one field of the hash at ``key``, populating it on a miss.

        The field name is lower-cased before lookup and store. Hash fields
        carry no TTL of their own.
        """
        full_key = self.keys.key(_require(key, "key"))
        hash_field = CacheKeys.field(_require(field, "field"))
        db = await self._database()

        with _store_errors("HGET"):
            raw = await db.hget(full_key, hash_field)  # type: ignore[misc]

        if raw:
            logger.debug(f"Cache hit: {full_key}[{hash_field}]")
            return cast(T, decode(f"{full_key}:{hash_field}", raw, model))

        value = await _produce(factory)
        if value is not None:
            payload = encode(f"{full_key}:{hash_field}", value)
            try:
                with _store_errors("HSET"):
                    await db.hset(full_key, hash_field, payload)  # type: ignore[misc]
            except BackingStoreUnavailableError as e:
                logger.warning(f"Returning uncached value for {full_key}[{hash_field}]: {e}")
        return value

    async def get_keys(self, pattern: str) -> list[str]:
        """List keys matching ``pattern`` that belong to this namespace.

        The result is materialized from a SCAN at call time and does not
        reflect later writes.
        """
        db = await self._database()
        found: dict[str, None] = {}

        with _store_errors("SCAN"):
            async for key in db.scan_iter(match=pattern, count=100):
                key_str = key.decode() if isinstance(key, bytes) else key
                if self.keys.owns(key_str):
                    found[key_str] = None

        return list(found)

    async def get_values(self, key: str, *, model: Any = None) -> list[Any]:
        """Return every field value of the hash at ``key``, decoded."""
        full_key = self.keys.key(_require(key, "key"))
        db = await self._database()

        with _store_errors("HGETALL"):
            entries = await db.hgetall(full_key)  # type: ignore[misc]

        return [
            decode(f"{full_key}:{field.decode() if isinstance(field, bytes) else field}", raw, model)
            for field, raw in entries.items()
        ]

    # -------------------------------------------------------------------------
    # Invalidation
    # -------------------------------------------------------------------------

    async def remove(self, key: str) -> None:
        """Delete one key. Missing keys are not an error."""
        full_key = self.keys.key(_require(key, "key"))
        db = await self._database()
        with _store_errors("DEL"):
            await db.delete(full_key)

    async def remove_all_keys(self, pattern: str = "*") -> bool:
        """Delete every key matching ``{prefix}:{pattern}``.

        Keys are deleted one by one. The result is True only when every delete
        removed its key; earlier deletions are not rolled back on failure.
        """
        db = await self._database()
        keys = await self.get_keys(self.keys.pattern(pattern))
        succeeded = True

        for key in keys:
            with _store_errors("DEL"):
                deleted = await db.delete(key)
            if not deleted:
                logger.warning(f"Cache key {key} vanished before it could be deleted")
                succeeded = False

        logger.info(f"Removed {len(keys)} cache keys matching {self.keys.pattern(pattern)}")
        return succeeded

    def reset(self) -> asyncio.Task[None]:
        """Flush the whole namespace with one server-side script.

        Fire-and-forget: the script runs in the background and callers are not
        expected to wait. The task is returned only so shutdown code and tests
        can await it.
        """
        task = asyncio.create_task(self._flush_namespace())
        self._background.add(task)
        task.add_done_callback(self._flush_done)
        return task

    async def _flush_namespace(self) -> None:
        db = await self._database()
        with _store_errors("EVAL"):
            await db.eval(CLEAR_NAMESPACE_SCRIPT, 0, self.keys.pattern())  # type: ignore[misc]

    def _flush_done(self, task: asyncio.Task[None]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Cache namespace flush failed: {exc}")
        else:
            logger.info(f"Flushed cache namespace {self.keys.prefix}")

    async def health_check(self) -> bool:
        """Check Redis connectivity."""
        try:
            db = await self._database()
            await cast(Awaitable[bool], db.ping())
            return True
        except Exception:
            return False
