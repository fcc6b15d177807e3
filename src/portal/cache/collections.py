"""Cached entity collections and the post-write list-mutation convention.

Handlers read whole collections through the cache and, after writing to the
database, edit the collection they get back from ``get_or_set``:

- create: append the new item unless one with the same id is present
- update: replace the item with the same id
- delete: drop every item with the id

The edited list is the decoded copy returned by the store. It is not written
back to Redis, so the cached entry keeps its previous contents until the TTL
expires or the key is removed. Two writers racing on the same collection each
edit their own copy and one edit is lost from the cached view; the database
is unaffected.

With ``invalidate_on_write`` enabled the collection key is removed after each
write instead, so the next read repopulates from the database.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Hashable
from typing import Generic, TypeVar

from pydantic import BaseModel

from portal.cache.redis import RedisCacheService
from portal.config import settings

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class CachedCollection(Generic[ModelT]):
    """One cached list of domain models under a logical key."""

    def __init__(
        self,
        cache: RedisCacheService,
        key: str,
        model: type[ModelT],
        loader: Callable[[], Awaitable[list[ModelT]]],
        id_field: str = "id",
        invalidate_on_write: bool | None = None,
    ):
        self.cache = cache
        self.key = key
        self.model = model
        self.loader = loader
        self.id_field = id_field
        self.invalidate_on_write = (
            settings.cache_invalidate_on_write
            if invalidate_on_write is None
            else invalidate_on_write
        )

    def _id(self, item: ModelT) -> Hashable:
        return getattr(item, self.id_field)  # type: ignore[no-any-return]

    async def load(self) -> list[ModelT]:
        """Read the collection, populating it from the loader on a miss."""
        return await self.cache.get_or_set(self.key, self.loader, model=list[self.model])

    async def find(self, identifier: Hashable) -> ModelT | None:
        """Find one item of the cached collection by id."""
        for item in await self.load():
            if self._id(item) == identifier:
                return item
        return None

    async def added(self, item: ModelT) -> list[ModelT] | None:
        """Apply a create to the cached view."""
        if self.invalidate_on_write:
            await self.cache.remove(self.key)
            return None

        items = await self.load()
        if not any(self._id(existing) == self._id(item) for existing in items):
            items.append(item)
        return items

    async def updated(self, item: ModelT) -> list[ModelT] | None:
        """Apply an update to the cached view."""
        if self.invalidate_on_write:
            await self.cache.remove(self.key)
            return None

        items = await self.load()
        for index, existing in enumerate(items):
            if self._id(existing) == self._id(item):
                items[index] = item
                break
        else:
            logger.debug(f"{self.key}: updated item {self._id(item)} not in cached view")
        return items

    async def removed(self, identifier: Hashable) -> list[ModelT] | None:
        """Apply a delete to the cached view."""
        if self.invalidate_on_write:
            await self.cache.remove(self.key)
            return None

        items = await self.load()
        items[:] = [existing for existing in items if self._id(existing) != identifier]
        return items
