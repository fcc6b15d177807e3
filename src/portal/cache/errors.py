"""Exceptions raised by the cache layer.

None of these are handled inside the cache store itself. They surface to the
calling handler, where the application's generic exception handler logs them
and answers with a 500 response.
"""

from __future__ import annotations


class CacheError(Exception):
    """Base class for cache-layer failures."""


class InvalidKeyError(CacheError, ValueError):
    """Empty or missing cache key or hash field.

    Raised before any round trip to Redis.
    """

    def __init__(self, argument: str):
        self.argument = argument
        super().__init__(f"Cache {argument} must be a non-empty string")


class BackingStoreUnavailableError(CacheError):
    """Connection or network fault while talking to Redis."""


class SerializationError(CacheError):
    """A stored payload could not be decoded into the requested type."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Cannot decode cached value for '{key}': {reason}")
