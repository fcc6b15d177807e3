"""Cache layer for the portal.

Provides Redis caching with the cache-aside pattern:
- Whole entity collections cached as JSON under namespaced keys
- Hash records for field-level sub-keys of one collection
- TTL-based expiration plus explicit, pattern and namespace-wide removal
- Post-write list edits on the cached view (see ``portal.cache.collections``)
"""

from portal.cache.collections import CachedCollection
from portal.cache.errors import (
    BackingStoreUnavailableError,
    CacheError,
    InvalidKeyError,
    SerializationError,
)
from portal.cache.keys import CacheKeys
from portal.cache.redis import RedisCacheService, ValueFactory

__all__ = [
    # Core cache
    "CacheKeys",
    "RedisCacheService",
    "ValueFactory",
    "CachedCollection",
    # Errors
    "CacheError",
    "InvalidKeyError",
    "BackingStoreUnavailableError",
    "SerializationError",
]
