"""Cache module - Cache facade and stored record types."""

from nextcache_core.cache.entry import CacheEntry
from nextcache_core.lock.distributed import LockRecord
from nextcache_core.cache.cache import (
    Cache,
    CacheConfig,
    CacheStats,
)

__all__ = [
    "CacheEntry",
    "LockRecord",
    "Cache",
    "CacheConfig",
    "CacheStats",
]
