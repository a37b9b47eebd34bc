"""Store module - Storage backends for caching."""

from nextcache_core.store.backend import (
    StorageBackend,
    StorageStats,
    StorageConfig,
)
from nextcache_core.store.memory import MemoryStore
from nextcache_core.store.redis import RedisStore, RedisConfig, RedisConnection

__all__ = [
    "StorageBackend",
    "StorageStats",
    "StorageConfig",
    "MemoryStore",
    "RedisStore",
    "RedisConfig",
    "RedisConnection",
]
