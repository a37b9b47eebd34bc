"""NextCache - Read-Through Cache for a Rate-Limited Transit Provider.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

A read-through cache in front of a slow upstream with:
- Interchangeable storage backends (embedded LRU, shared Redis)
- Per-entry TTL with expired entries indistinguishable from absent ones
- Busy-wait distributed locking with self-expiring lock records
- Stampede protection: one upstream fetch per absent key
- Request counters and a log10 latency histogram

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                        NextCache System                         │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐             │
    │  │ TransitData │  │ cached_fetch│  │StatsHistogram│  ACCESS    │
    │  │  lookups    │  │ lock→get→set│  │ hits / times │  LAYER     │
    │  └──────┬──────┘  └──────┬──────┘  └──────┬──────┘             │
    │         │                │                │                     │
    │  ┌──────┴────────────────┴──────┐  ┌──────┴──────┐             │
    │  │   Cache facade               │  │   Counter   │   CORE      │
    │  │   codec + store + lock       │  │ incr / iter │   LAYER     │
    │  └──────────────┬───────────────┘  └──────┬──────┘             │
    │                 │                         │                     │
    │  ┌──────────────┴─────────────────────────┴──────┐             │
    │  │              Storage Backends                  │   STORAGE   │
    │  │        ┌────────────┐    ┌────────────┐       │   LAYER     │
    │  │        │ Memory/LRU │    │   Redis    │       │             │
    │  │        └────────────┘    └────────────┘       │             │
    │  └────────────────────────────────────────────────┘             │
    └─────────────────────────────────────────────────────────────────┘

Example Usage:
    from nextcache_core import Cache, CacheConfig, MemoryStore, cached_fetch

    cache = Cache(MemoryStore(), config=CacheConfig(ttl_data=60, ttl_lock=5))
    agencies = cached_fetch(cache, "agencies", provider.get_agencies)

    # Backend chosen by configuration
    from nextcache_core import load_settings, build_cache, build_counter

    settings = load_settings("config.toml")
    cache = build_cache(settings)
    stats = StatsHistogram(build_counter(settings))
    with stats.measure("/api/agencies"):
        ...
"""

__version__ = "1.0.0"
__author__ = "BlackRoad OS"

from nextcache_core.errors import (
    CacheError,
    ConfigError,
    SerializationError,
    BackendError,
    BackendUnavailable,
    LockTimeout,
    UpstreamFetchError,
)
from nextcache_core.cache.entry import CacheEntry
from nextcache_core.cache.cache import (
    Cache,
    CacheConfig,
    CacheStats,
)
from nextcache_core.store.backend import (
    StorageBackend,
    StorageConfig,
    StorageStats,
)
from nextcache_core.store.memory import MemoryStore
from nextcache_core.store.redis import RedisStore, RedisConfig
from nextcache_core.eviction.lru import LRUPolicy
from nextcache_core.lock.distributed import (
    DistributedLock,
    LockConfig,
    LockRecord,
)
from nextcache_core.counter.base import Counter
from nextcache_core.counter.memory import MemoryCounter
from nextcache_core.counter.redis import RedisCounter
from nextcache_core.fetch.orchestrator import cached_fetch, CachedFetcher
from nextcache_core.metrics.histogram import (
    StatsHistogram,
    HitReport,
    TimeBucket,
)
from nextcache_core.protocol.serializer import (
    Serializer,
    JSONSerializer,
)
from nextcache_core.config import (
    Settings,
    load_settings,
    build_cache,
    build_counter,
)

__all__ = [
    # Errors
    "CacheError",
    "ConfigError",
    "SerializationError",
    "BackendError",
    "BackendUnavailable",
    "LockTimeout",
    "UpstreamFetchError",
    # Cache
    "Cache",
    "CacheConfig",
    "CacheStats",
    "CacheEntry",
    # Storage
    "StorageBackend",
    "StorageConfig",
    "StorageStats",
    "MemoryStore",
    "RedisStore",
    "RedisConfig",
    # Eviction
    "LRUPolicy",
    # Locking
    "DistributedLock",
    "LockConfig",
    "LockRecord",
    # Counters
    "Counter",
    "MemoryCounter",
    "RedisCounter",
    # Fetch
    "cached_fetch",
    "CachedFetcher",
    # Metrics
    "StatsHistogram",
    "HitReport",
    "TimeBucket",
    # Protocol
    "Serializer",
    "JSONSerializer",
    # Config
    "Settings",
    "load_settings",
    "build_cache",
    "build_counter",
]
