"""NextCache Cache - Cache Facade over Codec, Store and Lock.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import contextlib
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

from nextcache_core.lock.distributed import LOCK_PREFIX, DistributedLock, LockConfig, LockRecord
from nextcache_core.protocol.serializer import Serializer, get_serializer
from nextcache_core.store.backend import StorageBackend

logger = logging.getLogger(__name__)


@dataclass
class CacheConfig:
    """Cache configuration.

    Attributes:
        name: Cache name
        ttl_data: Seconds cached values live
        ttl_lock: Seconds lock records live
        acquire_timeout: Override for the lock acquisition deadline
        poll_interval: Override for the lock retry cadence
    """

    name: str = "cache"
    ttl_data: float = 60.0
    ttl_lock: float = 5.0
    acquire_timeout: Optional[float] = None
    poll_interval: Optional[float] = None

    def lock_config(self) -> LockConfig:
        return LockConfig(
            ttl_lock=self.ttl_lock,
            ttl_data=self.ttl_data,
            acquire_timeout=self.acquire_timeout,
            poll_interval=self.poll_interval,
        )


@dataclass
class CacheStats:
    """Cache statistics.

    Attributes:
        hits: Number of cache hits
        misses: Number of cache misses
        sets: Number of set operations
        locks: Number of locks acquired
        started_at: When cache was created
    """

    hits: int = 0
    misses: int = 0
    sets: int = 0
    locks: int = 0
    started_at: Optional[datetime] = None

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def reset(self) -> None:
        """Reset statistics."""
        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.locks = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "locks": self.locks,
            "hit_rate": self.hit_rate,
        }


class Cache:
    """Backend-agnostic cache facade.

    Composes a codec with a storage backend for values, and a
    DistributedLock for per-key mutual exclusion. The facade never keeps
    entries itself. Lock records may live in a separate store, or in the
    data store under a ``lock:`` prefix, in which case data keys may not
    start with that prefix.

    Example:
        cache = Cache(MemoryStore(), config=CacheConfig(ttl_data=60, ttl_lock=5))

        cache.set("a", {"x": 1})
        found, value = cache.get("a")

        with cache.locked("a"):
            ...
    """

    def __init__(
        self,
        store: StorageBackend,
        config: Optional[CacheConfig] = None,
        lock_store: Optional[StorageBackend] = None,
        serializer: Optional[Serializer] = None,
    ):
        """Initialize cache.

        Args:
            store: Backend holding cached values
            config: Cache configuration
            lock_store: Backend holding lock records, defaults to store
            serializer: Value codec, defaults to JSON
        """
        self.config = config or CacheConfig()
        self.store = store
        self.serializer = serializer or get_serializer()
        self._lock = DistributedLock(lock_store or store, self.config.lock_config())
        self._shares_lock_store = self._lock.store is store
        self._stats = CacheStats(started_at=datetime.now())
        self._stats_lock = threading.Lock()

    @property
    def locks(self) -> DistributedLock:
        return self._lock

    def _check_key(self, key: str) -> None:
        if self._shares_lock_store and key.startswith(LOCK_PREFIX):
            raise ValueError(f"cache key {key!r} collides with lock records")

    def get(self, key: str, target: Optional[Callable[[Any], Any]] = None) -> Tuple[bool, Any]:
        """Get value from cache.

        Args:
            key: Cache key
            target: Optional converter for the decoded structure

        Returns:
            (found, value); value is None when not found

        Raises:
            ValueError: If key would alias a lock record
            SerializationError: If stored bytes are malformed
            BackendError: If the backend cannot be reached or fails the command
        """
        self._check_key(key)
        data = self.store.get(key)
        if data is None:
            with self._stats_lock:
                self._stats.misses += 1
            return False, None

        value = self.serializer.decode(data, target)
        with self._stats_lock:
            self._stats.hits += 1
        return True, value

    def set(self, key: str, value: Any) -> None:
        """Store value with the data TTL.

        Args:
            key: Cache key
            value: Value to cache, never None

        Raises:
            ValueError: If value is None or key would alias a lock record
            SerializationError: If value cannot be encoded
            BackendError: If the backend cannot be reached or fails the command
        """
        if value is None:
            raise ValueError(f"value for cache key {key!r} must not be None")
        self._check_key(key)

        self.store.set(key, self.serializer.encode(value), self.config.ttl_data)
        with self._stats_lock:
            self._stats.sets += 1

    def lock(self, key: str, timeout: Optional[float] = None) -> int:
        """Acquire the lock for key.

        Returns:
            Ownership token

        Raises:
            LockTimeout: If not acquired before the deadline
        """
        token = self._lock.acquire(key, timeout=timeout)
        with self._stats_lock:
            self._stats.locks += 1
        return token

    def unlock(self, key: str, token: int) -> None:
        """Release the lock for key if token still owns it."""
        self._lock.release(key, token)

    @contextlib.contextmanager
    def locked(self, key: str, timeout: Optional[float] = None) -> Iterator[LockRecord]:
        """Hold the lock for key within a with block."""
        with self._lock.hold(key, timeout=timeout) as record:
            with self._stats_lock:
                self._stats.locks += 1
            yield record

    def get_stats(self) -> CacheStats:
        return self._stats

    def reset_stats(self) -> None:
        with self._stats_lock:
            self._stats.reset()

    def close(self) -> None:
        """Release backend resources."""
        self.store.close()
        if self._lock.store is not self.store:
            self._lock.store.close()

    def __enter__(self) -> "Cache":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Cache(name={self.config.name!r}, store={self.store!r})"


__all__ = ["Cache", "CacheConfig", "CacheStats"]
