"""NextCache Memory Store - Embedded Storage Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from nextcache_core.cache.entry import CacheEntry
from nextcache_core.eviction.lru import LRUPolicy
from nextcache_core.store.backend import StorageBackend, StorageConfig

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 10000


class MemoryStore(StorageBackend):
    """Bounded in-process storage backend.

    Features:
    - Strict LRU eviction at capacity, or with ``evict_live=False`` only
      expired entries are reclaimed (lock records must never be evicted
      while held)
    - Lazy TTL check on every read (expired entries are dropped on sight)
    - Atomic conditional write and compare-and-delete under one RLock

    Example:
        store = MemoryStore(StorageConfig(max_size=1000))
        store.set("key", b"data", ttl=60)
        store.get("key")  # b"data"
    """

    def __init__(self, config: Optional[StorageConfig] = None):
        """Initialize memory store.

        Args:
            config: Storage configuration, max_size bounds the entry count
        """
        super().__init__(config)
        self._data: Dict[str, CacheEntry] = {}
        self._eviction = LRUPolicy(max_size=self.config.max_size or DEFAULT_CAPACITY)
        self._lock = threading.RLock()

    @property
    def capacity(self) -> int:
        return self._eviction.max_size

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            self._stats.reads += 1
            entry = self._live_entry(key)
            if entry is None:
                return None

            self._eviction.on_access(key)
            self._stats.hits += 1
            return entry.value

    def set(self, key: str, value: bytes, ttl: Optional[float] = None) -> None:
        with self._lock:
            self._insert(key, value, ttl)

    def set_if_absent(self, key: str, value: bytes, ttl: Optional[float] = None) -> bool:
        with self._lock:
            if self._live_entry(key) is not None:
                return False
            self._insert(key, value, ttl)
            return True

    def delete_if_equals(self, key: str, expected: bytes) -> bool:
        with self._lock:
            entry = self._live_entry(key)
            if entry is None or entry.value != expected:
                return False
            self._remove(key)
            self._stats.deletes += 1
            return True

    def delete(self, key: str) -> bool:
        with self._lock:
            if key not in self._data:
                return False
            self._remove(key)
            self._stats.deletes += 1
            return True

    def keys(self) -> List[str]:
        """Snapshot of keys holding live entries, least recent first."""
        with self._lock:
            return [k for k in self._eviction.keys() if not self._data[k].is_expired]

    def size(self) -> int:
        return len(self._data)

    def clear(self) -> int:
        """Drop every entry.

        Returns:
            Number cleared
        """
        with self._lock:
            count = len(self._data)
            self._data.clear()
            self._eviction.clear()
            return count

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for key unless absent or expired.

        Expired entries are removed so they cannot be observed again.
        """
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.is_expired:
            self._remove(key)
            self._stats.expirations += 1
            return None
        return entry

    def _insert(self, key: str, value: bytes, ttl: Optional[float]) -> None:
        if key not in self._data and self._eviction.is_full:
            if self.config.evict_live:
                self._evict_one()
            elif not self._purge_expired():
                logger.debug(f"{self.config.name} over capacity with {len(self._data)} live entries")

        self._data[key] = CacheEntry.with_ttl(key, value, ttl)
        self._eviction.on_insert(key)
        self._stats.writes += 1

    def _evict_one(self) -> None:
        victim = self._eviction.choose_eviction()
        if victim is not None:
            self._remove(victim)
            self._stats.evictions += 1
            logger.debug(f"Evicted {victim!r} from {self.config.name}")

    def _purge_expired(self) -> int:
        expired = [k for k, entry in self._data.items() if entry.is_expired]
        for k in expired:
            self._remove(k)
        self._stats.expirations += len(expired)
        return len(expired)

    def _remove(self, key: str) -> None:
        self._data.pop(key, None)
        self._eviction.on_delete(key)

    def __repr__(self) -> str:
        return f"MemoryStore(name={self.config.name!r}, entries={len(self._data)}, capacity={self.capacity})"


__all__ = ["MemoryStore", "DEFAULT_CAPACITY"]
