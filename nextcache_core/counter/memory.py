"""NextCache Memory Counter - Embedded Counter Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterator, Tuple

from nextcache_core.counter.base import Counter
from nextcache_core.eviction.lru import LRUPolicy
from nextcache_core.store.memory import DEFAULT_CAPACITY

logger = logging.getLogger(__name__)


class MemoryCounter(Counter):
    """In-process counters bounded by an LRU capacity.

    When full, incrementing a new counter discards the least recently
    touched one.

    Example:
        counter = MemoryCounter(capacity=1000)
        counter.incr("hits:/api/agencies")
        counter.get("hits:/api/agencies")  # (1, True)
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        self._values: Dict[str, int] = {}
        self._eviction = LRUPolicy(max_size=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._eviction.max_size

    def get(self, key: str) -> Tuple[int, bool]:
        with self._lock:
            if key not in self._values:
                return 0, False
            self._eviction.on_access(key)
            return self._values[key], True

    def incr(self, key: str) -> int:
        with self._lock:
            if key not in self._values and self._eviction.is_full:
                victim = self._eviction.choose_eviction()
                if victim is not None:
                    self._values.pop(victim, None)
                    self._eviction.on_delete(victim)
                    logger.debug(f"Evicted counter {victim!r}")

            value = self._values.get(key, 0) + 1
            self._values[key] = value
            if value == 1:
                self._eviction.on_insert(key)
            else:
                self._eviction.on_access(key)
            return value

    def iterate(self) -> Iterator[str]:
        # Snapshot under the lock, then yield lazily without holding it.
        with self._lock:
            keys = list(self._values)
        yield from keys

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"MemoryCounter(counters={len(self._values)}, capacity={self.capacity})"


__all__ = ["MemoryCounter"]
