"""NextCache LRU Policy - Least Recently Used Eviction.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class EvictionStats:
    """Eviction statistics.

    Attributes:
        evictions: Number of keys chosen for eviction
        accesses: Number of accesses tracked
        current_size: Current tracked entries
        max_size: Capacity bound
    """

    evictions: int = 0
    accesses: int = 0
    current_size: int = 0
    max_size: int = 0

    @property
    def eviction_rate(self) -> float:
        """Get eviction rate."""
        return self.evictions / self.accesses if self.accesses > 0 else 0.0


class LRUPolicy:
    """Least Recently Used eviction policy.

    Tracks recency only; the owning store keeps the values. Uses an
    OrderedDict for O(1) access and eviction, oldest key first.

    Example:
        policy = LRUPolicy(max_size=1000)
        policy.on_insert("key1")
        policy.on_access("key1")
        if policy.is_full:
            evict_key = policy.choose_eviction()
    """

    def __init__(self, max_size: int = 10000):
        """Initialize LRU policy.

        Args:
            max_size: Maximum entries
        """
        if max_size < 1:
            raise ValueError(f"LRU capacity must be positive, got {max_size}")
        self.max_size = max_size
        self._order: OrderedDict[str, None] = OrderedDict()
        self._lock = threading.RLock()
        self._stats = EvictionStats(max_size=max_size)

    @property
    def is_full(self) -> bool:
        """Check if capacity is reached."""
        return len(self._order) >= self.max_size

    def on_access(self, key: str) -> None:
        """Record key access (move to end).

        Args:
            key: Accessed key
        """
        with self._lock:
            self._stats.accesses += 1
            if key in self._order:
                self._order.move_to_end(key)

    def on_insert(self, key: str) -> None:
        """Record key insertion.

        Args:
            key: Inserted key
        """
        with self._lock:
            self._order[key] = None
            self._order.move_to_end(key)
            self._stats.current_size = len(self._order)

    def on_delete(self, key: str) -> None:
        """Record key deletion.

        Args:
            key: Deleted key
        """
        with self._lock:
            if self._order.pop(key, False) is None:
                self._stats.current_size = len(self._order)

    def choose_eviction(self) -> Optional[str]:
        """Choose LRU key to evict.

        The key stays tracked until the store reports on_delete.

        Returns:
            Oldest key or None
        """
        with self._lock:
            if not self._order:
                return None

            key = next(iter(self._order))
            self._stats.evictions += 1
            return key

    def keys(self) -> List[str]:
        """Snapshot of tracked keys, oldest first."""
        with self._lock:
            return list(self._order)

    def clear(self) -> None:
        """Clear all tracked keys."""
        with self._lock:
            self._order.clear()
            self._stats.current_size = 0

    def contains(self, key: str) -> bool:
        return key in self._order

    def size(self) -> int:
        return len(self._order)

    def get_stats(self) -> EvictionStats:
        """Get eviction statistics."""
        self._stats.current_size = self.size()
        return self._stats

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: str) -> bool:
        return self.contains(key)

    def __repr__(self) -> str:
        return f"LRUPolicy(size={len(self._order)}, max={self.max_size})"


__all__ = ["LRUPolicy", "EvictionStats"]
