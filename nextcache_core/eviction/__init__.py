"""Eviction module - Capacity-bounded recency tracking."""

from nextcache_core.eviction.lru import LRUPolicy, EvictionStats

__all__ = [
    "LRUPolicy",
    "EvictionStats",
]
