"""NextCache Fetch - Cached Read-Through Orchestration.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar

from nextcache_core.cache.cache import Cache
from nextcache_core.errors import CacheError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def cached_fetch(
    cache: Cache,
    key: str,
    fetch: Callable[[], T],
    target: Optional[Callable[[Any], T]] = None,
) -> T:
    """Read key through the cache, fetching upstream on a miss.

    The per-key lock is held across the lookup, the upstream call and
    the write, so concurrent callers for one absent key trigger a single
    fetch and then read the stored value. The lock is released on every
    exit path.

    Args:
        cache: Cache facade
        key: Cache key
        fetch: Upstream loader; its exceptions propagate unchanged
        target: Converter applied to cached structures on a hit

    Returns:
        Cached or freshly fetched value

    Raises:
        LockTimeout: If the key stayed locked past the deadline
        SerializationError: If the cached bytes are malformed
        Exception: Whatever fetch raises; nothing is cached then
    """
    with cache.locked(key):
        found, value = cache.get(key, target)
        if found:
            return value

        value = fetch()
        if value:
            try:
                cache.set(key, value)
            except CacheError as e:
                logger.warning(f"Failed to cache {key!r}, serving fetched value: {e}")
        return value


class CachedFetcher:
    """Reusable read-through helper bound to one cache.

    Example:
        fetcher = CachedFetcher(cache)
        agencies = fetcher.fetch("agencies", provider.get_agencies, Agency.list_from)
    """

    def __init__(self, cache: Cache):
        self.cache = cache

    def fetch(
        self,
        key: str,
        loader: Callable[[], T],
        target: Optional[Callable[[Any], T]] = None,
    ) -> T:
        return cached_fetch(self.cache, key, loader, target)

    def __repr__(self) -> str:
        return f"CachedFetcher(cache={self.cache!r})"


__all__ = ["cached_fetch", "CachedFetcher"]
