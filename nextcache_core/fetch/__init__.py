"""Fetch module - Read-through orchestration."""

from nextcache_core.fetch.orchestrator import cached_fetch, CachedFetcher

__all__ = [
    "cached_fetch",
    "CachedFetcher",
]
