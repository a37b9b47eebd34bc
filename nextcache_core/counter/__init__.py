"""Counter module - Named request counters."""

from nextcache_core.counter.base import Counter
from nextcache_core.counter.memory import MemoryCounter
from nextcache_core.counter.redis import RedisCounter

__all__ = [
    "Counter",
    "MemoryCounter",
    "RedisCounter",
]
