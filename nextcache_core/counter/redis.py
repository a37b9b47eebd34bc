"""NextCache Redis Counter - Shared Counter Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterator, Optional, Tuple

import redis

from nextcache_core.counter.base import Counter
from nextcache_core.errors import BackendError, BackendUnavailable
from nextcache_core.store.redis import RedisConfig, RedisConnection

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "stats:"


class RedisCounter(Counter):
    """Counters held in Redis with INCR.

    Enumeration streams SCAN batches instead of materializing every key,
    so very large key sets stay cheap to walk.

    Example:
        counter = RedisCounter(RedisConfig.from_url("localhost:6379"))
        counter.incr("time:7")
        for key in counter.iterate():
            ...
    """

    def __init__(
        self,
        config: Optional[RedisConfig] = None,
        client: Optional[Any] = None,
        scan_count: int = 100,
    ):
        """Initialize Redis counter.

        Args:
            config: Redis configuration; prefix defaults to "stats:"
            client: Pre-built redis client
            scan_count: SCAN batch size hint
        """
        self.config = config or replace(RedisConfig(), name="redis-counter", prefix=DEFAULT_PREFIX)
        self.scan_count = scan_count
        self._conn = RedisConnection(self.config, client)

    def get(self, key: str) -> Tuple[int, bool]:
        value = self._conn.call("get", lambda c: c.get(self._conn.key(key)))
        if value is None:
            return 0, False
        return int(value), True

    def incr(self, key: str) -> int:
        return int(self._conn.call("incr", lambda c: c.incr(self._conn.key(key))))

    def iterate(self) -> Iterator[str]:
        keys = self._conn.call(
            "scan",
            lambda c: c.scan_iter(match=f"{self.config.prefix}*", count=self.scan_count),
        )
        try:
            for redis_key in keys:
                yield self._conn.strip(redis_key)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            logger.error(f"Redis scan error: {e}")
            raise BackendUnavailable(self.config.name, str(e)) from e
        except redis.exceptions.RedisError as e:
            logger.error(f"Redis scan rejected: {e}")
            raise BackendError(self.config.name, str(e)) from e

    def close(self) -> None:
        self._conn.close()

    def __repr__(self) -> str:
        return f"RedisCounter(host={self.config.host}, port={self.config.port}, prefix={self.config.prefix!r})"


__all__ = ["RedisCounter"]
