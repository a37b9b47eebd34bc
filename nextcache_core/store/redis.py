"""NextCache Redis Store - Shared Storage Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional, TypeVar
from urllib.parse import urlparse

import redis

from nextcache_core.errors import BackendError, BackendUnavailable, ConfigError
from nextcache_core.store.backend import StorageBackend, StorageConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Compare-and-delete: only the holder of the stored value may remove it.
UNLOCK_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


@dataclass
class RedisConfig(StorageConfig):
    """Redis-specific configuration.

    Attributes:
        host: Redis host
        port: Redis port
        db: Redis database number
        password: Redis password
        socket_timeout: Socket timeout
        socket_connect_timeout: Connection timeout
        max_connections: Connection pool size
        prefix: Key prefix
    """

    name: str = "redis"
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    max_connections: int = 10
    prefix: str = "cache:"

    @classmethod
    def from_url(cls, url: str, **overrides: Any) -> "RedisConfig":
        """Build config from "host:port" or a redis:// URL.

        Args:
            url: Address of the server
            overrides: Extra field values

        Returns:
            RedisConfig instance
        """
        if "://" not in url:
            url = f"redis://{url}"
        parsed = urlparse(url)
        if parsed.scheme not in ("redis", "rediss"):
            raise ConfigError(f"unsupported redis url scheme: {parsed.scheme}")

        try:
            port = parsed.port or 6379
        except ValueError as e:
            raise ConfigError(f"invalid redis url {url!r}: {e}") from e

        db = 0
        path = parsed.path.strip("/")
        if path:
            if not path.isdigit():
                raise ConfigError(f"invalid redis database in url: {path!r}")
            db = int(path)

        config = cls(
            host=parsed.hostname or "localhost",
            port=port,
            db=db,
            password=parsed.password,
        )
        return replace(config, **overrides) if overrides else config


class RedisConnection:
    """Lazily created, pooled redis client shared by store and counter.

    Transport failures surface as BackendUnavailable and error replies
    from the server as BackendError; a missing key is never reported as
    an error.
    """

    def __init__(self, config: RedisConfig, client: Optional[Any] = None):
        """Initialize connection holder.

        Args:
            config: Redis configuration
            client: Pre-built client (redis.Redis compatible)
        """
        self.config = config
        self._client = client
        self._pool: Optional[redis.ConnectionPool] = None
        self._lock = threading.Lock()

    def client(self) -> Any:
        """Get the client, connecting on first use.

        Returns:
            Redis client
        """
        if self._client is not None:
            return self._client

        with self._lock:
            if self._client is not None:
                return self._client

            pool = redis.ConnectionPool(
                host=self.config.host,
                port=self.config.port,
                db=self.config.db,
                password=self.config.password,
                socket_timeout=self.config.socket_timeout,
                socket_connect_timeout=self.config.socket_connect_timeout,
                max_connections=self.config.max_connections,
                decode_responses=False,
            )
            client = redis.Redis(connection_pool=pool)
            try:
                client.ping()
            except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
                pool.disconnect()
                logger.error(f"Failed to connect to Redis at {self.config.host}:{self.config.port}: {e}")
                raise BackendUnavailable(self.config.name, str(e)) from e
            except redis.exceptions.RedisError as e:
                pool.disconnect()
                logger.error(f"Redis at {self.config.host}:{self.config.port} rejected ping: {e}")
                raise BackendError(self.config.name, str(e)) from e

            logger.info(f"Connected to Redis at {self.config.host}:{self.config.port}")
            self._pool = pool
            self._client = client
            return client

    def call(self, operation: str, fn: Callable[[Any], T]) -> T:
        """Run fn against the client, translating transport failures.

        Args:
            operation: Operation name for logs
            fn: Callable receiving the client

        Returns:
            Whatever fn returns

        Raises:
            BackendUnavailable: On connection or timeout errors
            BackendError: On any other error reply
        """
        client = self.client()
        try:
            return fn(client)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            logger.error(f"Redis {operation} error: {e}")
            raise BackendUnavailable(self.config.name, str(e)) from e
        except redis.exceptions.RedisError as e:
            logger.error(f"Redis {operation} rejected: {e}")
            raise BackendError(self.config.name, str(e)) from e

    def key(self, key: str) -> str:
        """Make prefixed Redis key."""
        return f"{self.config.prefix}{key}"

    def strip(self, redis_key: Any) -> str:
        """Remove prefix from a scanned Redis key."""
        key = redis_key.decode() if isinstance(redis_key, bytes) else redis_key
        return key[len(self.config.prefix):]

    def close(self) -> None:
        """Close pooled connections."""
        if self._pool is not None:
            self._pool.disconnect()
            self._pool = None
            self._client = None


def _ttl_ms(ttl: Optional[float]) -> Optional[int]:
    if ttl is None:
        return None
    return max(1, int(ttl * 1000))


class RedisStore(StorageBackend):
    """Redis storage backend.

    TTL is carried natively (PX). Conditional writes use SET NX and
    releases use a server-side compare-and-delete script, so concurrent
    processes sharing the server get the same atomicity as MemoryStore.

    Example:
        store = RedisStore(RedisConfig.from_url("localhost:6379"))
        store.set("key", b"data", ttl=60)
        store.get("key")
    """

    def __init__(self, config: Optional[RedisConfig] = None, client: Optional[Any] = None):
        """Initialize Redis store.

        Args:
            config: Redis configuration
            client: Pre-built redis client
        """
        super().__init__(config or RedisConfig())
        self.config: RedisConfig
        self._conn = RedisConnection(self.config, client)
        self._unlock_script: Optional[Any] = None

    def get(self, key: str) -> Optional[bytes]:
        try:
            data = self._conn.call("get", lambda c: c.get(self._conn.key(key)))
        except BackendError as e:
            self._stats.record_error(str(e))
            raise

        self._stats.reads += 1
        if data is None:
            return None
        self._stats.hits += 1
        return data

    def set(self, key: str, value: bytes, ttl: Optional[float] = None) -> None:
        try:
            self._conn.call("set", lambda c: c.set(self._conn.key(key), value, px=_ttl_ms(ttl)))
        except BackendError as e:
            self._stats.record_error(str(e))
            raise
        self._stats.writes += 1

    def set_if_absent(self, key: str, value: bytes, ttl: Optional[float] = None) -> bool:
        try:
            result = self._conn.call(
                "set nx",
                lambda c: c.set(self._conn.key(key), value, nx=True, px=_ttl_ms(ttl)),
            )
        except BackendError as e:
            self._stats.record_error(str(e))
            raise

        if result:
            self._stats.writes += 1
            return True
        return False

    def delete_if_equals(self, key: str, expected: bytes) -> bool:
        def run(client: Any) -> Any:
            if self._unlock_script is None:
                self._unlock_script = client.register_script(UNLOCK_SCRIPT)
            return self._unlock_script(keys=[self._conn.key(key)], args=[expected])

        try:
            deleted = self._conn.call("compare-and-delete", run)
        except BackendError as e:
            self._stats.record_error(str(e))
            raise

        if deleted:
            self._stats.deletes += 1
            return True
        return False

    def delete(self, key: str) -> bool:
        try:
            result = self._conn.call("delete", lambda c: c.delete(self._conn.key(key)))
        except BackendError as e:
            self._stats.record_error(str(e))
            raise

        if result > 0:
            self._stats.deletes += 1
            return True
        return False

    def ttl(self, key: str) -> Optional[float]:
        """Get remaining TTL in seconds, None if absent or persistent."""
        try:
            ttl_ms = self._conn.call("pttl", lambda c: c.pttl(self._conn.key(key)))
        except BackendError as e:
            self._stats.record_error(str(e))
            raise

        if ttl_ms is None or ttl_ms < 0:
            return None
        return ttl_ms / 1000

    def close(self) -> None:
        self._conn.close()

    def __repr__(self) -> str:
        return f"RedisStore(host={self.config.host}, port={self.config.port}, prefix={self.config.prefix!r})"


__all__ = ["RedisStore", "RedisConfig", "RedisConnection", "UNLOCK_SCRIPT"]
