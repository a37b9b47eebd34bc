"""NextCache Config - Settings Loading and Backend Selection.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Example config.toml:

    [service]
    port = 8080

    [cache]
    provider = "redis"    # or "lru"
    ttlData = "1m"
    ttlLock = "5s"

    [lru]
    capacity = 1000

    [redis]
    url = "localhost:6379"
"""

from __future__ import annotations

import logging
import re
import tomllib
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from nextcache_core.cache.cache import Cache, CacheConfig
from nextcache_core.counter.base import Counter
from nextcache_core.counter.memory import MemoryCounter
from nextcache_core.counter.redis import DEFAULT_PREFIX as COUNTER_PREFIX
from nextcache_core.counter.redis import RedisCounter
from nextcache_core.errors import ConfigError
from nextcache_core.store.backend import StorageConfig
from nextcache_core.store.memory import DEFAULT_CAPACITY, MemoryStore
from nextcache_core.store.redis import RedisConfig, RedisStore

logger = logging.getLogger(__name__)

PROVIDER_LRU = "lru"
PROVIDER_REDIS = "redis"
PROVIDERS = (PROVIDER_LRU, PROVIDER_REDIS)

_DURATION_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(text: str) -> float:
    """Parse a Go-style duration string into seconds.

    Args:
        text: Duration such as "300ms", "1m30s" or "2h"

    Returns:
        Seconds

    Raises:
        ConfigError: If text is not a valid duration
    """
    text = text.strip()
    if not text:
        raise ConfigError("empty duration")
    if text == "0":
        return 0.0

    total = 0.0
    pos = 0
    for match in _DURATION_RE.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()

    if pos != len(text):
        raise ConfigError(f"invalid duration: {text!r}")
    return total


class Settings(BaseModel):
    """Service settings.

    Validated on construction; any invalid field raises ConfigError.

    Attributes:
        provider: "lru" or "redis"
        ttl_data: Seconds cached values live
        ttl_lock: Seconds lock records live
        lru_capacity: Entry bound for the embedded backend
        redis_url: Address of the shared backend
        port: HTTP port of the surrounding service
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    provider: str = Field(default=PROVIDER_LRU)
    ttl_data: float = Field(default=60.0, gt=0)
    ttl_lock: float = Field(default=5.0, gt=0)
    lru_capacity: int = Field(default=DEFAULT_CAPACITY, ge=1)
    redis_url: str = Field(default="localhost:6379", min_length=1)
    port: int = Field(default=8080, gt=0, lt=65536)

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise ConfigError(f"invalid settings: {e}") from e

    @field_validator("provider")
    @classmethod
    def check_provider(cls, value: str) -> str:
        if value not in PROVIDERS:
            raise ValueError(f"unknown or unspecified cache provider: {value!r}")
        return value

    @field_validator("ttl_data", "ttl_lock", mode="before")
    @classmethod
    def parse_ttl(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return parse_duration(value)
            except ConfigError as e:
                raise ValueError(str(e)) from e
        return value

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """Build settings from the parsed TOML layout.

        Raises:
            ConfigError: On missing or malformed values
        """
        cache = data.get("cache", {})
        for name in ("ttlData", "ttlLock"):
            if not isinstance(cache.get(name), str):
                raise ConfigError(f"Unable to read {name}: expected a duration string")

        kwargs: Dict[str, Any] = {
            "provider": cache.get("provider", ""),
            "ttl_data": cache["ttlData"],
            "ttl_lock": cache["ttlLock"],
        }
        if "capacity" in data.get("lru", {}):
            kwargs["lru_capacity"] = data["lru"]["capacity"]
        if "url" in data.get("redis", {}):
            kwargs["redis_url"] = data["redis"]["url"]
        if "port" in data.get("service", {}):
            kwargs["port"] = data["service"]["port"]
        return cls(**kwargs)

    def cache_config(self) -> CacheConfig:
        return CacheConfig(name=self.provider, ttl_data=self.ttl_data, ttl_lock=self.ttl_lock)


def load_settings(path: Union[str, Path] = "config.toml") -> Settings:
    """Load settings from a TOML file.

    Args:
        path: Config file path

    Returns:
        Settings instance

    Raises:
        ConfigError: If the file is missing, unparsable or invalid
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Unable to load config file: {e}") from e

    settings = Settings.from_dict(data)
    logger.info(f"Loaded config from {path} (provider={settings.provider})")
    return settings


def build_cache(settings: Settings, client: Optional[Any] = None) -> Cache:
    """Construct the cache facade for the configured provider.

    Lock records always live in a store of their own. The embedded lock
    store never evicts an unexpired record, and on Redis lock records sit
    outside the data prefix, so no data key can alias a lock.

    Args:
        settings: Service settings
        client: Pre-built redis client for the shared provider

    Returns:
        Cache instance
    """
    if settings.provider == PROVIDER_LRU:
        data = MemoryStore(StorageConfig(name="lru-data", max_size=settings.lru_capacity))
        locks = MemoryStore(StorageConfig(name="lru-locks", max_size=settings.lru_capacity, evict_live=False))
        return Cache(data, config=settings.cache_config(), lock_store=locks)

    config = RedisConfig.from_url(settings.redis_url)
    store = RedisStore(config, client=client)
    locks = RedisStore(replace(config, name="redis-locks", prefix=""), client=client)
    return Cache(store, config=settings.cache_config(), lock_store=locks)


def build_counter(settings: Settings, client: Optional[Any] = None) -> Counter:
    """Construct the counter backend for the configured provider."""
    if settings.provider == PROVIDER_LRU:
        return MemoryCounter(capacity=settings.lru_capacity)

    config = RedisConfig.from_url(settings.redis_url)
    return RedisCounter(replace(config, name="redis-counter", prefix=COUNTER_PREFIX), client=client)


__all__ = [
    "Settings",
    "load_settings",
    "parse_duration",
    "build_cache",
    "build_counter",
    "PROVIDER_LRU",
    "PROVIDER_REDIS",
]
