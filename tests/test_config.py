"""Tests for settings loading and backend selection.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from nextcache_core.config import (
    Settings,
    build_cache,
    build_counter,
    load_settings,
    parse_duration,
)
from nextcache_core.counter.memory import MemoryCounter
from nextcache_core.counter.redis import RedisCounter
from nextcache_core.errors import ConfigError, LockTimeout
from nextcache_core.store.memory import MemoryStore
from nextcache_core.store.redis import RedisStore

CONFIG_TOML = """
[service]
port = 9090

[cache]
provider = "{provider}"
ttlData = "1m"
ttlLock = "5s"

[lru]
capacity = 50

[redis]
url = "cache.internal:6380"
"""


def write_config(tmp_path, provider="lru", text=None):
    path = tmp_path / "config.toml"
    path.write_text(text if text is not None else CONFIG_TOML.format(provider=provider), encoding="utf-8")
    return path


class TestParseDuration:
    """Tests for duration strings."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("5s", 5.0),
            ("1m", 60.0),
            ("2h", 7200.0),
            ("300ms", 0.3),
            ("1m30s", 90.0),
            ("1.5s", 1.5),
            ("250us", 0.00025),
            ("0", 0.0),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_duration(text) == pytest.approx(expected)

    @pytest.mark.parametrize("text", ["", "5", "five seconds", "5x", "s", "1m 30s"])
    def test_invalid(self, text):
        with pytest.raises(ConfigError):
            parse_duration(text)


class TestSettings:
    """Tests for the Settings dataclass."""

    def test_defaults(self):
        """Test default settings select the embedded backend."""
        settings = Settings()

        assert settings.provider == "lru"
        assert settings.ttl_data == 60.0
        assert settings.ttl_lock == 5.0

    def test_from_dict(self):
        """Test the TOML layout maps onto fields."""
        settings = Settings.from_dict({
            "service": {"port": 9090},
            "cache": {"provider": "redis", "ttlData": "2m", "ttlLock": "3s"},
            "lru": {"capacity": 7},
            "redis": {"url": "redis://cache:6379/1"},
        })

        assert settings.provider == "redis"
        assert settings.ttl_data == 120.0
        assert settings.ttl_lock == 3.0
        assert settings.lru_capacity == 7
        assert settings.redis_url == "redis://cache:6379/1"
        assert settings.port == 9090

    def test_unknown_provider(self):
        """Test unknown providers are rejected."""
        with pytest.raises(ConfigError, match="provider"):
            Settings(provider="memcached")

    def test_missing_provider(self):
        """Test an unspecified provider is rejected."""
        with pytest.raises(ConfigError):
            Settings.from_dict({"cache": {"ttlData": "1m", "ttlLock": "5s"}})

    def test_ttl_must_be_string(self):
        """Test numeric TTLs are not accepted."""
        with pytest.raises(ConfigError, match="ttlData"):
            Settings.from_dict({"cache": {"provider": "lru", "ttlData": 60, "ttlLock": "5s"}})

    def test_ttl_must_be_positive(self):
        """Test zero TTLs are rejected."""
        with pytest.raises(ConfigError):
            Settings.from_dict({"cache": {"provider": "lru", "ttlData": "0", "ttlLock": "5s"}})

    @pytest.mark.parametrize(
        "section, field, value",
        [
            ("lru", "capacity", "lots"),
            ("lru", "capacity", 0),
            ("service", "port", "http"),
            ("service", "port", 70000),
            ("redis", "url", 6379),
        ],
    )
    def test_malformed_field(self, section, field, value):
        """Test ill-typed or out-of-range fields raise ConfigError."""
        data = {"cache": {"provider": "lru", "ttlData": "1m", "ttlLock": "5s"}, section: {field: value}}

        with pytest.raises(ConfigError, match="invalid settings"):
            Settings.from_dict(data)

    def test_bad_duration(self):
        """Test an unparsable TTL raises ConfigError."""
        with pytest.raises(ConfigError, match="invalid duration"):
            Settings.from_dict({"cache": {"provider": "lru", "ttlData": "soon", "ttlLock": "5s"}})

    def test_assignment_is_validated(self):
        """Test settings stay valid after construction."""
        settings = Settings()

        with pytest.raises(ValueError):
            settings.provider = "memcached"

    def test_cache_config(self):
        """Test TTLs flow into the cache config."""
        config = Settings(ttl_data=30.0, ttl_lock=2.0).cache_config()

        assert config.ttl_data == 30.0
        assert config.ttl_lock == 2.0
        assert config.lock_config().timeout == pytest.approx(3.0)
        assert config.lock_config().interval == pytest.approx(0.2)


class TestLoadSettings:
    """Tests for reading config files."""

    def test_load(self, tmp_path):
        """Test a complete file loads."""
        settings = load_settings(write_config(tmp_path))

        assert settings.provider == "lru"
        assert settings.ttl_data == 60.0
        assert settings.lru_capacity == 50
        assert settings.redis_url == "cache.internal:6380"
        assert settings.port == 9090

    def test_missing_file(self, tmp_path):
        """Test a missing file raises ConfigError."""
        with pytest.raises(ConfigError, match="Unable to load config file"):
            load_settings(tmp_path / "absent.toml")

    def test_malformed_file(self, tmp_path):
        """Test invalid TOML raises ConfigError."""
        path = write_config(tmp_path, text="[cache\nprovider = ")

        with pytest.raises(ConfigError, match="Unable to load config file"):
            load_settings(path)

    def test_unknown_provider(self, tmp_path):
        """Test an unknown provider in the file is rejected."""
        with pytest.raises(ConfigError):
            load_settings(write_config(tmp_path, provider="memcached"))


class TestBuild:
    """Tests for backend construction."""

    def test_build_lru_cache(self):
        """Test the embedded provider keeps locks apart from data."""
        cache = build_cache(Settings(provider="lru", lru_capacity=5))

        assert isinstance(cache.store, MemoryStore)
        assert isinstance(cache.locks.store, MemoryStore)
        assert cache.locks.store is not cache.store
        assert cache.store.capacity == 5

    def test_lru_cache_roundtrip(self):
        """Test a built embedded cache stores and locks."""
        cache = build_cache(Settings(provider="lru"))

        cache.set("agencies", [{"tag": "sf-muni"}])
        with cache.locked("agencies"):
            assert cache.get("agencies") == (True, [{"tag": "sf-muni"}])

    def test_lru_lock_store_never_evicts_held_locks(self):
        """Test holding more locks than the capacity keeps every one exclusive."""
        cache = build_cache(Settings(provider="lru", lru_capacity=2, ttl_data=1.0, ttl_lock=5.0))
        tokens = {key: cache.lock(key) for key in ("a", "b", "c")}

        for key in tokens:
            assert cache.locks.is_locked(key)
            with pytest.raises(LockTimeout):
                cache.lock(key, timeout=0.05)

        for key, token in tokens.items():
            cache.unlock(key, token)
        assert not any(cache.locks.is_locked(key) for key in tokens)

    def test_lru_data_store_still_evicts(self):
        """Test the data store stays bounded while locks are not."""
        cache = build_cache(Settings(provider="lru", lru_capacity=2))

        for key in ("a", "b", "c"):
            cache.set(key, [key])

        assert cache.get("a") == (False, None)
        assert cache.store.size() == 2

    def test_build_redis_cache(self, fake_redis):
        """Test the shared provider keeps lock records outside the data prefix."""
        cache = build_cache(Settings(provider="redis", redis_url="cache:6380"), client=fake_redis)

        assert isinstance(cache.store, RedisStore)
        assert isinstance(cache.locks.store, RedisStore)
        assert cache.store.config.host == "cache"
        assert cache.store.config.port == 6380

        token = cache.lock("agencies")
        assert fake_redis.get("lock:agencies") == str(token).encode()
        assert fake_redis.get("cache:lock:agencies") is None
        cache.unlock("agencies", token)

    def test_redis_data_key_cannot_alias_lock(self, fake_redis):
        """Test a data key spelled like a lock record stays data."""
        cache = build_cache(Settings(provider="redis"), client=fake_redis)

        cache.set("lock:agencies", ["data"])

        assert not cache.locks.is_locked("agencies")
        token = cache.lock("agencies")
        assert cache.get("lock:agencies") == (True, ["data"])
        cache.unlock("agencies", token)

    def test_build_counters(self, fake_redis):
        """Test each provider gets its counter backend."""
        assert isinstance(build_counter(Settings(provider="lru")), MemoryCounter)

        counter = build_counter(Settings(provider="redis"), client=fake_redis)
        assert isinstance(counter, RedisCounter)
        assert counter.config.prefix == "stats:"

        counter.incr("hits:/api")
        assert fake_redis.get("stats:hits:/api") == b"1"
