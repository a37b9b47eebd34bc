"""Shared fixtures for NextCache tests.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import fnmatch
import threading
import time

import pytest
import redis

from nextcache_core.cache.cache import Cache, CacheConfig
from nextcache_core.store.backend import StorageConfig
from nextcache_core.store.memory import MemoryStore
from nextcache_core.store.redis import RedisConfig, RedisStore


class FakeRedis:
    """In-process stand-in for the subset of redis.Redis the backends use.

    Set ``down = True`` to make every command fail like a lost connection,
    or call ``reject(command, message)`` to make one command return a
    server error reply.
    """

    def __init__(self):
        self._data = {}
        self._lock = threading.Lock()
        self.down = False
        self.scripts = []
        self.rejected = {}

    def reject(self, command, message):
        self.rejected[command] = message

    def _check(self, command=None):
        if self.down:
            raise redis.exceptions.ConnectionError("Connection refused")
        if command in self.rejected:
            raise redis.exceptions.ResponseError(self.rejected[command])

    @staticmethod
    def _bytes(value):
        if isinstance(value, bytes):
            return value
        return str(value).encode()

    def _live(self, name):
        item = self._data.get(name)
        if item is None:
            return None
        value, expires_at = item
        if expires_at is not None and time.monotonic() >= expires_at:
            del self._data[name]
            return None
        return value

    def ping(self):
        self._check("ping")
        return True

    def get(self, name):
        self._check("get")
        with self._lock:
            return self._live(name)

    def set(self, name, value, px=None, nx=False):
        self._check("set nx" if nx else "set")
        with self._lock:
            if nx and self._live(name) is not None:
                return None
            expires_at = time.monotonic() + px / 1000 if px else None
            self._data[name] = (self._bytes(value), expires_at)
            return True

    def delete(self, *names):
        self._check("delete")
        with self._lock:
            count = 0
            for name in names:
                if self._live(name) is not None:
                    del self._data[name]
                    count += 1
            return count

    def incr(self, name):
        self._check("incr")
        with self._lock:
            current = self._live(name)
            value = int(current) + 1 if current is not None else 1
            expires_at = self._data[name][1] if current is not None else None
            self._data[name] = (self._bytes(value), expires_at)
            return value

    def pttl(self, name):
        self._check("pttl")
        with self._lock:
            if self._live(name) is None:
                return -2
            expires_at = self._data[name][1]
            if expires_at is None:
                return -1
            return int((expires_at - time.monotonic()) * 1000)

    def scan_iter(self, match=None, count=None):
        self._check("scan")
        with self._lock:
            names = list(self._data)
        for name in names:
            if match is None or fnmatch.fnmatchcase(name, match):
                yield name.encode()

    def register_script(self, script):
        self.scripts.append(script)

        def compare_and_delete(keys, args):
            self._check("evalsha")
            with self._lock:
                if self._live(keys[0]) == self._bytes(args[0]):
                    del self._data[keys[0]]
                    return 1
                return 0

        return compare_and_delete


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def redis_store(fake_redis):
    return RedisStore(RedisConfig(), client=fake_redis)


@pytest.fixture
def memory_store():
    return MemoryStore(StorageConfig(max_size=100))


@pytest.fixture(params=["memory", "redis"])
def store(request, fake_redis):
    """Each storage backend in turn."""
    if request.param == "memory":
        return MemoryStore(StorageConfig(max_size=100))
    return RedisStore(RedisConfig(), client=fake_redis)


@pytest.fixture
def fast_config():
    """Short TTLs and a quick poll so lock tests finish fast."""
    return CacheConfig(ttl_data=10.0, ttl_lock=1.0, acquire_timeout=2.0, poll_interval=0.01)


@pytest.fixture
def cache(store, fast_config):
    return Cache(store, config=fast_config)
