"""Tests for the distributed lock.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import threading
import time

import pytest

from nextcache_core.errors import LockTimeout
from nextcache_core.lock.distributed import DistributedLock, LockConfig


def make_lock(store, **overrides):
    settings = {"ttl_lock": 1.0, "ttl_data": 10.0, "acquire_timeout": 2.0, "poll_interval": 0.005}
    settings.update(overrides)
    return DistributedLock(store, LockConfig(**settings))


class TestLockConfig:
    """Tests for derived lock timings."""

    def test_derived_from_ttls(self):
        """Test timeout and interval are a tenth of the TTLs."""
        config = LockConfig(ttl_lock=5.0, ttl_data=60.0)

        assert config.timeout == pytest.approx(6.0)
        assert config.interval == pytest.approx(0.5)

    def test_overrides(self):
        """Test explicit timings win."""
        config = LockConfig(ttl_lock=5.0, ttl_data=60.0, acquire_timeout=1.0, poll_interval=0.01)

        assert config.timeout == 1.0
        assert config.interval == 0.01

    def test_ttls_must_be_positive(self):
        """Test invalid TTLs."""
        with pytest.raises(ValueError):
            LockConfig(ttl_lock=0)


class TestDistributedLock:
    """Tests run on every backend."""

    def test_acquire_and_release(self, store):
        """Test a free lock is granted and released."""
        lock = make_lock(store)

        token = lock.acquire("a")

        assert lock.is_locked("a")
        assert lock.release("a", token)
        assert not lock.is_locked("a")

    def test_held_lock_times_out_then_frees(self, store):
        """Test second acquirer times out, then succeeds after unlock."""
        lock = make_lock(store)
        first = lock.acquire("a")

        with pytest.raises(LockTimeout) as info:
            lock.acquire("a", timeout=0.1)
        assert info.value.key == "a"
        assert info.value.waited >= 0.1

        lock.release("a", first)
        second = lock.acquire("a", timeout=0.1)
        assert second != first

    def test_locks_are_per_key(self, store):
        """Test different keys do not contend."""
        lock = make_lock(store)

        lock.acquire("a")
        lock.acquire("b", timeout=0)

    def test_stale_release_is_noop(self, store):
        """Test an expired holder cannot release its successor's lock."""
        lock = make_lock(store, ttl_lock=0.1)
        token_a = lock.acquire("a")

        time.sleep(0.2)
        token_b = lock.acquire("a", timeout=0.5)

        assert not lock.release("a", token_a)
        assert lock.is_locked("a")
        assert lock.release("a", token_b)

    def test_crashed_holder_expires(self, store):
        """Test a never-released lock frees itself after its TTL."""
        lock = make_lock(store, ttl_lock=0.1)
        lock.acquire("a")

        token = lock.acquire("a", timeout=1.0)

        assert token is not None

    def test_mutual_exclusion(self, store):
        """Test at most one thread holds the lock at any instant."""
        lock = make_lock(store, acquire_timeout=10.0)
        holders = []
        max_holders = []
        errors = []
        guard = threading.Lock()

        def worker():
            try:
                token = lock.acquire("shared")
                with guard:
                    holders.append(token)
                    max_holders.append(len(holders))
                time.sleep(0.005)
                with guard:
                    holders.remove(token)
                lock.release("shared", token)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert len(max_holders) == 10
        assert max(max_holders) == 1

    def test_hold_releases_on_error(self, store):
        """Test context manager releases when the block raises."""
        lock = make_lock(store)

        with pytest.raises(RuntimeError):
            with lock.hold("a") as record:
                assert record.key == "a"
                assert not record.is_expired
                raise RuntimeError("boom")

        assert not lock.is_locked("a")


class TestPollingLoop:
    """Deterministic tests of the busy-wait loop."""

    def test_polls_until_deadline(self, memory_store):
        """Test retry cadence and deadline with a fake clock."""
        now = [0.0]
        sleeps = []

        def sleep(seconds):
            sleeps.append(seconds)
            now[0] += seconds

        lock = DistributedLock(
            memory_store,
            LockConfig(ttl_lock=100.0, ttl_data=10.0),
            sleep=sleep,
            clock=lambda: now[0],
        )
        lock.acquire("a")

        with pytest.raises(LockTimeout):
            lock.acquire("a")

        # timeout = 10 / 10 = 1s, interval = 100 / 10 = 10s, capped at the deadline
        assert sleeps == [1.0]

    def test_interval_cadence(self, memory_store):
        """Test sleeps use the poll interval until the deadline nears."""
        now = [0.0]
        sleeps = []

        def sleep(seconds):
            sleeps.append(seconds)
            now[0] += seconds

        lock = DistributedLock(
            memory_store,
            LockConfig(ttl_lock=2.5, ttl_data=10.0),
            sleep=sleep,
            clock=lambda: now[0],
        )
        lock.acquire("a")

        with pytest.raises(LockTimeout):
            lock.acquire("a")

        assert sleeps == pytest.approx([0.25, 0.25, 0.25, 0.25])
