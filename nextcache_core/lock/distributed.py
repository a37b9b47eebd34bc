"""NextCache Distributed Lock - Per-Key Mutual Exclusion.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import contextlib
import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from nextcache_core.errors import BackendError, LockTimeout
from nextcache_core.store.backend import StorageBackend

logger = logging.getLogger(__name__)

LOCK_PREFIX = "lock:"

_random = random.SystemRandom()


@dataclass(frozen=True)
class LockRecord:
    """Proof of lock ownership.

    Attributes:
        key: Locked key (without the lock prefix)
        token: Opaque ownership token chosen by the acquirer
        expires_at: Monotonic deadline after which the backend drops the lock
    """

    key: str
    token: int
    expires_at: Optional[float] = None

    @property
    def is_expired(self) -> bool:
        """Check if the lock TTL has elapsed."""
        if self.expires_at is None:
            return False
        return time.monotonic() >= self.expires_at


def new_token() -> int:
    """Generate a large non-zero ownership token."""
    return _random.getrandbits(63) or 1


@dataclass
class LockConfig:
    """Lock timing configuration.

    The acquisition timeout defaults to a tenth of the data TTL and the
    poll interval to a tenth of the lock TTL.

    Attributes:
        ttl_lock: Seconds a lock record lives before self-expiring
        ttl_data: Seconds cached data lives
        acquire_timeout: Override for the acquisition deadline
        poll_interval: Override for the retry cadence
    """

    ttl_lock: float = 5.0
    ttl_data: float = 60.0
    acquire_timeout: Optional[float] = None
    poll_interval: Optional[float] = None

    def __post_init__(self):
        if self.ttl_lock <= 0:
            raise ValueError(f"ttl_lock must be positive, got {self.ttl_lock}")
        if self.ttl_data <= 0:
            raise ValueError(f"ttl_data must be positive, got {self.ttl_data}")

    @property
    def timeout(self) -> float:
        if self.acquire_timeout is not None:
            return self.acquire_timeout
        return self.ttl_data / 10

    @property
    def interval(self) -> float:
        if self.poll_interval is not None:
            return self.poll_interval
        return self.ttl_lock / 10


class DistributedLock:
    """Busy-wait lock built on any StorageBackend.

    Acquisition writes a token under ``lock:<key>`` only if no record
    exists, polling at a fixed interval until a deadline. Release deletes
    the record only while it still holds the caller's token, so a holder
    whose lock expired cannot release a successor's lock. Each record
    carries the lock TTL so a crashed holder never blocks forever.

    Example:
        lock = DistributedLock(MemoryStore(), LockConfig(ttl_lock=5, ttl_data=60))
        token = lock.acquire("agencies")
        try:
            ...
        finally:
            lock.release("agencies", token)
    """

    def __init__(
        self,
        store: StorageBackend,
        config: Optional[LockConfig] = None,
        prefix: str = LOCK_PREFIX,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize lock.

        Args:
            store: Backend holding lock records
            config: Lock timing configuration
            prefix: Key prefix separating lock records from data
            sleep: Sleep function used between attempts
            clock: Monotonic clock used for the deadline
        """
        self.store = store
        self.config = config or LockConfig()
        self.prefix = prefix
        self._sleep = sleep
        self._clock = clock

    def _lock_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def try_acquire(self, key: str, token: Optional[int] = None) -> Optional[int]:
        """Make a single acquisition attempt.

        Args:
            key: Key to lock
            token: Token to write, a fresh one if None

        Returns:
            Token on success, None if the lock is held
        """
        token = token if token is not None else new_token()
        if self.store.set_if_absent(self._lock_key(key), str(token).encode(), self.config.ttl_lock):
            return token
        return None

    def acquire(self, key: str, timeout: Optional[float] = None) -> int:
        """Acquire the lock for key, polling until the deadline.

        Args:
            key: Key to lock
            timeout: Override for the configured acquisition timeout

        Returns:
            Ownership token

        Raises:
            LockTimeout: If the lock stayed held past the deadline
            BackendError: If the backend cannot be reached or rejects the write
        """
        deadline = self.config.timeout if timeout is None else timeout
        interval = self.config.interval
        token = new_token()
        started = self._clock()
        attempts = 0

        while True:
            attempts += 1
            if self.try_acquire(key, token) is not None:
                logger.debug(f"Acquired lock {key!r} after {attempts} attempt(s)")
                return token

            waited = self._clock() - started
            if waited >= deadline:
                logger.debug(f"Gave up on lock {key!r} after {attempts} attempt(s)")
                raise LockTimeout(key, waited)

            self._sleep(min(interval, deadline - waited))

    def release(self, key: str, token: int) -> bool:
        """Release the lock if token still owns it.

        Args:
            key: Locked key
            token: Token returned by acquire

        Returns:
            True if the record was removed, False for a stale release
        """
        released = self.store.delete_if_equals(self._lock_key(key), str(token).encode())
        if released:
            logger.debug(f"Released lock {key!r}")
        else:
            logger.debug(f"Stale release of lock {key!r} ignored")
        return released

    def is_locked(self, key: str) -> bool:
        return self.store.exists(self._lock_key(key))

    @contextlib.contextmanager
    def hold(self, key: str, timeout: Optional[float] = None) -> Iterator[LockRecord]:
        """Hold the lock for the duration of a with block.

        Release runs even if the block raises; if release itself cannot
        reach the backend, the lock TTL frees the key.

        Yields:
            LockRecord for the held lock
        """
        token = self.acquire(key, timeout=timeout)
        record = LockRecord(key=key, token=token, expires_at=time.monotonic() + self.config.ttl_lock)
        try:
            yield record
        finally:
            try:
                self.release(key, token)
            except BackendError as e:
                logger.warning(f"Could not release lock {key!r}, leaving it to expire: {e}")

    def __repr__(self) -> str:
        return (
            f"DistributedLock(store={self.store!r}, timeout={self.config.timeout:.3f}s, "
            f"interval={self.config.interval:.3f}s)"
        )


__all__ = ["DistributedLock", "LockConfig", "LockRecord", "LOCK_PREFIX", "new_token"]
