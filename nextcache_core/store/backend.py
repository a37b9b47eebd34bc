"""NextCache Storage Backend - Abstract Storage Interface.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class StorageConfig:
    """Storage backend configuration.

    Attributes:
        name: Backend name, used in logs and errors
        max_size: Maximum entries (embedded backends only)
        evict_live: Whether reaching max_size may discard unexpired
            entries; when False only expired entries are reclaimed and the
            store grows past max_size instead
    """

    name: str = "storage"
    max_size: Optional[int] = None
    evict_live: bool = True


@dataclass
class StorageStats:
    """Storage backend statistics.

    Attributes:
        reads: Number of read operations
        hits: Reads that found a live entry
        writes: Number of write operations
        deletes: Number of delete operations
        evictions: Entries discarded for capacity
        expirations: Entries found expired on read
        errors: Number of transport errors
    """

    reads: int = 0
    hits: int = 0
    writes: int = 0
    deletes: int = 0
    evictions: int = 0
    expirations: int = 0
    errors: int = 0
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate."""
        return self.hits / self.reads if self.reads > 0 else 0.0

    def record_error(self, error: str) -> None:
        """Record an error."""
        self.errors += 1
        self.last_error = error
        self.last_error_at = datetime.now()


class StorageBackend(ABC):
    """Abstract byte store with per-entry TTL.

    Implementations:
    - MemoryStore: bounded, LRU-evicting, single process
    - RedisStore: shared network store

    Both expose the same observable contract: an expired entry reads
    exactly like an absent one, and transport failures raise
    BackendUnavailable instead of reading as absent.
    """

    def __init__(self, config: Optional[StorageConfig] = None):
        """Initialize backend.

        Args:
            config: Storage configuration
        """
        self.config = config or StorageConfig()
        self._stats = StorageStats()

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Get value by key.

        Args:
            key: Cache key

        Returns:
            Stored bytes, or None when absent or expired
        """
        pass

    @abstractmethod
    def set(self, key: str, value: bytes, ttl: Optional[float] = None) -> None:
        """Store value unconditionally.

        Args:
            key: Cache key
            value: Bytes to store
            ttl: Seconds to live, None for no expiry
        """
        pass

    @abstractmethod
    def set_if_absent(self, key: str, value: bytes, ttl: Optional[float] = None) -> bool:
        """Store value only if no live entry exists for key.

        The check and the write are a single atomic step.

        Args:
            key: Cache key
            value: Bytes to store
            ttl: Seconds to live

        Returns:
            True if written
        """
        pass

    @abstractmethod
    def delete_if_equals(self, key: str, expected: bytes) -> bool:
        """Delete key only if its live value equals expected.

        The compare and the delete are a single atomic step.

        Args:
            key: Cache key
            expected: Value the entry must hold

        Returns:
            True if deleted
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete entry.

        Args:
            key: Cache key

        Returns:
            True if deleted
        """
        pass

    def exists(self, key: str) -> bool:
        """Check if a live entry exists."""
        return self.get(key) is not None

    def close(self) -> None:
        """Release backend resources."""

    def get_stats(self) -> StorageStats:
        """Get storage statistics.

        Returns:
            StorageStats instance
        """
        return self._stats

    def reset_stats(self) -> None:
        """Reset statistics."""
        self._stats = StorageStats()

    def __contains__(self, key: str) -> bool:
        return self.exists(key)


__all__ = ["StorageBackend", "StorageConfig", "StorageStats"]
