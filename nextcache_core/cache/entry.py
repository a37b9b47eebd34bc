"""NextCache Entry - Stored Records with TTL.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional


def expiry_from_ttl(ttl_seconds: Optional[float]) -> Optional[float]:
    """Compute a monotonic expiry deadline.

    Args:
        ttl_seconds: Time to live, or None for no expiry

    Returns:
        Deadline on the time.monotonic() clock, or None
    """
    if ttl_seconds is None:
        return None
    return time.monotonic() + ttl_seconds


@dataclass
class CacheEntry:
    """An encoded value held by a backend store.

    Attributes:
        key: Cache key
        value: Codec-encoded bytes
        expires_at: Monotonic deadline, None if the entry never expires
    """

    key: str
    value: Any
    expires_at: Optional[float] = None

    @classmethod
    def with_ttl(cls, key: str, value: Any, ttl_seconds: Optional[float]) -> "CacheEntry":
        """Create an entry expiring ttl_seconds from now."""
        return cls(key=key, value=value, expires_at=expiry_from_ttl(ttl_seconds))

    @property
    def is_expired(self) -> bool:
        """Check if entry has expired."""
        if self.expires_at is None:
            return False
        return time.monotonic() >= self.expires_at

    @property
    def remaining_ttl(self) -> Optional[float]:
        """Get remaining TTL in seconds."""
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - time.monotonic())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "remaining_ttl": self.remaining_ttl,
            "expired": self.is_expired,
        }

    def __repr__(self) -> str:
        if self.expires_at is None:
            return f"CacheEntry(key={self.key!r})"
        return f"CacheEntry(key={self.key!r}, ttl={self.remaining_ttl:.1f}s)"


__all__ = ["CacheEntry", "expiry_from_ttl"]
