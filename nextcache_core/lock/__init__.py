"""Lock module - Per-key mutual exclusion over a storage backend."""

from nextcache_core.lock.distributed import (
    DistributedLock,
    LockConfig,
    LOCK_PREFIX,
)

__all__ = [
    "DistributedLock",
    "LockConfig",
    "LOCK_PREFIX",
]
