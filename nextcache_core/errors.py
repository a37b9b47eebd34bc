"""NextCache Errors - Error Taxonomy.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

A cache miss is not an error: lookups report absence through their
return value. Everything raised by the library derives from CacheError.
"""

from __future__ import annotations

from typing import Optional


class CacheError(Exception):
    """Base class for cache errors."""


class ConfigError(CacheError):
    """Invalid or incomplete configuration."""


class SerializationError(CacheError):
    """Value could not be encoded, or stored bytes could not be decoded."""


class BackendError(CacheError):
    """Backend rejected or failed a command.

    Covers server-side error replies such as out-of-memory, read-only
    replica or wrong-type. Never used to signal a missing key.

    Attributes:
        backend: Backend name
        reason: Error reported by the backend
    """

    def __init__(self, backend: str, reason: str):
        super().__init__(self._format(backend, reason))
        self.backend = backend
        self.reason = reason

    @staticmethod
    def _format(backend: str, reason: str) -> str:
        return f"{backend} error: {reason}"


class BackendUnavailable(BackendError):
    """Transport or connection failure talking to a backend.

    Retryable by the caller.
    """

    @staticmethod
    def _format(backend: str, reason: str) -> str:
        return f"{backend} unavailable: {reason}"


class LockTimeout(CacheError):
    """Lock acquisition exceeded its deadline.

    Attributes:
        key: Key whose lock could not be acquired
        waited: Seconds spent polling before giving up
    """

    def __init__(self, key: str, waited: Optional[float] = None):
        message = f"unable to acquire the lock for key: {key}"
        if waited is not None:
            message += f" (waited {waited:.3f}s)"
        super().__init__(message)
        self.key = key
        self.waited = waited


class UpstreamFetchError(CacheError):
    """Upstream data provider failed to produce a value.

    Attributes:
        resource: Logical resource being fetched
    """

    def __init__(self, resource: str, reason: str):
        super().__init__(f"failed to fetch {resource}: {reason}")
        self.resource = resource
        self.reason = reason


__all__ = [
    "CacheError",
    "ConfigError",
    "SerializationError",
    "BackendError",
    "BackendUnavailable",
    "LockTimeout",
    "UpstreamFetchError",
]
