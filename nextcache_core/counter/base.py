"""NextCache Counter - Abstract Counter Interface.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator, Tuple


class Counter(ABC):
    """Named, monotonically incrementing counters.

    Implementations:
    - MemoryCounter: bounded, LRU-evicting, single process
    - RedisCounter: shared network store, counters kept indefinitely

    A counter comes into existence on its first increment, at 1.
    """

    @abstractmethod
    def get(self, key: str) -> Tuple[int, bool]:
        """Read a counter.

        Args:
            key: Counter name

        Returns:
            (value, found); (0, False) for an unknown counter
        """
        pass

    @abstractmethod
    def incr(self, key: str) -> int:
        """Increment a counter by one.

        Args:
            key: Counter name

        Returns:
            Value after the increment
        """
        pass

    @abstractmethod
    def iterate(self) -> Iterator[str]:
        """Lazily enumerate known counter names.

        Never omits a key that existed when enumeration started and
        tolerates concurrent increments. Order is unspecified.

        Yields:
            Counter names
        """
        pass

    def close(self) -> None:
        """Release backend resources."""

    def __iter__(self) -> Iterator[str]:
        return self.iterate()


__all__ = ["Counter"]
