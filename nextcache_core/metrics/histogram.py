"""NextCache Stats Histogram - Request Hits and Latency Buckets.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import contextlib
import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from nextcache_core.counter.base import Counter
from nextcache_core.errors import CacheError

logger = logging.getLogger(__name__)

HITS_PREFIX = "hits:"
TIME_PREFIX = "time:"

NANOSECOND = 1e-9
MICROSECOND = 1e-6
MILLISECOND = 1e-3
SECOND = 1.0

_DURATION_UNITS = [
    (SECOND, "s"),
    (MILLISECOND, "ms"),
    (MICROSECOND, "µs"),
    (NANOSECOND, "ns"),
]


def format_duration(seconds: float) -> str:
    """Render a duration with the largest unit that keeps it >= 1.

    Args:
        seconds: Duration in seconds

    Returns:
        String such as "100ns", "1µs", "1.5ms" or "10s"
    """
    if seconds <= 0:
        return "0s"
    for size, suffix in _DURATION_UNITS:
        # Tolerate float error such as 1000 * 1e-9 landing just below 1e-6.
        if seconds >= size * (1 - 1e-9):
            return f"{seconds / size:.6g}{suffix}"
    return f"{seconds / NANOSECOND:.6g}ns"


def magnitude_order(value: float) -> int:
    """Integer-truncated base-10 logarithm, 0 for values below 1."""
    if value < 1:
        return 0
    return int(math.log10(value))


@dataclass
class HitReport:
    """Request count for one endpoint.

    Attributes:
        endpoint: Request identity
        num_requests: Times it was served
    """

    endpoint: str
    num_requests: int

    def to_dict(self) -> Dict[str, Any]:
        return {"Endpoint": self.endpoint, "NumRequests": self.num_requests}


@dataclass
class TimeBucket:
    """Requests whose elapsed time fell in [10^(order-1), 10^order) units.

    Attributes:
        order: Bucket order of magnitude
        num_requests: Requests in the bucket
        lower: Lower bound in histogram units
        upper: Upper bound in histogram units
        more_than: Lower bound as a duration string
        less_than: Upper bound as a duration string
    """

    order: int
    num_requests: int
    lower: float
    upper: float
    more_than: str
    less_than: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "NumRequests": self.num_requests,
            "MoreThan": self.more_than,
            "LessThan": self.less_than,
        }


class StatsHistogram:
    """Per-endpoint hit counts and a log10 latency histogram.

    Built directly on a Counter, without locking. Each measured unit of
    work increments ``hits:<identity>`` and ``time:<order>``, where order
    is the truncated log10 of the elapsed time in ``unit`` seconds
    (nanoseconds by default).

    Example:
        stats = StatsHistogram(MemoryCounter())
        with stats.measure("/api/agencies"):
            handle_request()
        stats.hits()   # [HitReport("/api/agencies", 1)]
        stats.times()  # [TimeBucket(order=7, ...)]
    """

    def __init__(self, counter: Counter, unit: float = NANOSECOND):
        """Initialize histogram.

        Args:
            counter: Counter backend
            unit: Histogram time unit in seconds
        """
        if unit <= 0:
            raise ValueError(f"histogram unit must be positive, got {unit}")
        self.counter = counter
        self.unit = unit

    def order_of(self, elapsed_seconds: float) -> int:
        """Bucket order for an elapsed time."""
        return magnitude_order(elapsed_seconds / self.unit)

    def record(self, identity: str, elapsed_seconds: float) -> None:
        """Count one request and its elapsed time.

        Counter failures are logged, never raised: statistics must not
        fail the request they describe.

        Args:
            identity: Request identity, e.g. the URL
            elapsed_seconds: Wall-clock duration
        """
        order = self.order_of(elapsed_seconds)
        for key in (f"{HITS_PREFIX}{identity}", f"{TIME_PREFIX}{order}"):
            try:
                self.counter.incr(key)
            except CacheError as e:
                logger.warning(f"Failed to increment {key!r}: {e}")

    @contextlib.contextmanager
    def measure(self, identity: str) -> Iterator[None]:
        """Time a with block and record it, even if it raises."""
        started = time.perf_counter()
        try:
            yield
        finally:
            self.record(identity, time.perf_counter() - started)

    def hits(self) -> List[HitReport]:
        """Report hit totals per request identity.

        Returns:
            HitReports sorted by endpoint
        """
        reports = []
        for key in self.counter.iterate():
            if not key.startswith(HITS_PREFIX):
                continue
            value, found = self.counter.get(key)
            if found:
                reports.append(HitReport(endpoint=key[len(HITS_PREFIX):], num_requests=value))
        reports.sort(key=lambda r: r.endpoint)
        return reports

    def times(self) -> List[TimeBucket]:
        """Report populated latency buckets.

        Returns:
            TimeBuckets sorted by order
        """
        buckets = []
        for key in self.counter.iterate():
            if not key.startswith(TIME_PREFIX):
                continue
            try:
                order = int(key[len(TIME_PREFIX):])
            except ValueError:
                logger.debug(f"Ignoring malformed time bucket {key!r}")
                continue
            value, found = self.counter.get(key)
            if found:
                buckets.append(self._bucket(order, value))
        buckets.sort(key=lambda b: b.order)
        return buckets

    def _bucket(self, order: int, count: int) -> TimeBucket:
        lower = 10.0 ** (order - 1)
        upper = 10.0 ** order
        return TimeBucket(
            order=order,
            num_requests=count,
            lower=lower,
            upper=upper,
            more_than=format_duration(lower * self.unit),
            less_than=format_duration(upper * self.unit),
        )

    def __repr__(self) -> str:
        return f"StatsHistogram(counter={self.counter!r}, unit={format_duration(self.unit)})"


__all__ = [
    "StatsHistogram",
    "HitReport",
    "TimeBucket",
    "format_duration",
    "magnitude_order",
    "NANOSECOND",
    "MICROSECOND",
    "MILLISECOND",
    "SECOND",
]
