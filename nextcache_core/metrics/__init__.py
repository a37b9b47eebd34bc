"""Metrics module - Request statistics."""

from nextcache_core.metrics.histogram import (
    StatsHistogram,
    HitReport,
    TimeBucket,
    format_duration,
)

__all__ = [
    "StatsHistogram",
    "HitReport",
    "TimeBucket",
    "format_duration",
]
