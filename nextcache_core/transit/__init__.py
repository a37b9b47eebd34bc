"""Transit module - Cached access to the upstream transit provider."""

from nextcache_core.transit.models import (
    Agency,
    Route,
    Stop,
    RouteConfig,
    Prediction,
    Predictions,
    ScheduleStop,
    Trip,
    Schedule,
    SchedulesRange,
    RoutesAvailability,
)
from nextcache_core.transit.provider import TransitProvider
from nextcache_core.transit.service import TransitData, parse_time_of_day

__all__ = [
    "Agency",
    "Route",
    "Stop",
    "RouteConfig",
    "Prediction",
    "Predictions",
    "ScheduleStop",
    "Trip",
    "Schedule",
    "SchedulesRange",
    "RoutesAvailability",
    "TransitProvider",
    "TransitData",
    "parse_time_of_day",
]
