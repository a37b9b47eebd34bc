"""NextCache Transit Data - Cached Access to the Upstream Provider.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from nextcache_core.cache.cache import Cache
from nextcache_core.fetch.orchestrator import CachedFetcher
from nextcache_core.transit.models import (
    Agency,
    Prediction,
    Predictions,
    Route,
    RouteConfig,
    RoutesAvailability,
    Schedule,
    SchedulesRange,
    Stop,
)
from nextcache_core.transit.provider import TransitProvider

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000

# Placeholder for a trip that does not serve a stop.
SKIPPED_STOP = "--"


def parse_time_of_day(text: str, now: Optional[datetime] = None) -> int:
    """Parse a time of day into milliseconds since midnight.

    Accepts "" (current time), "H", "HH", "H:MM", "HH:MM" and "HH:MM:SS".

    Args:
        text: Time of day
        now: Clock override for the empty form

    Returns:
        Milliseconds since midnight

    Raises:
        ValueError: If text is not a valid time of day
    """
    text = text.strip()
    if not text:
        now = now or datetime.now()
        return ((now.hour * 60 + now.minute) * 60 + now.second) * 1000

    parts = text.split(":")
    if len(parts) > 3 or not all(p.isdigit() and 1 <= len(p) <= 2 for p in parts):
        raise ValueError(f"invalid time of day: {text!r}")

    hours, minutes, seconds = (int(p) for p in parts + ["0"] * (3 - len(parts)))
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ValueError(f"invalid time of day: {text!r}")
    return ((hours * 60 + minutes) * 60 + seconds) * 1000


class TransitData:
    """Transit lookups served through the cache.

    Collections are cached whole under path-like keys; single items are
    found by reading the owning collection and filtering in memory.

    Example:
        data = TransitData(cache, provider)
        routes = data.get_routes("sf-muni")
        route = data.get_route("sf-muni", "N")
    """

    def __init__(self, cache: Cache, provider: TransitProvider):
        self.cache = cache
        self.provider = provider
        self._fetcher = CachedFetcher(cache)

    def get_agencies(self) -> List[Agency]:
        def fetch() -> List[Agency]:
            logger.info("Fetching agencies")
            return self.provider.get_agencies()

        return self._fetcher.fetch("agencies", fetch, Agency.list_from)

    def get_agency(self, agency_tag: str) -> Optional[Agency]:
        for agency in self.get_agencies():
            if agency.tag == agency_tag:
                return agency
        return None

    def get_routes(self, agency_tag: str) -> List[Route]:
        def fetch() -> List[Route]:
            logger.info(f"Fetching routes for agency: {agency_tag}")
            return self.provider.get_routes(agency_tag)

        return self._fetcher.fetch(f"agencies/{agency_tag}/routes", fetch, Route.list_from)

    def get_route(self, agency_tag: str, route_tag: str) -> Optional[Route]:
        for route in self.get_routes(agency_tag):
            if route.tag == route_tag:
                return route
        return None

    def get_route_config(self, agency_tag: str, route_tag: str) -> RouteConfig:
        def fetch() -> RouteConfig:
            logger.info(f"Fetching stops for agency/route: {agency_tag}/{route_tag}")
            return self.provider.get_route_config(agency_tag, route_tag)

        key = f"agencies/{agency_tag}/routes/{route_tag}/config"
        return self._fetcher.fetch(key, fetch, RouteConfig.from_dict)

    def get_stops(self, agency_tag: str, route_tag: str) -> List[Stop]:
        return self.get_route_config(agency_tag, route_tag).stops

    def get_stop(self, agency_tag: str, route_tag: str, stop_tag: str) -> Optional[Stop]:
        for stop in self.get_stops(agency_tag, route_tag):
            if stop.tag == stop_tag:
                return stop
        return None

    def get_predictions(self, agency_tag: str, route_tag: str, stop_tag: str) -> List[Prediction]:
        def fetch() -> Predictions:
            logger.info(f"Fetching predictions for agency/route/stop: {agency_tag}/{route_tag}/{stop_tag}")
            return self.provider.get_predictions(agency_tag, route_tag, stop_tag)

        key = f"agencies/{agency_tag}/routes/{route_tag}/stops/{stop_tag}/predictions"
        return self._fetcher.fetch(key, fetch, Predictions.from_dict).predictions

    def get_schedules(self, agency_tag: str, route_tag: str) -> List[Schedule]:
        def fetch() -> List[Schedule]:
            logger.info(f"Fetching schedules for agency/route: {agency_tag}/{route_tag}")
            return self.provider.get_schedules(agency_tag, route_tag)

        key = f"agencies/{agency_tag}/routes/{route_tag}/schedules"
        return self._fetcher.fetch(key, fetch, Schedule.list_from)

    def get_schedules_range(self, agency_tag: str, route_tag: str) -> Optional[SchedulesRange]:
        """Earliest and latest scheduled stop time of a route.

        Returns:
            SchedulesRange, or None if no stop is ever served

        Raises:
            ValueError: If a schedule carries a non-numeric time
        """
        # TODO: compare per service class and direction (e.g. sat:Inbound) instead of across all schedules.
        start: Optional[int] = None
        end: Optional[int] = None
        for schedule in self.get_schedules(agency_tag, route_tag):
            for trip in schedule.trips:
                for stop in trip.stops:
                    if stop.content == SKIPPED_STOP:
                        continue
                    epoch = int(stop.epoch_time)
                    start = epoch if start is None else min(start, epoch)
                    end = epoch if end is None else max(end, epoch)

        if start is None or end is None:
            return None
        return SchedulesRange(start=start, end=end)

    def get_routes_availability(self, agency_tag: str, time_ms: int) -> RoutesAvailability:
        """Partition an agency's routes by whether they run at time_ms.

        A route also counts as running when time_ms falls inside a
        schedule range that spills past midnight.

        Args:
            agency_tag: Agency tag
            time_ms: Milliseconds since midnight

        Returns:
            RoutesAvailability
        """
        next_day = time_ms + DAY_MS
        availability = RoutesAvailability()

        for route in self.get_routes(agency_tag):
            try:
                schedules_range = self.get_schedules_range(agency_tag, route.tag)
            except Exception as e:
                logger.warning(f"Schedules for route <{route.tag}> failed: {e}")
                schedules_range = None

            if schedules_range is None:
                logger.info(f"Schedules for route <{route.tag}> either failed or returned an empty result")
                availability.unknown.append(route)
            elif schedules_range.contains(time_ms) or schedules_range.contains(next_day):
                availability.running.append(route)
            else:
                availability.not_running.append(route)

        return availability

    def __repr__(self) -> str:
        return f"TransitData(cache={self.cache!r})"


__all__ = ["TransitData", "parse_time_of_day", "DAY_MS"]
