"""NextCache Transit Provider - Upstream Boundary.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

The upstream client is slow and rate-limited. Only its call surface is
defined here; implementations raise on failure (UpstreamFetchError or
their own transport errors) and never return partial data.
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from nextcache_core.transit.models import Agency, Predictions, Route, RouteConfig, Schedule


@runtime_checkable
class TransitProvider(Protocol):
    def get_agencies(self) -> List[Agency]:
        ...

    def get_routes(self, agency_tag: str) -> List[Route]:
        ...

    def get_route_config(self, agency_tag: str, route_tag: str) -> RouteConfig:
        ...

    def get_predictions(self, agency_tag: str, route_tag: str, stop_tag: str) -> Predictions:
        ...

    def get_schedules(self, agency_tag: str, route_tag: str) -> List[Schedule]:
        ...


__all__ = ["TransitProvider"]
