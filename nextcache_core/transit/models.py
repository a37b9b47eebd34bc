"""NextCache Transit Models - Upstream Domain Objects.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Agency:
    tag: str
    title: str = ""
    region_title: str = ""
    short_title: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Agency":
        return cls(
            tag=data["tag"],
            title=data.get("title", ""),
            region_title=data.get("region_title", ""),
            short_title=data.get("short_title", ""),
        )

    @classmethod
    def list_from(cls, items: List[Dict[str, Any]]) -> List["Agency"]:
        return [cls.from_dict(item) for item in items]


@dataclass
class Route:
    tag: str
    title: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Route":
        return cls(tag=data["tag"], title=data.get("title", ""))

    @classmethod
    def list_from(cls, items: List[Dict[str, Any]]) -> List["Route"]:
        return [cls.from_dict(item) for item in items]


@dataclass
class Stop:
    tag: str
    title: str = ""
    lat: Optional[float] = None
    lon: Optional[float] = None
    stop_id: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Stop":
        return cls(
            tag=data["tag"],
            title=data.get("title", ""),
            lat=data.get("lat"),
            lon=data.get("lon"),
            stop_id=data.get("stop_id", ""),
        )


@dataclass
class RouteConfig:
    """Route description including its stops."""

    tag: str
    title: str = ""
    stops: List[Stop] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RouteConfig":
        return cls(
            tag=data["tag"],
            title=data.get("title", ""),
            stops=[Stop.from_dict(s) for s in data.get("stops", [])],
        )


@dataclass
class Prediction:
    epoch_time: int
    seconds: int = 0
    minutes: int = 0
    is_departure: bool = False
    dir_tag: str = ""
    vehicle: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Prediction":
        return cls(
            epoch_time=int(data["epoch_time"]),
            seconds=int(data.get("seconds", 0)),
            minutes=int(data.get("minutes", 0)),
            is_departure=bool(data.get("is_departure", False)),
            dir_tag=data.get("dir_tag", ""),
            vehicle=data.get("vehicle", ""),
        )


@dataclass
class Predictions:
    """Predictions for one stop, grouped under its direction."""

    stop_tag: str
    direction_title: str = ""
    predictions: List[Prediction] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Predictions":
        return cls(
            stop_tag=data["stop_tag"],
            direction_title=data.get("direction_title", ""),
            predictions=[Prediction.from_dict(p) for p in data.get("predictions", [])],
        )


@dataclass
class ScheduleStop:
    """A scheduled stop time; content "--" marks a trip skipping the stop."""

    tag: str
    epoch_time: str = ""
    content: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduleStop":
        return cls(
            tag=data["tag"],
            epoch_time=str(data.get("epoch_time", "")),
            content=data.get("content", ""),
        )


@dataclass
class Trip:
    block_id: str = ""
    stops: List[ScheduleStop] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Trip":
        return cls(
            block_id=data.get("block_id", ""),
            stops=[ScheduleStop.from_dict(s) for s in data.get("stops", [])],
        )


@dataclass
class Schedule:
    tag: str
    title: str = ""
    service_class: str = ""
    direction: str = ""
    trips: List[Trip] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Schedule":
        return cls(
            tag=data["tag"],
            title=data.get("title", ""),
            service_class=data.get("service_class", ""),
            direction=data.get("direction", ""),
            trips=[Trip.from_dict(t) for t in data.get("trips", [])],
        )

    @classmethod
    def list_from(cls, items: List[Dict[str, Any]]) -> List["Schedule"]:
        return [cls.from_dict(item) for item in items]


@dataclass
class SchedulesRange:
    """Earliest and latest scheduled time, in ms since midnight."""

    start: int
    end: int

    def contains(self, time_ms: int) -> bool:
        return self.start <= time_ms <= self.end


@dataclass
class RoutesAvailability:
    running: List[Route] = field(default_factory=list)
    not_running: List[Route] = field(default_factory=list)
    unknown: List[Route] = field(default_factory=list)


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
]
