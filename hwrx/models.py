"""
HwrX — Humminbird Waypoint/Route/Track Converter
Data models: GpsPoint, GpsRoute, GpsTrack, GpsWaypointArray
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from enum import Enum


class ArrayType(Enum):
    ROUTE = "route"
    TRACK = "track"
    WAYPOINT = "waypoint"


@dataclass
class GpsPoint:
    """A single GPS point with coordinates and metadata."""
    lat: float = 0.0
    lng: float = 0.0
    alt: float = 0.0
    name: str = ""
    comment: str = ""
    depth: Optional[float] = None  # metres below the surface
    time: Optional[datetime] = None
    icon: str = ""

    def __bool__(self) -> bool:
        return self.lat != 0.0 or self.lng != 0.0

    def distance_from(self, other: GpsPoint) -> float:
        """Haversine distance in meters."""
        R = 6371000  # Earth radius in meters
        lat1, lat2 = math.radians(self.lat), math.radians(other.lat)
        dlat = math.radians(other.lat - self.lat)
        dlng = math.radians(other.lng - self.lng)
        a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
        return R * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    def copy(self) -> GpsPoint:
        return GpsPoint(self.lat, self.lng, self.alt, self.name, self.comment,
                        self.depth, self.time, self.icon)


class GpsPointArray:
    """Base class for collections of GPS points."""

    def __init__(self, array_type: ArrayType, name: str = "", number: int = 0):
        self._points: List[GpsPoint] = []
        self._name: str = name
        self._type: ArrayType = array_type
        self.number: int = number

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str):
        self._name = value

    @property
    def array_type(self) -> ArrayType:
        return self._type

    def __len__(self) -> int:
        return len(self._points)

    def __getitem__(self, index) -> GpsPoint:
        return self._points[index]

    def __iter__(self):
        return iter(self._points)

    def __bool__(self) -> bool:
        return len(self._points) > 0

    @property
    def empty(self) -> bool:
        return len(self._points) == 0

    def append(self, point: GpsPoint):
        self._points.append(point)

    def total_distance(self) -> float:
        """Total distance in meters."""
        total = 0.0
        for i in range(1, len(self._points)):
            total += self._points[i - 1].distance_from(self._points[i])
        return total

    def bounds(self):
        """Returns (min_lat, min_lng, max_lat, max_lng)."""
        if not self._points:
            return (0, 0, 0, 0)
        lats = [p.lat for p in self._points]
        lngs = [p.lng for p in self._points]
        return (min(lats), min(lngs), max(lats), max(lngs))


class GpsRoute(GpsPointArray):
    def __init__(self, name: str = "", number: int = 0):
        super().__init__(ArrayType.ROUTE, name, number)


class GpsTrack(GpsPointArray):
    def __init__(self, name: str = "", number: int = 0):
        super().__init__(ArrayType.TRACK, name, number)


class GpsWaypointArray(GpsPointArray):
    def __init__(self, name: str = ""):
        super().__init__(ArrayType.WAYPOINT, name)
