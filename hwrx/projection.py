"""
HwrX — Humminbird coordinate projection

Humminbird units store positions as a pair of 32-bit integers. "east" is
linear in longitude; "north" is a Mercator-style value on the International
1924 ellipsoid, expressed as a geocentric latitude that has to be converted
back to the geodetic latitude used everywhere else.
"""

from __future__ import annotations
import math
from typing import Tuple

I1924_EQU_AXIS = 6378388.0
COS_AE = 0.9966349016452
COS2_AE = COS_AE * COS_AE
EAST_SCALE = 20038297.0  # i1924 equatorial axis * pi


def round_half_away(value: float) -> int:
    """Round to nearest integer, halves away from zero."""
    return int(value + 0.5) if value >= 0 else int(value - 0.5)


def geodetic_to_geocentric(lat: float) -> float:
    """Takes a latitude in degrees, returns a latitude in degrees."""
    return math.degrees(math.atan(COS2_AE * math.tan(math.radians(lat))))


def geocentric_to_geodetic(lat: float) -> float:
    """Takes a latitude in degrees, returns a latitude in degrees."""
    return math.degrees(math.atan(math.tan(math.radians(lat)) / COS2_AE))


def gudermannian_i1924(x: float) -> float:
    """Takes a projected "north" value, returns latitude in degrees."""
    return math.degrees(math.atan(math.sinh(x / I1924_EQU_AXIS)))


def inverse_gudermannian_i1924(lat: float) -> float:
    """Takes latitude in degrees, returns projected "north" value.

    The south pole lands exactly on tan() == 0, so it is mirrored from the
    north pole, which stays finite.
    """
    lat = max(-90.0, min(90.0, lat))
    t = math.tan(math.pi / 4 + math.radians(lat) / 2)
    if t <= 0.0:
        return -inverse_gudermannian_i1924(-lat)
    return I1924_EQU_AXIS * math.log(t)


def to_lat_lng(east: int, north: int) -> Tuple[float, float]:
    """Convert Humminbird east/north to WGS84 lat/lng."""
    lat = geocentric_to_geodetic(gudermannian_i1924(north))
    lng = east / EAST_SCALE * 180.0
    return lat, lng


def from_lat_lng(lat: float, lng: float) -> Tuple[int, int]:
    """Convert WGS84 lat/lng to Humminbird east/north."""
    east = round_half_away(lng / 180.0 * EAST_SCALE)
    north = round_half_away(inverse_gudermannian_i1924(geodetic_to_geocentric(lat)))
    return east, north
