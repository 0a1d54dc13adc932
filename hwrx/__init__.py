"""
HwrX — Humminbird Waypoint, Route & Track Converter
=====================================================
Read and write Humminbird fishfinder files. Zero external dependencies.

Quick start:
    hwrconv spots.hwr --info          # CLI

Library:
    from hwrx import read_file, write_file
    arrays = read_file("spots.hwr")
    write_file("copy.hwr", arrays)
"""

from .models import GpsPoint, GpsRoute, GpsTrack, GpsWaypointArray, ArrayType
from .records import HumminbirdError
from .formats import (
    read_file, write_file, convert,
    supported_input_formats, supported_output_formats,
    get_format, FORMAT_REGISTRY,
)

__version__ = "1.0.0"
__all__ = [
    "GpsPoint", "GpsRoute", "GpsTrack", "GpsWaypointArray",
    "ArrayType", "HumminbirdError", "read_file", "write_file", "convert",
    "supported_input_formats", "supported_output_formats",
    "get_format", "FORMAT_REGISTRY",
]
