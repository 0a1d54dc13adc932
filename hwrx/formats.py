"""
HwrX — Format Readers & Writers

Supported formats:
  Read & Write: HWR (Humminbird waypoints and routes), HT (Humminbird tracks)
"""

from __future__ import annotations
import inspect
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Dict, Callable
from pathlib import Path

from .models import ArrayType, GpsPointArray
from .humminbird import HumminbirdReader, HumminbirdWriter

logger = logging.getLogger(__name__)

SOFT_NAME = "HwrX"
SOFT_VERSION = "1.0"
SOFT_FULL_NAME = f"{SOFT_NAME} v{SOFT_VERSION}"


# ─────────────────────────────────────────────────────────────
# Humminbird - .hwr / .ht
# ─────────────────────────────────────────────────────────────

def read_humminbird(filepath: str) -> List[GpsPointArray]:
    """Read a Humminbird .hwr or .ht file."""
    with open(filepath, "rb") as f:
        data = f.read()
    logger.debug("Reading %s (%d bytes)", filepath, len(data))
    return HumminbirdReader(data).read()


def write_hwr(filepath: str, arrays: List[GpsPointArray], synthesize_shortnames: bool = False,
              timestamp: Optional[datetime] = None):
    """Write Humminbird waypoints and routes."""
    waypoints = [pt for arr in arrays if arr.array_type == ArrayType.WAYPOINT for pt in arr]
    routes = [arr for arr in arrays if arr.array_type == ArrayType.ROUTE]
    writer = HumminbirdWriter(synthesize_shortnames=synthesize_shortnames, timestamp=timestamp)
    data = writer.write_waypoints(waypoints, routes)
    with open(filepath, "wb") as f:
        f.write(data)


def write_ht(filepath: str, arrays: List[GpsPointArray], old_format: bool = False):
    """Write Humminbird tracks."""
    tracks = [arr for arr in arrays if arr.array_type == ArrayType.TRACK]
    data = HumminbirdWriter().write_tracks(tracks, old_format=old_format)
    with open(filepath, "wb") as f:
        f.write(data)


# ─────────────────────────────────────────────────────────────
# Format Registry
# ─────────────────────────────────────────────────────────────

@dataclass
class FormatDesc:
    """Description of a file format."""
    extension: str
    name: str
    reader: Optional[Callable] = None
    writer: Optional[Callable] = None


# Master format registry
FORMAT_REGISTRY: List[FormatDesc] = [
    FormatDesc("hwr",     "Humminbird waypoints and routes", read_humminbird, write_hwr),
    FormatDesc("ht",      "Humminbird tracks",               read_humminbird, write_ht),
]

# Build lookup dicts
_READERS: Dict[str, Callable] = {}
_WRITERS: Dict[str, Callable] = {}
_FORMAT_BY_EXT: Dict[str, FormatDesc] = {}

for fmt in FORMAT_REGISTRY:
    _FORMAT_BY_EXT[fmt.extension] = fmt
    if fmt.reader:
        _READERS[fmt.extension] = fmt.reader
    if fmt.writer:
        _WRITERS[fmt.extension] = fmt.writer


def get_format(ext: str) -> Optional[FormatDesc]:
    """Get format descriptor by extension."""
    return _FORMAT_BY_EXT.get(ext.lower().lstrip("."))


def supported_input_formats() -> List[str]:
    """List of readable format extensions."""
    return sorted(_READERS.keys())


def supported_output_formats() -> List[str]:
    """List of writable format extensions."""
    return sorted(_WRITERS.keys())


def _filter_kwargs(func: Callable, opts: dict) -> dict:
    """Filter kwargs to only include parameters accepted by the function."""
    sig = inspect.signature(func)
    if any(p.kind == inspect.Parameter.VAR_KEYWORD for p in sig.parameters.values()):
        return opts  # Function accepts **kwargs
    valid = set(sig.parameters.keys())
    return {k: v for k, v in opts.items() if k in valid}


def read_file(filepath: str, **opts) -> List[GpsPointArray]:
    """Auto-detect format and read GPS file."""
    ext = Path(filepath).suffix.lower().lstrip(".")
    reader = _READERS.get(ext)
    if not reader:
        raise ValueError(f"Unsupported input format: .{ext}\n"
                         f"Supported: {', '.join(supported_input_formats())}")
    filtered = _filter_kwargs(reader, opts)
    return reader(filepath, **filtered)


def write_file(filepath: str, arrays: List[GpsPointArray], **opts):
    """Auto-detect format and write GPS file."""
    ext = Path(filepath).suffix.lower().lstrip(".")
    writer = _WRITERS.get(ext)
    if not writer:
        raise ValueError(f"Unsupported output format: .{ext}\n"
                         f"Supported: {', '.join(supported_output_formats())}")
    filtered = _filter_kwargs(writer, opts)
    writer(filepath, arrays, **filtered)


def convert(input_path: str, output_path: str, **opts) -> List[GpsPointArray]:
    """Convert a GPS file from one format to another."""
    arrays = read_file(input_path, **opts)
    if not arrays:
        raise ValueError(f"No GPS data found in {input_path}")
    write_file(output_path, arrays, **opts)
    return arrays
