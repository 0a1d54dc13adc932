"""
HwrX — Humminbird fishfinder records

Readers and writers for the Humminbird binary formats:
  .hwr  waypoints and routes (plus, on some units, a trailing track)
  .ht   a single track, either the current 131080-byte layout or the
        older 8048-byte one

A stream is a sequence of records, each introduced by a 4-byte signature.
Routes refer to waypoints by their file-local number, so a stream has to be
read front to back with the waypoints indexed before any route that uses
them. A track record always ends the useful data; the rest of the file is
zero padding.
"""

from __future__ import annotations
import logging
import struct
from datetime import datetime, timezone
from enum import IntEnum
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .models import GpsPoint, GpsPointArray, GpsRoute, GpsTrack, GpsWaypointArray
from .projection import from_lat_lng, round_half_away, to_lat_lng
from .records import (
    ByteReader, HumminbirdError, Magic,
    ROUTE, TRACK_HEADER, TRACK_HEADER_OLD, TRACK_POINT, TRACK_POINT_OLD, WAYPOINT,
    MAX_RTE_POINTS, RTE_NAME_LEN, TRK_FILE_LEN, TRK_NAME_LEN, TRK_OLD_FILE_LEN, WPT_NAME_LEN,
    decode_name, encode_name,
)
from .shortname import ShortNamer

logger = logging.getLogger(__name__)

# Delta records that fit in a track file next to the signature and header.
TRK_MAX_POINTS = (TRK_FILE_LEN - 4 - TRACK_HEADER.size) // TRACK_POINT.size
TRK_OLD_MAX_POINTS = (TRK_OLD_FILE_LEN - (TRACK_HEADER_OLD.size + 4 + TRK_NAME_LEN)) // TRACK_POINT_OLD.size

HUMMINBIRD_ICONS = (
    "Normal",     # 0
    "House",
    "Red cross",
    "Fish",
    "Duck",
    "Anchor",     # 5
    "Buoy",
    "Airport",
    "Camping",
    "Danger",
    "Fuel",       # 10
    "Rock",
    "Weed",
    "Wreck",
    "Phone",
    "Coffee",     # 15
    "Beer",
    "Mooring",
    "Pier",
    "Slip",
    "Ramp",       # 20
    "Circle",
    "Diamond",
    "Flag",
    "Pattern",
    "Shower",     # 25
    "Water tap",
    "Tree",
    "Book",
)
ICON_UNKNOWN = 255

INT16_MIN, INT16_MAX = -32768, 32767
UINT16_MAX = 0xFFFF
UINT32_MAX = 0xFFFFFFFF


class WaypointStatus(IntEnum):
    UNUSED = 0
    PERMANENT = 1
    TEMPORARY = 2
    MAN_OVERBOARD = 3
    GROUP_HEADER = 16
    GROUP_BODY = 17
    GROUP_INVALID = 63
    OTHER = -1

    @classmethod
    def _missing_(cls, value):
        return cls.OTHER


# Only these end up as waypoints; group records and unused slots are skipped.
KEPT_STATUSES = frozenset({
    WaypointStatus.PERMANENT, WaypointStatus.TEMPORARY, WaypointStatus.MAN_OVERBOARD,
})


def _from_unix(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, timezone.utc)


def _to_unix(dt: Optional[datetime]) -> int:
    if dt is None:
        return 0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return max(0, min(UINT32_MAX, int(dt.timestamp())))


def _depth_cm(pt: GpsPoint) -> int:
    if pt.depth is None:
        return 0
    return max(0, min(UINT16_MAX, round_half_away(pt.depth * 100.0)))


def _magic(magic: Magic) -> bytes:
    return struct.pack(">I", magic)


def icon_index(descr: str) -> int:
    """Icon byte for an icon name.

    Exact (case-insensitive) names win; otherwise the first table entry
    contained in the name is used, i.e. "Diamond" for both "Diamond, Green"
    and "Green Diamond".
    """
    if not descr:
        return ICON_UNKNOWN
    wanted = descr.casefold()
    for i, icon in enumerate(HUMMINBIRD_ICONS):
        if wanted == icon.casefold():
            return i
    for i, icon in enumerate(HUMMINBIRD_ICONS):
        if icon.casefold() in wanted:
            return i
    return ICON_UNKNOWN


def waypoint_identity(pt: GpsPoint) -> str:
    return f"{pt.name}\x01{pt.lat:.9f}\x01{pt.lng:.9f}"


# ─────────────────────────────────────────────────────────────
# Waypoint index
# ─────────────────────────────────────────────────────────────

class WaypointIndex:
    """Waypoint lookups shared by the records of one stream.

    Reading maps the file-local waypoint number to the decoded waypoint.
    Writing maps a waypoint's identity (name and position) to the number it
    was assigned; once frozen, routes may only query it.
    """

    def __init__(self):
        self._by_num: Dict[int, GpsPoint] = {}
        self._by_id: Dict[str, int] = {}
        self.assigned: List[GpsPoint] = []
        self._frozen = False

    @classmethod
    def build(cls, waypoints: Sequence[GpsPoint], routes: Sequence[GpsRoute]) -> WaypointIndex:
        """Number every distinct waypoint, including those only found in routes."""
        index = cls()
        for pt in waypoints:
            index.assign(pt)
        for route in routes:
            for pt in route:
                index.assign(pt)
        index.freeze()
        return index

    def register(self, num: int, pt: GpsPoint):
        self._by_num[num] = pt

    def lookup(self, num: int) -> Optional[GpsPoint]:
        return self._by_num.get(num)

    def assign(self, pt: GpsPoint) -> Optional[int]:
        """Give ``pt`` the next number unless an identical waypoint has one."""
        if self._frozen:
            raise RuntimeError("Waypoint index is frozen")
        key = waypoint_identity(pt)
        if key in self._by_id:
            return None
        num = len(self.assigned)
        self._by_id[key] = num
        self.assigned.append(pt)
        return num

    def number_of(self, pt: GpsPoint) -> Optional[int]:
        return self._by_id.get(waypoint_identity(pt))

    def freeze(self):
        self._frozen = True


# ─────────────────────────────────────────────────────────────
# Waypoints
# ─────────────────────────────────────────────────────────────

def decode_waypoint(rec: Dict) -> Optional[GpsPoint]:
    """Waypoint from an unpacked record, or None for statuses we skip."""
    if WaypointStatus(rec["status"]) not in KEPT_STATUSES:
        return None
    lat, lng = to_lat_lng(rec["east"], rec["north"])
    pt = GpsPoint(lat=lat, lng=lng, name=decode_name(rec["name"]))
    if rec["time"]:
        pt.time = _from_unix(rec["time"])
    if rec["depth"]:
        pt.depth = rec["depth"] / 100.0
    if rec["icon"] < len(HUMMINBIRD_ICONS):
        pt.icon = HUMMINBIRD_ICONS[rec["icon"]]
    return pt


def read_waypoint(reader: ByteReader, index: WaypointIndex) -> Optional[GpsPoint]:
    rec = reader.read_record(WAYPOINT)
    pt = decode_waypoint(rec)
    if pt is not None:
        index.register(rec["num"], pt)
    return pt


def encode_waypoint(pt: GpsPoint, num: int, name: str) -> bytes:
    east, north = from_lat_lng(pt.lat, pt.lng)
    return WAYPOINT.pack({
        "num": num,
        "status": WaypointStatus.PERMANENT,
        "icon": icon_index(pt.icon),
        "depth": _depth_cm(pt),
        "time": _to_unix(pt.time),
        "east": east,
        "north": north,
        "name": encode_name(name, WPT_NAME_LEN),
    })


# ─────────────────────────────────────────────────────────────
# Routes
# ─────────────────────────────────────────────────────────────

def read_route(reader: ByteReader, index: WaypointIndex) -> Optional[GpsRoute]:
    """Route whose points resolve through ``index``; None if none resolve."""
    rec = reader.read_record(ROUTE)
    count = rec["count"]
    if count > MAX_RTE_POINTS:
        raise HumminbirdError(f"Route {rec['num']} claims {count} points, the limit is {MAX_RTE_POINTS}!")

    route = None
    for num in rec["points"][:max(count, 0)]:
        wpt = index.lookup(num)
        if wpt is None:
            logger.warning("Route point %d not found among waypoints, point dropped from route.", num)
            continue
        if route is None:
            route = GpsRoute(decode_name(rec["name"]), number=rec["num"])
        route.append(wpt.copy())
    return route


def encode_route(route: GpsRoute, index: WaypointIndex, num: int, name: str,
                 timestamp: datetime) -> Optional[bytes]:
    """Route record referencing numbered waypoints; None if nothing resolves."""
    points: List[int] = []
    for pt in route:
        wpt_num = index.number_of(pt)
        if wpt_num is None:
            logger.warning("Missing waypoint reference in route, point dropped from route.")
            continue
        if len(points) >= MAX_RTE_POINTS:
            raise HumminbirdError(
                f"Sorry, routes are limited to {MAX_RTE_POINTS} points! "
                "Simplify the route to reduce the number of route points.")
        points.append(wpt_num)

    if not points:
        return None
    return ROUTE.pack({
        "num": num,
        "count": len(points),
        "time": _to_unix(timestamp),
        "name": encode_name(name, RTE_NAME_LEN),
        "points": points,
    })


# ─────────────────────────────────────────────────────────────
# Tracks
# ─────────────────────────────────────────────────────────────

def filter_freak_values(deltas: List[Dict]) -> List[Dict]:
    """Undo the 32767 / -32768 delta pairs some units record.

    Each axis is checked on its own; the pair becomes -1 / 0. Works in place.
    """
    for axis in ("delta_east", "delta_north"):
        for cur, nxt in zip(deltas, deltas[1:]):
            if cur[axis] == INT16_MAX and nxt[axis] == INT16_MIN:
                cur[axis] = -1
                nxt[axis] = 0
    return deltas


def accumulate(start_east: int, start_north: int, deltas: Sequence[Dict]) -> Iterator[Tuple[int, int]]:
    """Absolute coordinates after each delta record."""
    east, north = start_east, start_north
    for d in deltas:
        east += d["delta_east"]
        north += d["delta_north"]
        yield east, north


def _track_point(east: int, north: int, depth_cm: int = 0) -> GpsPoint:
    lat, lng = to_lat_lng(east, north)
    pt = GpsPoint(lat=lat, lng=lng)
    if depth_cm:
        pt.depth = depth_cm / 100.0
    return pt


def _read_deltas(reader: ByteReader, layout, count: int) -> List[Dict]:
    raw = reader.read(count * layout.size, "track points")
    return [layout.unpack(raw[i:i + layout.size]) for i in range(0, len(raw), layout.size)]


def _build_track(header: Dict, name: str, deltas: List[Dict]) -> GpsTrack:
    # The header holds the first point; the delta records follow it.
    track = GpsTrack(name, number=header["trk_num"])
    track.append(_track_point(header["start_east"], header["start_north"]))
    coords = list(accumulate(header["start_east"], header["start_north"], deltas))
    for i, ((east, north), d) in enumerate(zip(coords, deltas)):
        pt = _track_point(east, north, d.get("depth", 0))
        # The header time belongs to the last point, unless the unit had no fix.
        if i == len(deltas) - 1 and header["time"]:
            pt.time = _from_unix(header["time"])
        track.append(pt)
    return track


def read_track(reader: ByteReader) -> GpsTrack:
    """Current-style track record (131080 bytes)."""
    header = reader.read_record(TRACK_HEADER)
    num_points = header["num_points"]
    if num_points == TRK_MAX_POINTS + 1:
        num_points -= 1
    if num_points > TRK_MAX_POINTS:
        raise HumminbirdError(f"Too many track points! ({num_points})")

    deltas = _read_deltas(reader, TRACK_POINT, max(num_points - 1, 0))
    filter_freak_values(deltas)
    return _build_track(header, decode_name(header["name"]), deltas)


def read_track_old(reader: ByteReader) -> GpsTrack:
    """Old-style track record (8048 bytes, name in the last 20 bytes of the file)."""
    header = reader.read_record(TRACK_HEADER_OLD)
    num_points = header["num_points"]
    if num_points > TRK_OLD_MAX_POINTS:
        raise HumminbirdError(f"Too many track points! ({num_points})")

    # No freak-value filtering here; it has not been seen in this format.
    deltas = _read_deltas(reader, TRACK_POINT_OLD, max(num_points - 1, 0))

    reader.seek(TRK_OLD_FILE_LEN - TRK_NAME_LEN)
    name = decode_name(reader.read(TRK_NAME_LEN, "track name"))
    return _build_track(header, name, deltas)


def _to_int16(value: int) -> int:
    wrapped = ((value - INT16_MIN) & UINT16_MAX) + INT16_MIN
    if wrapped != value:
        logger.warning("Track point %d units away from the previous one, delta wrapped.", value)
    return wrapped


def _track_deltas(track: GpsTrack, capacity: int) -> Tuple[Dict, List[Dict]]:
    """Header fields and delta records for ``track``."""
    if len(track) > capacity:
        raise HumminbirdError(f"Too many track points! ({len(track)}, the limit is {capacity})")

    last_time = 0
    deltas: List[Dict] = []
    header: Dict = {"trk_num": track.number, "num_points": len(track)}
    last_east = last_north = 0
    for i, pt in enumerate(track):
        east, north = from_lat_lng(pt.lat, pt.lng)
        if pt.time is not None:
            last_time = _to_unix(pt.time)
        if i == 0:
            # First point goes in the header and seeds the bounding box.
            header.update(start_east=east, start_north=north,
                          sw_east=east, ne_east=east, sw_north=north, ne_north=north)
        else:
            deltas.append({
                "delta_east": _to_int16(east - last_east),
                "delta_north": _to_int16(north - last_north),
                "depth": _depth_cm(pt),
            })
            header["sw_east"] = min(header["sw_east"], east)
            header["ne_east"] = max(header["ne_east"], east)
            header["sw_north"] = min(header["sw_north"], north)
            header["ne_north"] = max(header["ne_north"], north)
        last_east, last_north = east, north

    header.update(end_east=last_east, end_north=last_north, time=last_time)
    return header, deltas


def encode_track(track: GpsTrack, name: str) -> bytes:
    """Current-style track record, signature included."""
    header, deltas = _track_deltas(track, TRK_MAX_POINTS)
    header["name"] = encode_name(name, TRK_NAME_LEN)
    points = b"".join(TRACK_POINT.pack(d) for d in deltas)
    points += bytes(TRACK_POINT.size * (TRK_MAX_POINTS - len(deltas)))
    # Odd but true: the point array doesn't fill the record exactly.
    return _magic(Magic.TRK) + TRACK_HEADER.pack(header) + points + b"\x00\x00"


def encode_track_old(track: GpsTrack, name: str) -> bytes:
    """Old-style track record, signature included; no depth or bounding box."""
    header, deltas = _track_deltas(track, TRK_OLD_MAX_POINTS)
    points = b"".join(TRACK_POINT_OLD.pack(d) for d in deltas)
    points += bytes(TRACK_POINT_OLD.size * (TRK_OLD_MAX_POINTS - len(deltas)))
    return (_magic(Magic.TRK_OLD) + TRACK_HEADER_OLD.pack(header) + points
            + encode_name(name, TRK_NAME_LEN).ljust(TRK_NAME_LEN, b"\x00"))


# ─────────────────────────────────────────────────────────────
# Streams
# ─────────────────────────────────────────────────────────────

class HumminbirdReader:
    """Decodes one Humminbird stream, front to back."""

    def __init__(self, data: bytes):
        self._reader = ByteReader(data)
        self.index = WaypointIndex()
        self.waypoints = GpsWaypointArray()
        self.routes: List[GpsRoute] = []
        self.tracks: List[GpsTrack] = []

    def read(self) -> List[GpsPointArray]:
        reader = self._reader
        while not reader.eof:
            signature = reader.read_u32()
            try:
                magic = Magic(signature)
            except ValueError:
                raise HumminbirdError(
                    f'Invalid record header "0x{signature:08X}" (no or unknown humminbird file)!') from None

            if magic in (Magic.WPT, Magic.WPT2):
                pt = read_waypoint(reader, self.index)
                if pt is not None:
                    self.waypoints.append(pt)
            elif magic == Magic.RTE:
                route = read_route(reader, self.index)
                if route is not None:
                    self.routes.append(route)
            elif magic == Magic.TRK:
                self.tracks.append(read_track(reader))
                break  # The rest of the file is all zeroes
            elif magic == Magic.TRK_OLD:
                self.tracks.append(read_track_old(reader))
                break
            else:
                raise HumminbirdError(f'Unhandled record header "0x{signature:08X}"!')

        logger.debug("Read %d waypoints, %d routes, %d tracks",
                     len(self.waypoints), len(self.routes), len(self.tracks))
        results: List[GpsPointArray] = []
        if self.waypoints:
            results.append(self.waypoints)
        results.extend(self.routes)
        results.extend(self.tracks)
        return results


class HumminbirdWriter:
    """Encodes waypoints and routes (.hwr) or tracks (.ht)."""

    def __init__(self, synthesize_shortnames: bool = False, timestamp: Optional[datetime] = None):
        self.synthesize_shortnames = synthesize_shortnames
        self.timestamp = timestamp or datetime.now(timezone.utc)
        self.wpt_namer = ShortNamer(WPT_NAME_LEN - 1, default_name="WPT")
        self.rte_namer = ShortNamer(RTE_NAME_LEN - 1, default_name="Route")
        self.trk_namer = ShortNamer(TRK_NAME_LEN - 1, default_name="Track")

    def _waypoint_name(self, pt: GpsPoint) -> str:
        if self.synthesize_shortnames:
            return self.wpt_namer.shorten(pt.comment or pt.name)
        return self.wpt_namer.shorten(pt.name)

    def write_waypoints(self, waypoints: Sequence[GpsPoint], routes: Sequence[GpsRoute]) -> bytes:
        # Every waypoint gets its number before any route is encoded.
        index = WaypointIndex.build(waypoints, routes)
        out = bytearray()
        for num, pt in enumerate(index.assigned):
            out += _magic(Magic.WPT) + encode_waypoint(pt, num, self._waypoint_name(pt))

        rte_num = 0
        for route in routes:
            if route.empty:
                continue
            body = encode_route(route, index, rte_num, self.rte_namer.shorten(route.name), self.timestamp)
            if body is not None:
                out += _magic(Magic.RTE) + body
                rte_num += 1
        logger.debug("Wrote %d waypoints, %d routes", len(index.assigned), rte_num)
        return bytes(out)

    def write_tracks(self, tracks: Sequence[GpsTrack], old_format: bool = False) -> bytes:
        out = bytearray()
        for track in tracks:
            if track.empty:
                continue
            name = self.trk_namer.shorten(track.name)
            out += encode_track_old(track, name) if old_format else encode_track(track, name)
        logger.debug("Wrote %d tracks", sum(1 for t in tracks if not t.empty))
        return bytes(out)
