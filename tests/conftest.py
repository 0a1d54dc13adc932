import logging
import struct
from datetime import datetime, timezone

import pytest

from hwrx.models import GpsPoint, GpsRoute, GpsTrack, GpsWaypointArray

WPT_MAGIC = 0x02020024
WPT_MAGIC2 = 0x02030024
RTE_MAGIC = 0x03030088
TRK_MAGIC = 0x01030000
TRK_MAGIC2 = 0x01021F70


def _waypoint_record(num, status=1, icon=0, depth=0, time=0, east=0, north=0, name=b"", magic=WPT_MAGIC):
    return struct.pack(">IHHBBHIii12s", magic, num, 0, status, icon, depth, time, east, north, name)


def _route_record(num, points, name=b"Route", time=0, count=None):
    padded = list(points) + [0] * (50 - len(points))
    if count is None:
        count = len(points)
    return struct.pack(">IHHBBBbI20s50H", RTE_MAGIC, num, 0, 0, 0, 0, count, time, name, *padded)


def _track_record(start, deltas, name=b"Trail", time=0, trk_num=1, num_points=None, bbox=(0, 0, 0, 0)):
    """New-style track; deltas are (east, north, depth) triples."""
    if num_points is None:
        num_points = len(deltas) + 1
    header = struct.pack(">IHHHHIiiiiiiii20s", TRK_MAGIC, trk_num, 0, num_points, 0, time,
                         start[0], start[1], 0, 0, *bbox, name)
    body = b"".join(struct.pack(">hhH", *d) for d in deltas)
    return header + body


def _old_track_record(start, deltas, name=b"OldTrail", time=0, trk_num=1, num_points=None):
    """Old-style 8048-byte track; deltas are (east, north) pairs."""
    if num_points is None:
        num_points = len(deltas) + 1
    header = struct.pack(">IHHHHIiiii", TRK_MAGIC2, trk_num, 0, num_points, 0, time,
                         start[0], start[1], 0, 0)
    body = b"".join(struct.pack(">hh", *d) for d in deltas)
    record = (header + body).ljust(8048 - 20, b"\x00")
    return record + name.ljust(20, b"\x00")


@pytest.fixture
def make_waypoint():
    """Builder for raw waypoint records (signature included)."""
    return _waypoint_record


@pytest.fixture
def make_route():
    """Builder for raw route records (signature included)."""
    return _route_record


@pytest.fixture
def make_track():
    """Builder for raw new-style track records (signature included)."""
    return _track_record


@pytest.fixture
def make_old_track():
    """Builder for raw old-style track records (signature included)."""
    return _old_track_record


@pytest.fixture
def fixed_time():
    return datetime(2020, 6, 1, 12, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_waypoints(fixed_time):
    """Three waypoints on a lake."""
    wpts = GpsWaypointArray()
    wpts.append(GpsPoint(lat=59.3293, lng=18.0686, name="Dock", depth=1.5, time=fixed_time, icon="Anchor"))
    wpts.append(GpsPoint(lat=59.3301, lng=18.0702, name="Weedbed", depth=4.25, icon="Weed"))
    wpts.append(GpsPoint(lat=59.3320, lng=18.0750, name="Deep hole", depth=21.0, icon="Green Fish"))
    return wpts


@pytest.fixture
def sample_route(sample_waypoints):
    """Route through the sample waypoints plus one point of its own."""
    route = GpsRoute("Morning run")
    route.append(sample_waypoints[0].copy())
    route.append(GpsPoint(lat=59.3310, lng=18.0720, name="Narrows"))
    route.append(sample_waypoints[2].copy())
    return route


@pytest.fixture
def sample_track(fixed_time):
    """A short track with depths and a timestamp on the last point."""
    track = GpsTrack("Trolling", number=3)
    coords = [(59.3293, 18.0686), (59.3295, 18.0690), (59.3291, 18.0699), (59.3300, 18.0681)]
    for i, (lat, lng) in enumerate(coords):
        track.append(GpsPoint(lat=lat, lng=lng, depth=2.0 + i))
    track[-1].time = fixed_time
    return track


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """The CLI attaches handlers to the package logger; drop them between tests."""
    yield
    logger = logging.getLogger("hwrx")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
