import math

import pytest

from hwrx.projection import (
    EAST_SCALE,
    from_lat_lng,
    geocentric_to_geodetic,
    geodetic_to_geocentric,
    gudermannian_i1924,
    inverse_gudermannian_i1924,
    round_half_away,
    to_lat_lng,
)


@pytest.mark.parametrize("lat", [-84.9, -60.0, -33.3, -1e-6, 0.0, 12.5, 45.0, 59.3293, 84.9])
def test_geocentric_round_trip(lat):
    assert geocentric_to_geodetic(geodetic_to_geocentric(lat)) == pytest.approx(lat, abs=1e-9)


def test_geocentric_latitude_is_closer_to_equator():
    assert 0 < geodetic_to_geocentric(45.0) < 45.0
    assert geodetic_to_geocentric(0.0) == 0.0


def test_gudermannian_round_trip_within_one_unit():
    for north in range(-20_000_000, 20_000_001, 1_234_567):
        back = round_half_away(inverse_gudermannian_i1924(gudermannian_i1924(north)))
        assert abs(back - north) <= 1, north


def test_gudermannian_is_odd_and_monotonic():
    assert gudermannian_i1924(0) == 0.0
    assert gudermannian_i1924(-1_000_000) == pytest.approx(-gudermannian_i1924(1_000_000))
    assert gudermannian_i1924(1_000_000) < gudermannian_i1924(2_000_000)


def test_east_maps_linearly_to_longitude():
    assert to_lat_lng(0, 0) == (0.0, 0.0)
    assert to_lat_lng(int(EAST_SCALE), 0)[1] == pytest.approx(180.0)
    assert to_lat_lng(-int(EAST_SCALE) // 2, 0)[1] == pytest.approx(-90.0, abs=1e-5)
    assert from_lat_lng(0.0, 180.0) == (int(EAST_SCALE), 0)


def test_lat_lng_round_trip():
    east, north = from_lat_lng(59.3293, 18.0686)
    lat, lng = to_lat_lng(east, north)
    # one native unit is roughly a metre
    assert lat == pytest.approx(59.3293, abs=1e-5)
    assert lng == pytest.approx(18.0686, abs=1e-5)
    assert from_lat_lng(lat, lng) == (east, north)


def test_native_round_trip_is_exact():
    for east, north in [(0, 0), (2_011_000, 8_233_100), (-13_000_001, -4_000_123)]:
        assert from_lat_lng(*to_lat_lng(east, north)) == (east, north)


def test_poles_project_to_finite_north():
    north_pole = from_lat_lng(90.0, 0.0)
    south_pole = from_lat_lng(-90.0, 0.0)
    assert north_pole[1] > 200_000_000
    assert south_pole == (0, -north_pole[1])
    assert inverse_gudermannian_i1924(-90.0) == -inverse_gudermannian_i1924(90.0)
    assert to_lat_lng(*south_pole)[0] == pytest.approx(-90.0, abs=1e-6)


@pytest.mark.parametrize("value, expected", [
    (0.4, 0), (0.5, 1), (2.5, 3), (-0.5, -1), (-2.5, -3), (-2.4, -2), (1234.0, 1234),
])
def test_round_half_away(value, expected):
    assert round_half_away(value) == expected


def test_degrees_helpers_agree_with_formula():
    lat = 37.0
    expected = math.atan(math.tan(lat * math.pi / 180) / 0.9966349016452 ** 2) * 180 / math.pi
    assert geocentric_to_geodetic(lat) == pytest.approx(expected, abs=1e-12)
