import math

import pytest

from compass.utils.geo import (
    EARTH_RADIUS_MILES,
    bounding_box,
    haversine_miles,
    parse_coordinate,
    parse_lat_lng,
)

LOOP = (41.8781, -87.6298)
OHARE = (41.9742, -87.9073)


def test_distance_to_self_is_zero():
    assert haversine_miles(*LOOP, *LOOP) == pytest.approx(0.0, abs=1e-9)


def test_distance_is_symmetric():
    assert haversine_miles(*LOOP, *OHARE) == pytest.approx(haversine_miles(*OHARE, *LOOP))


def test_loop_to_ohare_is_about_fifteen_miles():
    assert haversine_miles(*LOOP, *OHARE) == pytest.approx(15.7, abs=1.0)


@pytest.mark.parametrize("value", [None, True, "abc", "", float("nan"), float("inf"), {}, []])
def test_parse_coordinate_rejects_garbage(value):
    assert parse_coordinate(value, -90, 90) is None


def test_parse_coordinate_range_is_inclusive():
    assert parse_coordinate("90", -90, 90) == 90.0
    assert parse_coordinate(-90.0001, -90, 90) is None


def test_parse_lat_lng():
    assert parse_lat_lng("41.88", "-87.63") == (41.88, -87.63)
    assert parse_lat_lng("91", "-87.63") is None
    assert parse_lat_lng("41.88", "-181") is None


def point_at(lat, lng, miles, bearing_deg):
    """Destination point ``miles`` away from (lat, lng) along ``bearing_deg``."""
    d = miles / EARTH_RADIUS_MILES
    lat1, lng1, b = math.radians(lat), math.radians(lng), math.radians(bearing_deg)
    lat2 = math.asin(math.sin(lat1) * math.cos(d) + math.cos(lat1) * math.sin(d) * math.cos(b))
    lng2 = lng1 + math.atan2(
        math.sin(b) * math.sin(d) * math.cos(lat1), math.cos(d) - math.sin(lat1) * math.sin(lat2)
    )
    return math.degrees(lat2), math.degrees(lng2)


@pytest.mark.parametrize("radius", [0.5, 5, 25, 300])
def test_bounding_box_holds_the_whole_circle(radius):
    box = bounding_box(*LOOP, radius)

    for bearing in range(0, 360, 5):
        lat, lng = point_at(*LOOP, radius, bearing)
        assert box.min_lat <= lat <= box.max_lat
        assert box.min_lng <= lng <= box.max_lng


def test_bounding_box_is_tight_enough_to_exclude_far_points():
    box = bounding_box(*LOOP, 5)
    lat, lng = point_at(*LOOP, 8, 0)
    assert lat > box.max_lat


def test_bounding_box_near_a_pole_drops_longitude():
    box = bounding_box(89.99, 10.0, 50)
    assert box.max_lat == 90.0
    assert box.min_lng is None and box.max_lng is None


def test_bounding_box_across_the_antimeridian_drops_longitude():
    box = bounding_box(0.0, 179.99, 50)
    assert box.min_lng is None
    assert box.min_lat < 0 < box.max_lat
