import pytest

from pubcompass.geo import (
    adjust_offset,
    arrow_rotation,
    bearing,
    bearing_to_compass,
    format_distance,
    haversine_distance,
    normalize_offset,
    relative_direction,
)


@pytest.mark.parametrize("to_lat,to_lon,expected", [
    (1, 0, 0),
    (0, 1, 90),
    (-1, 0, 180),
    (0, -1, 270),
])
def test_bearing_cardinal_directions(to_lat, to_lon, expected):
    assert bearing(0, 0, to_lat, to_lon) == pytest.approx(expected, abs=0.5)


@pytest.mark.parametrize("coords", [
    (51.5, -0.1, 51.6, -0.2),
    (51.5, -0.1, 51.4, 0.0),
    (-33.9, 151.2, 35.7, 139.7),
    (0, 0, -1e-12, 0),
])
def test_bearing_always_in_range(coords):
    result = bearing(*coords)
    assert 0 <= result < 360


def test_bearing_london_to_paris_is_southeast():
    result = bearing(51.5, -0.1, 48.9, 2.3)
    assert 100 < result < 180


def test_haversine_known_distance():
    # One degree of latitude is about 111.2 km
    assert haversine_distance(0, 0, 1, 0) == pytest.approx(111195, rel=1e-3)


def test_haversine_symmetric_and_non_negative():
    there = haversine_distance(51.5, -0.1, 51.501, -0.101)
    back = haversine_distance(51.501, -0.101, 51.5, -0.1)
    assert there == pytest.approx(back)
    assert there > 0
    assert haversine_distance(10, 10, 10, 10) == 0


@pytest.mark.parametrize("meters,expected", [
    (1, "1m"),
    (500, "500m"),
    (999, "999m"),
    (500.4, "500m"),
    (500.6, "501m"),
    (500.5, "501m"),
    (1000, "1.0km"),
    (1500, "1.5km"),
    (2750, "2.8km"),
    (5000, "5.0km"),
])
def test_format_distance(meters, expected):
    assert format_distance(meters) == expected


def test_bearing_to_compass():
    assert bearing_to_compass(0) == "north"
    assert bearing_to_compass(44) == "northeast"
    assert bearing_to_compass(181) == "south"
    assert bearing_to_compass(359) == "north"


def test_relative_direction():
    assert relative_direction(0, 10) == "straight ahead"
    assert relative_direction(350, 80) == "right"
    assert relative_direction(90, 270) == "behind you"
    assert relative_direction(90, 0) == "left"


def test_arrow_rotation_wraps():
    assert arrow_rotation(90, 0, offset=0) == pytest.approx(90)
    assert arrow_rotation(10, 350, offset=0) == pytest.approx(20)
    assert arrow_rotation(0, 0) == pytest.approx(180)
    assert 0 <= arrow_rotation(0, 180, offset=180) < 360


def test_offset_stays_within_half_circle():
    assert normalize_offset(190) == -170
    assert normalize_offset(-185) == 175
    assert normalize_offset(180) == 180
    assert adjust_offset(175, 15) == -170
    assert adjust_offset(-170, -15) == 175
