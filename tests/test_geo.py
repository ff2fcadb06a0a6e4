import math

import pytest

from common.exceptions import ValidationError
from routing.geo import (
    Location,
    apply_time_of_day_multiplier,
    estimate_travel_minutes,
    haversine_distance_km,
    simulate_driver_movement,
    time_of_day_multiplier,
)

POINTS = [
    Location(40.7128, -74.0060),   # New York
    Location(34.0522, -118.2437),  # Los Angeles
    Location(-17.824858, 31.053028),  # Harare
    Location(51.5074, -0.1278),    # London
    Location(-33.8688, 151.2093),  # Sydney
    Location(0.0, 179.9999),
    Location(0.0, -179.9999),
    Location(90.0, 0.0),
]


@pytest.mark.parametrize("a", POINTS)
@pytest.mark.parametrize("b", POINTS)
def test_haversine_is_symmetric_and_non_negative(a, b):
    forward = haversine_distance_km(a, b)
    backward = haversine_distance_km(b, a)

    assert forward >= 0
    assert forward == pytest.approx(backward)


@pytest.mark.parametrize("point", POINTS)
def test_haversine_distance_to_self_is_zero(point):
    assert haversine_distance_km(point, point) == 0


def test_haversine_known_distances():
    new_york, los_angeles = POINTS[0], POINTS[1]
    assert haversine_distance_km(new_york, los_angeles) == pytest.approx(3936, abs=5)

    # across the antimeridian is short, not half the planet
    assert haversine_distance_km(POINTS[5], POINTS[6]) < 0.1


def test_haversine_propagates_nan():
    assert math.isnan(haversine_distance_km(Location(float("nan"), 0.0), POINTS[0]))


@pytest.mark.parametrize(
    "distance_km, expected",
    [(0, 5), (0.1, 6), (1, 7), (10, 25), (15, 35)],
)
def test_estimate_travel_minutes_rounds_up_and_adds_buffer(distance_km, expected):
    assert estimate_travel_minutes(distance_km) == expected


def test_estimate_travel_minutes_respects_speed():
    # 60 km/h: 10 km is 10 minutes + 5 buffer
    assert estimate_travel_minutes(10, avg_speed_kmh=60) == 15

    with pytest.raises(ValueError):
        estimate_travel_minutes(10, avg_speed_kmh=0)


@pytest.mark.parametrize(
    "hour, multiplier",
    [
        (0, 0.8), (5, 0.8), (6, 1.0),
        (7, 1.3), (8, 1.3), (9, 1.3), (10, 1.0), (11, 1.0),
        (12, 1.2), (14, 1.2), (15, 1.0),
        (16, 1.4), (19, 1.4), (20, 1.0), (21, 1.0),
        (22, 0.8), (23, 0.8),
    ],
)
def test_time_of_day_multiplier_table(hour, multiplier):
    assert time_of_day_multiplier(hour) == multiplier


@pytest.mark.parametrize("hour, expected", [(8, 15), (17, 16), (13, 14), (23, 9), (10, 11)])
def test_apply_time_of_day_multiplier_rounds_up(hour, expected):
    assert apply_time_of_day_multiplier(11, hour) == expected


@pytest.mark.parametrize(
    "lat, lng",
    [(91, 0), (-90.5, 0), (0, 180.01), (0, -181), ("abc", 0), (None, 0), (float("nan"), 0)],
)
def test_location_parse_rejects_malformed_coordinates(lat, lng):
    with pytest.raises(ValidationError):
        Location.parse(lat, lng, "pickup location")


def test_location_parse_accepts_strings_and_bounds():
    assert Location.parse("40.7128", "-74.0060") == Location(40.7128, -74.006)
    assert Location.parse(-90, 180) == Location(-90.0, 180.0)


def test_simulate_driver_movement_moves_closer_at_city_speed():
    start = Location(40.7128, -74.0060)
    target = Location(40.7306, -73.9352)

    moved = simulate_driver_movement(start, target, interval_seconds=60)

    before = haversine_distance_km(start, target)
    after = haversine_distance_km(moved, target)
    # 30 km/h for one minute is 0.5 km
    assert before - after == pytest.approx(0.5, abs=0.05)


def test_simulate_driver_movement_snaps_when_close():
    target = Location(40.7306, -73.9352)
    nearly_there = Location(40.73065, -73.9352)  # ~5 m away

    assert simulate_driver_movement(nearly_there, target) == target
