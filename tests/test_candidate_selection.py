import random
from datetime import timedelta

import pytest

from drivers.models import DriverPresence
from drivers.selection import filter_eligible_drivers, find_candidates, nearest

from .conftest import NOW, km_north


def presence_at(driver_id, location, *, online=True, verified=True, at=NOW):
    return DriverPresence(
        driver_id=driver_id,
        is_online=online,
        is_verified=verified,
        last_location=location,
        last_updated_at=at if location is not None else None,
    )


def test_candidates_within_radius_sorted_closest_first(pickup):
    """
    Drivers at 2, 8 and 20 km with a 10 km radius: the 20 km driver is out,
    the 2 km driver is the default pick.
    """
    drivers = [
        presence_at("far", km_north(pickup, 20)),
        presence_at("mid", km_north(pickup, 8)),
        presence_at("near", km_north(pickup, 2)),
    ]

    candidates = find_candidates(drivers, pickup, max_radius_km=10)

    assert [c.driver_id for c in candidates] == ["near", "mid"]
    assert candidates[0].distance_km == pytest.approx(2)
    assert candidates[1].distance_km == pytest.approx(8)
    assert nearest(candidates).driver_id == "near"


def test_candidates_only_contain_eligible_drivers_in_order(pickup):
    rng = random.Random(42)
    drivers = []
    for i in range(300):
        location = km_north(pickup, rng.uniform(0, 25)) if rng.random() > 0.1 else None
        drivers.append(
            presence_at(
                f"d{i}",
                location,
                online=rng.random() > 0.3,
                verified=rng.random() > 0.2,
            )
        )

    candidates = find_candidates(drivers, pickup, max_radius_km=15)

    assert candidates
    for c in candidates:
        assert c.driver.is_online and c.driver.is_verified
        assert c.driver.last_location is not None
        assert c.distance_km <= 15

    distances = [c.distance_km for c in candidates]
    assert distances == sorted(distances)


def test_online_driver_without_location_never_appears(pickup):
    drivers = [presence_at("no-gps", None)]
    assert find_candidates(drivers, pickup, max_radius_km=1e6) == []


def test_offline_and_unverified_drivers_are_filtered(pickup):
    drivers = [
        presence_at("offline", km_north(pickup, 1), online=False),
        presence_at("unverified", km_north(pickup, 1), verified=False),
        presence_at("ok", km_north(pickup, 1)),
    ]
    assert [p.driver_id for p in filter_eligible_drivers(drivers)] == ["ok"]


def test_equal_distance_keeps_store_order(pickup):
    location = km_north(pickup, 3)
    drivers = [presence_at(name, location) for name in ("b", "a", "c")]

    assert [c.driver_id for c in find_candidates(drivers, pickup, 10)] == ["b", "a", "c"]


def test_no_candidates_is_an_empty_list(pickup):
    assert find_candidates([], pickup, 10) == []
    assert nearest([]) is None


def test_stale_locations_excluded_only_when_window_set(pickup):
    drivers = [
        presence_at("stale", km_north(pickup, 1), at=NOW - timedelta(minutes=10)),
        presence_at("fresh", km_north(pickup, 2), at=NOW - timedelta(seconds=30)),
    ]

    windowed = find_candidates(drivers, pickup, 10, now=NOW, freshness_seconds=120)
    unbounded = find_candidates(drivers, pickup, 10, now=NOW, freshness_seconds=None)

    assert [c.driver_id for c in windowed] == ["fresh"]
    assert [c.driver_id for c in unbounded] == ["stale", "fresh"]

