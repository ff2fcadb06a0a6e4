import threading
from datetime import timedelta

import pytest

from common.exceptions import NotFoundError
from rides.models import Ride, RideStatus
from rides.repository import InMemoryRideRepository
from routing.geo import Location

from .conftest import NOW

PICKUP = Location(40.7128, -74.0060)
DROPOFF = Location(40.7306, -73.9352)


def make_ride(rider_id="rider-1", minutes=0):
    return Ride.new(
        rider_id, PICKUP, DROPOFF,
        distance_km=6.3, estimated_duration_min=12.6, fare=15.08,
        created_at=NOW + timedelta(minutes=minutes),
    )


def test_add_rejects_duplicate_ids():
    repo = InMemoryRideRepository()
    ride = repo.add(make_ride())

    with pytest.raises(ValueError):
        repo.add(ride)
    with pytest.raises(NotFoundError):
        repo.get("missing")


def test_queries_are_ordered_by_request_time():
    repo = InMemoryRideRepository()
    later = repo.add(make_ride(minutes=5))
    earlier = repo.add(make_ride(minutes=1))

    assert repo.pending() == [earlier, later]
    assert repo.for_rider("rider-1") == [later, earlier]

    repo.compare_and_set(earlier.id, RideStatus.PENDING, status=RideStatus.ACCEPTED, driver_id="d1")
    assert [r.id for r in repo.pending()] == [later.id]
    assert [r.id for r in repo.for_driver("d1", RideStatus.ACCEPTED)] == [earlier.id]
    assert repo.for_driver("d1", RideStatus.COMPLETED) == []


def test_readers_survive_concurrent_inserts():
    """
    Drivers polling for pending rides while riders keep requesting.
    """
    repo = InMemoryRideRepository()
    done = threading.Event()

    def request_rides():
        for i in range(5000):
            repo.add(make_ride(rider_id=f"rider-{i % 7}", minutes=i))
        done.set()

    writer = threading.Thread(target=request_rides)
    writer.start()
    while not done.is_set():
        repo.pending()
        repo.for_rider("rider-3")
        repo.for_driver("nobody")
    writer.join()

    assert len(repo.pending()) == 5000
