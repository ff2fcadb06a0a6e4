import math
from datetime import datetime, timezone

import pytest

from dispatch.dispatcher import Dispatcher
from dispatch.events import InMemoryNotificationService
from drivers.policy import default_dispatch_policy
from drivers.presence import PresenceStore
from pricing.estimator import FareEstimator
from rides.repository import InMemoryRideRepository
from routing.geo import EARTH_RADIUS_KM, Location
from routing.route_service import RouteService

# Haversine distance of a pure latitude offset is exactly R * delta_lat (radians).
KM_PER_DEGREE_LAT = math.pi * EARTH_RADIUS_KM / 180

NOW = datetime(2026, 3, 2, 10, 30, tzinfo=timezone.utc)


def km_north(origin: Location, km: float) -> Location:
    return Location(origin.latitude + km / KM_PER_DEGREE_LAT, origin.longitude)


@pytest.fixture
def pickup():
    # Lower Manhattan
    return Location(40.7128, -74.0060)


@pytest.fixture
def dropoff():
    # Williamsburg
    return Location(40.7306, -73.9352)


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def presence():
    return PresenceStore()


@pytest.fixture
def notifier():
    return InMemoryNotificationService()


@pytest.fixture
def rides():
    return InMemoryRideRepository()


@pytest.fixture
def dispatcher(rides, presence, notifier, clock):
    # no OSRM configured: every route is the Haversine estimate
    return Dispatcher(
        rides=rides,
        presence=presence,
        estimator=FareEstimator(RouteService(client=None)),
        notifier=notifier,
        policy=default_dispatch_policy(),
        clock=clock,
    )


@pytest.fixture
def add_driver(presence):
    """
    Register an online, verified driver `km` north of `origin`.
    """
    def _add(driver_id, origin, km, *, online=True, verified=True, at=NOW):
        presence.register(driver_id, is_verified=verified)
        presence.set_online(driver_id, online)
        presence.update_location(driver_id, km_north(origin, km), at)
        return presence.get(driver_id)

    return _add
