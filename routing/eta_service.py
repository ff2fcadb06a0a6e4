#Purpose: ETA estimation policy.
#Converts routing outputs into the ETA shown to the rider:
#driver arrival: driver -> pickup (straight-line estimate, see routing.geo)
#total ETA: route duration (optionally traffic adjusted) + driver arrival
#Keeps ETA logic separate from route computation.

from __future__ import annotations

import math
from typing import Optional

from routing.geo import (
    Location,
    apply_time_of_day_multiplier,
    estimate_travel_minutes,
    haversine_distance_km,
)

# Shown when no driver (or no driver location) is known yet.
DEFAULT_DRIVER_ARRIVAL_MIN = 10


def driver_arrival_minutes(
    driver_location: Optional[Location],
    pickup: Location,
    default_minutes: int = DEFAULT_DRIVER_ARRIVAL_MIN,
) -> int:
    if driver_location is None:
        return default_minutes
    return estimate_travel_minutes(haversine_distance_km(driver_location, pickup))


def rider_eta_minutes(route_duration_min: float, arrival_min: float, hour: Optional[int] = None) -> int:
    """
    Total minutes until the rider reaches the dropoff: route time + time for the driver to arrive.
    If `hour` is given the route time is traffic adjusted first.
    """
    duration = route_duration_min
    if hour is not None:
        duration = apply_time_of_day_multiplier(duration, hour)
    return math.ceil(duration + arrival_min)
