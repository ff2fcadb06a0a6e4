"""
Purpose: Route/Fare Estimator.
What it does:
Combines a road route (distance + duration, from routing.RouteService) with the
ride class to produce a fare quote, and adds the matched driver's time-to-pickup
to produce the ETA shown to the rider.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from drivers.models import DriverPresence
from rides.models import RideClass
from routing.eta_service import DEFAULT_DRIVER_ARRIVAL_MIN, driver_arrival_minutes, rider_eta_minutes
from routing.geo import Location
from routing.route_service import RouteService
from .policy import FarePolicy, default_fare_policy


@dataclass(frozen=True)
class Quote:
    distance_km: float
    duration_min: float
    fare: float
    ride_class: RideClass
    eta_min: int
    route_source: str
    polyline: List[Tuple[float, float]] = field(default_factory=list)


class FareEstimator:

    def __init__(self, route_service: Optional[RouteService] = None, policy: Optional[FarePolicy] = None):
        self.route_service = route_service or RouteService()
        self.policy = policy or default_fare_policy()

    def calculate_fare(self, distance_km: float, duration_min: float, ride_class: RideClass) -> float:
        p = self.policy
        ride_class = RideClass(ride_class)

        fare = p.base_fare + distance_km * p.per_km_rate + duration_min * p.per_minute_rate
        fare *= p.class_multipliers[ride_class]
        fare = max(fare, p.min_fares[ride_class])
        return round(fare, 2)

    def quote(
        self,
        pickup: Location,
        dropoff: Location,
        ride_class: RideClass = RideClass.STANDARD,
        driver: Optional[DriverPresence] = None,
        at: Optional[datetime] = None,
        default_arrival_min: Optional[int] = None,
    ) -> Quote:
        """
        Price a trip and estimate when the rider gets there.

        `driver` is the selected (or nearest) driver; without one the ETA uses the
        default arrival time.
        """
        pickup.validate("pickup location")
        dropoff.validate("dropoff location")
        ride_class = RideClass(ride_class)

        route = self.route_service.route(pickup, dropoff)
        fare = self.calculate_fare(route.distance_km, route.duration_min, ride_class)

        if default_arrival_min is None:
            default_arrival_min = DEFAULT_DRIVER_ARRIVAL_MIN
        driver_location = driver.last_location if driver is not None else None
        arrival = driver_arrival_minutes(driver_location, pickup, default_arrival_min)

        hour = at.hour if (at is not None and self.policy.apply_traffic_multiplier) else None

        return Quote(
            distance_km=round(route.distance_km, 2),
            duration_min=round(route.duration_min, 2),
            fare=fare,
            ride_class=ride_class,
            eta_min=rider_eta_minutes(route.duration_min, arrival, hour=hour),
            route_source=route.source,
            polyline=list(route.polyline),
        )
