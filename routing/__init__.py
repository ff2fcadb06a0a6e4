#Marks routing as a package.
#Re-exports the public APIs (Location, haversine math, OSRMClient, RouteService, ETA helpers)
#so other modules import from routing without knowing internal file names.
#No business logic.

from .geo import (
    Location,
    apply_time_of_day_multiplier,
    estimate_travel_minutes,
    haversine_distance_km,
    simulate_driver_movement,
)
from .osrm_client import OSRMClient, RouteResult
from .route_service import RouteService, fallback_route
from .eta_service import driver_arrival_minutes, rider_eta_minutes

__all__ = [
    "Location",
    "haversine_distance_km",
    "estimate_travel_minutes",
    "apply_time_of_day_multiplier",
    "simulate_driver_movement",
    "OSRMClient",
    "RouteResult",
    "RouteService",
    "fallback_route",
    "driver_arrival_minutes",
    "rider_eta_minutes",
]
