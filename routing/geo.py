"""
Purpose: Pure geo math for the dispatch engine (no I/O, no state).
What it does:
- Location value type (lat, lng) + range validation
- Great-circle (Haversine) distance in km
- Linear travel-time estimate with a fixed departure buffer
- Time-of-day traffic multiplier table
- Straight-line movement step (used by the simulation to move drivers)

Rule: callers validate coordinates before doing math. NaN in -> NaN out.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from common.exceptions import ValidationError

EARTH_RADIUS_KM = 6371.0

DEFAULT_AVG_SPEED_KMH = 30.0

# Added on top of the drive time to cover the driver leaving / parking.
DEPARTURE_BUFFER_MIN = 5

# Drivers closer than this to their target are snapped onto it.
SNAP_DISTANCE_KM = 0.01


@dataclass(frozen=True)
class Location:
    """
    Immutable WGS84 coordinate.
    """
    latitude: float
    longitude: float

    @classmethod
    def parse(cls, latitude, longitude, label: str = "location") -> Location:
        """
        Build a validated Location from untrusted input (strings, floats, None).
        """
        try:
            location = cls(float(latitude), float(longitude))
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid {label}: latitude and longitude must be numbers")
        location.validate(label)
        return location

    def validate(self, label: str = "location") -> Location:
        lat, lng = self.latitude, self.longitude
        if math.isnan(lat) or math.isnan(lng):
            raise ValidationError(f"Invalid {label}: coordinates must not be NaN")
        if not -90.0 <= lat <= 90.0:
            raise ValidationError(f"Invalid {label}: latitude {lat} outside [-90, 90]")
        if not -180.0 <= lng <= 180.0:
            raise ValidationError(f"Invalid {label}: longitude {lng} outside [-180, 180]")
        return self

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


def haversine_distance_km(a: Location, b: Location) -> float:
    """
    Great-circle distance between two points on a sphere of radius 6371 km.
    """
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    delta_lat = lat2 - lat1
    delta_lng = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(delta_lng / 2) ** 2
    )
    # clamp: floating error can push h a hair above 1 for antipodal points
    # NaN fails the comparison and propagates
    if h > 1.0:
        h = 1.0
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def estimate_travel_minutes(distance_km: float, avg_speed_kmh: float = DEFAULT_AVG_SPEED_KMH) -> int:
    """
    Linear drive-time estimate rounded up, plus the departure buffer.
    Intentionally pessimistic.
    """
    if avg_speed_kmh <= 0:
        raise ValueError("avg_speed_kmh must be > 0")
    minutes = distance_km / avg_speed_kmh * 60
    return math.ceil(minutes + DEPARTURE_BUFFER_MIN)


def time_of_day_multiplier(hour_of_day: int) -> float:
    """
    Traffic multiplier for a local hour in [0, 24).
    """
    if 7 <= hour_of_day <= 9:
        return 1.3  # morning rush
    if 16 <= hour_of_day <= 19:
        return 1.4  # evening rush
    if 12 <= hour_of_day <= 14:
        return 1.2  # lunch
    if hour_of_day >= 22 or hour_of_day <= 5:
        return 0.8  # late night
    return 1.0


def apply_time_of_day_multiplier(base_duration_min: float, hour_of_day: int) -> int:
    return math.ceil(base_duration_min * time_of_day_multiplier(hour_of_day))


def simulate_driver_movement(
    current: Location,
    target: Location,
    interval_seconds: float = 1.0,
    speed_kmh: float = DEFAULT_AVG_SPEED_KMH,
) -> Location:
    """
    Move `current` toward `target` by however far a car at `speed_kmh`
    covers in `interval_seconds`. Straight line, not road geometry.
    """
    distance = haversine_distance_km(current, target)
    if distance < SNAP_DISTANCE_KM:
        return target

    step_km = speed_kmh / 3600 * interval_seconds
    ratio = min(step_km / distance, 1.0)
    return Location(
        latitude=current.latitude + (target.latitude - current.latitude) * ratio,
        longitude=current.longitude + (target.longitude - current.longitude) * ratio,
    )
