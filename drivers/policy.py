"""
Purpose: Central configuration for driver matching and dispatch.
What it does:

Stores all tunable thresholds for finding drivers and validating requests:

RIDER_SEARCH_RADIUS_KM = 10     (rider looking for nearby drivers)
DRIVER_SEARCH_RADIUS_KM = 15    (driver looking for nearby pending rides)
PRESENCE_FRESHNESS_SECONDS = 120

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from common.settings import Settings, get_settings


@dataclass(frozen=True)
class DispatchPolicy:
    """
    Central configuration for candidate selection and ride request validation.
    """

    # --- Search radii (policy constants, not structural limits) ---
    rider_search_radius_km: float = 10.0
    driver_search_radius_km: float = 15.0

    # --- Presence staleness ---
    # Location pushes older than this are ignored by candidate queries.
    # None disables the window.
    presence_freshness_seconds: Optional[float] = 120.0

    # --- Trip length limits (straight line, pickup -> dropoff) ---
    min_trip_km: float = 0.1
    max_trip_km: float = 100.0

    # --- Polling cadence for candidate lists ---
    driver_poll_interval_seconds: float = 10.0
    rider_poll_interval_seconds: float = 30.0

    # ETA fallback when no driver position is known
    default_driver_arrival_min: int = 10

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.rider_search_radius_km <= 0 or self.driver_search_radius_km <= 0:
            raise ValueError("search radii must be > 0")

        if self.presence_freshness_seconds is not None and self.presence_freshness_seconds < 0:
            raise ValueError("presence_freshness_seconds must be >= 0")

        if not 0 <= self.min_trip_km < self.max_trip_km:
            raise ValueError("require 0 <= min_trip_km < max_trip_km")

        if self.driver_poll_interval_seconds <= 0 or self.rider_poll_interval_seconds <= 0:
            raise ValueError("poll intervals must be > 0")


def default_dispatch_policy() -> DispatchPolicy:
    """
    Convenience factory for the default policy.
    """
    p = DispatchPolicy()
    p.validate()
    return p


def dispatch_policy_from_settings(settings: Optional[Settings] = None) -> DispatchPolicy:
    settings = settings or get_settings()
    p = DispatchPolicy(
        rider_search_radius_km=settings.rider_search_radius_km,
        driver_search_radius_km=settings.driver_search_radius_km,
        presence_freshness_seconds=settings.presence_freshness_seconds or None,
    )
    p.validate()
    return p
