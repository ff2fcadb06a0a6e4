"""
Purpose: Central configuration for fares (single source of truth).
What it does:

Stores all tunable pricing constants:

BASE_FARE = 2.5
PER_KM_RATE = 1.5
PER_MINUTE_RATE = 0.25
CLASS_MULTIPLIER = standard 1.0 / premium 1.5 / group 1.8
MIN_FARE = standard 5 / premium 10 / group 15

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from common.settings import Settings, get_settings
from rides.models import RideClass


@dataclass(frozen=True)
class FarePolicy:
    """
    Class-aware fare formula constants:

        fare = max(min_fare[class], (base + km * per_km + min * per_min) * multiplier[class])
    """

    base_fare: float = 2.5
    per_km_rate: float = 1.5
    per_minute_rate: float = 0.25

    class_multipliers: Dict[RideClass, float] = field(default_factory=lambda: {
        RideClass.STANDARD: 1.0,
        RideClass.PREMIUM: 1.5,
        RideClass.GROUP: 1.8,
    })
    min_fares: Dict[RideClass, float] = field(default_factory=lambda: {
        RideClass.STANDARD: 5.0,
        RideClass.PREMIUM: 10.0,
        RideClass.GROUP: 15.0,
    })

    # Scale route duration by the time-of-day table when computing the rider ETA.
    apply_traffic_multiplier: bool = False

    def validate(self) -> None:
        if self.base_fare < 0 or self.per_km_rate < 0 or self.per_minute_rate < 0:
            raise ValueError("fare rates must be >= 0")

        for ride_class in RideClass:
            if ride_class not in self.class_multipliers:
                raise ValueError(f"missing class multiplier for {ride_class.value}")
            if ride_class not in self.min_fares:
                raise ValueError(f"missing minimum fare for {ride_class.value}")


def default_fare_policy() -> FarePolicy:
    p = FarePolicy()
    p.validate()
    return p


def fare_policy_from_settings(settings: Optional[Settings] = None) -> FarePolicy:
    settings = settings or get_settings()
    p = FarePolicy(per_km_rate=settings.per_km_rate)
    p.validate()
    return p
