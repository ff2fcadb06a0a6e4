"""
Purpose: Core data models for the drivers domain.
What it does:
Defines a driver's presence (online/verified flags + last known position) and the
ephemeral CandidateDriver produced by each matching query, without relying on Django ORM.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from routing.geo import Location


@dataclass(frozen=True)
class DriverPresence:
    """
    A driver's availability at a specific point in time.
    Presence is distinct from the driver's account/profile, which lives elsewhere.
    """
    driver_id: str
    is_online: bool = False
    is_verified: bool = False
    last_location: Optional[Location] = None
    last_updated_at: Optional[datetime] = None

    @property
    def is_located(self) -> bool:
        return self.last_location is not None

    @property
    def is_eligible(self) -> bool:
        """Online, verified and located. A driver without a location is never eligible."""
        return self.is_online and self.is_verified and self.is_located

    def is_fresh(self, now: datetime, window_seconds: Optional[float]) -> bool:
        """
        Whether the last location push is recent enough to trust.
        A falsy window disables the check.
        """
        if not window_seconds:
            return True
        if self.last_updated_at is None:
            return False
        return now - self.last_updated_at <= timedelta(seconds=window_seconds)


@dataclass(frozen=True)
class CandidateDriver:
    """
    An eligible driver plus their straight-line distance to the pickup.
    Computed fresh for every query, never persisted.
    """
    driver: DriverPresence
    distance_km: float

    @property
    def driver_id(self) -> str:
        return self.driver.driver_id
