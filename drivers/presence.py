"""
Purpose: Driver Presence Store, the single source of truth for
"where is each driver right now, and can they take a ride".

What it does:
- Owns one DriverPresence per provisioned driver
- Toggles online / verified flags
- Overwrites the last known location (no history), last-write-wins by timestamp
- Answers "all eligible drivers" (online AND verified AND located)

Rule: only the driver a record describes writes its location. Enforced by the callers
(dispatch / HTTP layer pass the authenticated driver id), not here.

This is the in-memory implementation. backend/rides_api/stores.py provides the same
methods on top of Django models for deployments.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, List, Optional

from common.exceptions import NotFoundError
from routing.geo import Location
from .models import DriverPresence

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PresenceStore:
    """
    In-memory presence table keyed by driver id.

    The lock stands in for the single-row atomicity a real backing store provides.
    Iteration order is registration order, which is what candidate tie-breaks rely on.
    """
    _presences: Dict[str, DriverPresence] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    # --- Provisioning (driver account created elsewhere) ---

    def register(self, driver_id: str, *, is_verified: bool = False) -> DriverPresence:
        """
        Create the presence row for a newly provisioned driver. Idempotent.
        """
        with self._lock:
            existing = self._presences.get(driver_id)
            if existing is not None:
                return existing
            presence = DriverPresence(driver_id=driver_id, is_verified=is_verified)
            self._presences[driver_id] = presence
            return presence

    def set_verified(self, driver_id: str, verified: bool) -> DriverPresence:
        return self._mutate(driver_id, is_verified=verified)

    # --- Public API ---

    def get(self, driver_id: str) -> DriverPresence:
        with self._lock:
            presence = self._presences.get(driver_id)
        if presence is None:
            raise NotFoundError(f"Unknown driver {driver_id}")
        return presence

    def all(self) -> List[DriverPresence]:
        with self._lock:
            return list(self._presences.values())

    def set_online(self, driver_id: str, online: bool) -> DriverPresence:
        """
        Going offline removes the driver from the next candidate query, no grace period.
        """
        presence = self._mutate(driver_id, is_online=online)
        logger.info("Driver %s is now %s", driver_id, "online" if online else "offline")
        return presence

    def update_location(self, driver_id: str, location: Location, at: Optional[datetime] = None) -> bool:
        """
        Overwrite the driver's last known location.

        Returns False (and keeps the newer value) when `at` is older than the stored
        timestamp, e.g. two in-flight pushes arriving out of order.
        """
        location.validate("driver location")
        at = at or utcnow()

        with self._lock:
            current = self._presences.get(driver_id)
            if current is None:
                raise NotFoundError(f"Unknown driver {driver_id}")

            if current.last_updated_at is not None and at < current.last_updated_at:
                logger.debug(
                    "Dropping out-of-order location for driver %s (%s < %s)",
                    driver_id, at.isoformat(), current.last_updated_at.isoformat(),
                )
                return False

            self._presences[driver_id] = replace(current, last_location=location, last_updated_at=at)
            return True

    def eligible(self) -> List[DriverPresence]:
        """
        Equivalent of `WHERE is_online AND is_verified AND location IS NOT NULL`.
        """
        return [presence for presence in self.all() if presence.is_eligible]

    # --- Internal ---

    def _mutate(self, driver_id: str, **changes) -> DriverPresence:
        with self._lock:
            current = self._presences.get(driver_id)
            if current is None:
                raise NotFoundError(f"Unknown driver {driver_id}")
            updated = replace(current, **changes)
            self._presences[driver_id] = updated
            return updated
