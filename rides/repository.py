"""
Purpose: Ride Record storage with a conditional-write primitive.
What it does:
- Owns the rides table (in memory here; backend/rides_api/stores.py for Django)
- Point reads / inserts keyed by id
- compare_and_set: "UPDATE rides SET ... WHERE id = :id AND status = :expected"
  This is the only write path for transitions, so two actors racing on the same ride
  get exactly one winner.
- History queries for riders and drivers

Rule: Repository owns atomicity, the dispatcher owns the transition rules.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from common.exceptions import NotFoundError
from .models import Ride, RideStatus


@dataclass
class InMemoryRideRepository:
    """
    Thread-safe in-memory rides table.
    """
    _rides: Dict[str, Ride] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    # --- Public API ---

    def add(self, ride: Ride) -> Ride:
        with self._lock:
            if ride.id in self._rides:
                raise ValueError(f"Ride {ride.id} already exists")
            self._rides[ride.id] = ride
        return ride

    def get(self, ride_id: str) -> Ride:
        with self._lock:
            ride = self._rides.get(ride_id)
        if ride is None:
            raise NotFoundError(f"Ride {ride_id} not found")
        return ride

    def compare_and_set(self, ride_id: str, expected_status: RideStatus, **changes) -> Optional[Ride]:
        """
        Apply `changes` only if the ride is still in `expected_status`.

        Returns the updated ride, or None if the precondition no longer holds
        (the caller re-reads to find out what happened).
        """
        with self._lock:
            current = self._rides.get(ride_id)
            if current is None:
                raise NotFoundError(f"Ride {ride_id} not found")
            if current.status != expected_status:
                return None
            updated = replace(current, **changes)
            self._rides[ride_id] = updated
            return updated

    def pending(self) -> List[Ride]:
        """
        Pending rides, oldest first.
        """
        rides = [ride for ride in self._snapshot() if ride.status == RideStatus.PENDING]
        rides.sort(key=lambda ride: ride.created_at)
        return rides

    def for_rider(self, rider_id: str) -> List[Ride]:
        rides = [ride for ride in self._snapshot() if ride.rider_id == rider_id]
        rides.sort(key=lambda ride: ride.created_at, reverse=True)
        return rides

    def for_driver(self, driver_id: str, status: Optional[RideStatus] = None) -> List[Ride]:
        rides = [
            ride for ride in self._snapshot()
            if ride.driver_id == driver_id and (status is None or ride.status == status)
        ]
        rides.sort(key=lambda ride: ride.created_at, reverse=True)
        return rides

    # --- Internal ---

    def _snapshot(self) -> List[Ride]:
        with self._lock:
            return list(self._rides.values())
