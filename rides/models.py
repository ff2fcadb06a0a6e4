"""
Purpose: Domain models for the Rides capability.
What it does:
- Defines the Ride record (one per trip) and its enums:
- RideStatus = pending | accepted | in_progress | completed | cancelled
- RideClass = standard | premium | group
- PaymentMethod = card | qr | cash
- PaymentStatus = pending | paid | failed

Invariant: driver_id is set exactly when status is accepted, in_progress or completed
(a cancelled ride may keep the driver it had when it was cancelled).

Rule: No routing calls, no transition rules. Models only.
See dispatch/state_machines/ride_state.py for the state machine.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

from routing.geo import Location


class RideStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RideClass(str, Enum):
    STANDARD = "standard"
    PREMIUM = "premium"
    GROUP = "group"


class PaymentMethod(str, Enum):
    CARD = "card"
    QR = "qr"
    CASH = "cash"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


@dataclass(frozen=True)
class Ride:
    """
    One trip request and where it is in its lifecycle.
    Never deleted: completed and cancelled rides are kept for history and receipts.
    """
    id: str
    rider_id: str
    pickup: Location
    dropoff: Location

    # quote at creation time
    distance_km: float
    estimated_duration_min: float
    fare: float
    ride_class: RideClass = RideClass.STANDARD

    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_status: PaymentStatus = PaymentStatus.PENDING

    status: RideStatus = RideStatus.PENDING
    driver_id: Optional[str] = None

    # Driver the rider picked in the booking flow. Only that driver may accept.
    requested_driver_id: Optional[str] = None
    # Drivers the request was broadcast to.
    offered_driver_ids: Tuple[str, ...] = ()

    # display only, not authoritative
    pickup_address: Optional[str] = None
    dropoff_address: Optional[str] = None

    created_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None

    @staticmethod  # Factory: fresh id, pending status, creation timestamp
    def new(
        rider_id: str,
        pickup: Location,
        dropoff: Location,
        *,
        distance_km: float,
        estimated_duration_min: float,
        fare: float,
        ride_class: RideClass = RideClass.STANDARD,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        requested_driver_id: Optional[str] = None,
        pickup_address: Optional[str] = None,
        dropoff_address: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> Ride:
        return Ride(
            id=str(uuid.uuid4()),
            rider_id=rider_id,
            pickup=pickup,
            dropoff=dropoff,
            distance_km=distance_km,
            estimated_duration_min=estimated_duration_min,
            fare=fare,
            ride_class=RideClass(ride_class),
            payment_method=PaymentMethod(payment_method),
            requested_driver_id=requested_driver_id,
            pickup_address=pickup_address,
            dropoff_address=dropoff_address,
            created_at=created_at or datetime.now(timezone.utc),
        )

    @property
    def is_active(self) -> bool:
        return self.status in (RideStatus.ACCEPTED, RideStatus.IN_PROGRESS)
