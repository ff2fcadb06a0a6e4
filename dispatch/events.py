"""
Purpose: Signals for the external notification system.
What it does:
The dispatcher never delivers notifications itself. It hands offers, revocations and
ride state events to a NotificationService, which a deployment wires to push/email.

Two implementations ship here:
- LoggingNotificationService: writes every signal to the log (default)
- InMemoryNotificationService: records every signal (tests, simulation)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from rides.models import Ride

logger = logging.getLogger(__name__)


class RideEventType(str, Enum):
    REQUESTED = "ride_requested"
    ACCEPTED = "ride_accepted"
    STARTED = "ride_started"
    COMPLETED = "ride_completed"
    CANCELLED = "ride_cancelled"


@dataclass(frozen=True)
class RideEvent:
    event_type: RideEventType
    ride_id: str
    actor_id: str
    occurred_at: datetime
    payload: Dict[str, Any] = field(default_factory=dict)


class NotificationService:
    """
    Interface the dispatcher talks to. Subclass and override what you deliver.
    """

    def broadcast_offer(self, driver_ids: Sequence[str], ride: Ride) -> None:
        raise NotImplementedError

    def revoke_offer(self, driver_ids: Sequence[str], ride_id: str) -> None:
        raise NotImplementedError

    def publish(self, event: RideEvent) -> None:
        raise NotImplementedError


class LoggingNotificationService(NotificationService):

    def broadcast_offer(self, driver_ids: Sequence[str], ride: Ride) -> None:
        logger.info("Offering ride %s to %d driver(s): %s", ride.id, len(driver_ids), list(driver_ids))

    def revoke_offer(self, driver_ids: Sequence[str], ride_id: str) -> None:
        if driver_ids:
            logger.info("Revoking ride %s from %d driver(s)", ride_id, len(driver_ids))

    def publish(self, event: RideEvent) -> None:
        logger.info("%s ride=%s actor=%s", event.event_type.value, event.ride_id, event.actor_id)


@dataclass
class InMemoryNotificationService(NotificationService):
    offers: List[Tuple[str, Tuple[str, ...]]] = field(default_factory=list)
    revocations: List[Tuple[str, Tuple[str, ...]]] = field(default_factory=list)
    events: List[RideEvent] = field(default_factory=list)

    def broadcast_offer(self, driver_ids: Sequence[str], ride: Ride) -> None:
        self.offers.append((ride.id, tuple(driver_ids)))

    def revoke_offer(self, driver_ids: Sequence[str], ride_id: str) -> None:
        self.revocations.append((ride_id, tuple(driver_ids)))

    def publish(self, event: RideEvent) -> None:
        self.events.append(event)

    def event_types(self, ride_id: Optional[str] = None) -> List[RideEventType]:
        return [e.event_type for e in self.events if ride_id is None or e.ride_id == ride_id]
