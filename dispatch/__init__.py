#Expose the high-level pipeline pieces:
#Ride state machine (legal transitions)
#Notification signals (offers, revocations, ride events)
#Dispatcher orchestrator (the "one object" entry point)
#Polling feeds for candidate lists

from .dispatcher import Dispatcher, RideOffer, validate_ride_request
from .events import (
    InMemoryNotificationService,
    LoggingNotificationService,
    NotificationService,
    RideEvent,
    RideEventType,
)
from .polling import DriverRideFeed, PollingTask, RiderDriverFeed
from .state_machines.ride_state import can_transition, require_transition

__all__ = [
    "Dispatcher",
    "RideOffer",
    "validate_ride_request",
    "NotificationService",
    "LoggingNotificationService",
    "InMemoryNotificationService",
    "RideEvent",
    "RideEventType",
    "PollingTask",
    "DriverRideFeed",
    "RiderDriverFeed",
    "can_transition",
    "require_transition",
]
