"""
Ride lifecycle:

    pending -> accepted -> in_progress -> completed
       |          |
       +----------+--> cancelled

Status only moves forward. Nothing re-enters pending, nothing skips a state,
and completed / cancelled are terminal.
"""

from typing import Dict, FrozenSet

from common.exceptions import ConflictError
from rides.models import Ride, RideStatus


class RideStateException(ConflictError):
    """Raised when an invalid ride transition is attempted."""
    pass


TRANSITIONS: Dict[RideStatus, FrozenSet[RideStatus]] = {
    RideStatus.PENDING: frozenset({RideStatus.ACCEPTED, RideStatus.CANCELLED}),
    RideStatus.ACCEPTED: frozenset({RideStatus.IN_PROGRESS, RideStatus.CANCELLED}),
    RideStatus.IN_PROGRESS: frozenset({RideStatus.COMPLETED}),
    RideStatus.COMPLETED: frozenset(),
    RideStatus.CANCELLED: frozenset(),
}

TERMINAL_STATES = frozenset(status for status, targets in TRANSITIONS.items() if not targets)


def can_transition(current: RideStatus, target: RideStatus) -> bool:
    return target in TRANSITIONS[RideStatus(current)]


def require_transition(ride: Ride, target: RideStatus) -> None:
    """
    Called before every conditional write so illegal moves fail fast
    with a readable message instead of a silent CAS miss.
    """
    if not can_transition(ride.status, target):
        raise RideStateException(
            f"Ride {ride.id} cannot move from {ride.status.value} to {RideStatus(target).value}"
        )
