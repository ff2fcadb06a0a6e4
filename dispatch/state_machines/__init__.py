from .ride_state import (
    RideStateException,
    TERMINAL_STATES,
    TRANSITIONS,
    can_transition,
    require_transition,
)

__all__ = [
    "RideStateException",
    "TERMINAL_STATES",
    "TRANSITIONS",
    "can_transition",
    "require_transition",
]
