"""
Purpose: Error taxonomy for the dispatch engine.
What it does:
Every error carries a user-visible message. Callers decide how to surface them:

- ValidationError           -> reject the request, show the message
- ConflictError             -> recoverable, refresh candidates and try another ride/driver
- AuthorizationError        -> the actor does not own this transition
- NotFoundError             -> unknown ride or driver id
- UpstreamUnavailableError  -> routing provider down, absorbed by the Haversine fallback

An empty candidate list is NOT an error and has no exception class.
"""


class DispatchError(Exception):
    """Base class for all dispatch engine errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DispatchError):
    """Malformed coordinates or a trip that is too short / too long."""
    pass


class ConflictError(DispatchError):
    """The ride is no longer in the state the transition expected (e.g. already accepted)."""
    pass


class AuthorizationError(DispatchError):
    """The caller is not allowed to perform this transition on this ride."""
    pass


class NotFoundError(DispatchError):
    """Unknown ride id or driver id."""
    pass


class UpstreamUnavailableError(DispatchError):
    """The external routing provider could not be reached or returned an error."""
    pass
