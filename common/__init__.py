#Shared plumbing used by every other package:
#error taxonomy (exceptions.py)
#environment configuration + logging setup (settings.py)
#No business logic.

from .exceptions import (
    AuthorizationError,
    ConflictError,
    DispatchError,
    NotFoundError,
    UpstreamUnavailableError,
    ValidationError,
)
from .settings import Settings, configure_logging, get_settings

__all__ = [
    "DispatchError",
    "ValidationError",
    "ConflictError",
    "AuthorizationError",
    "NotFoundError",
    "UpstreamUnavailableError",
    "Settings",
    "get_settings",
    "configure_logging",
]
