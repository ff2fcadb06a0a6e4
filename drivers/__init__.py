"""
Drivers domain package.

Public API:
- Domain models: DriverPresence, CandidateDriver
- Presence store: PresenceStore
- Candidate selection: find_candidates, nearest
- Policy: DispatchPolicy
"""
from .models import CandidateDriver, DriverPresence
from .policy import DispatchPolicy, default_dispatch_policy, dispatch_policy_from_settings
from .presence import PresenceStore
from .selection import filter_eligible_drivers, find_candidates, nearest

__all__ = [
    "DriverPresence",
    "CandidateDriver",
    "DispatchPolicy",
    "default_dispatch_policy",
    "dispatch_policy_from_settings",
    "PresenceStore",
    "filter_eligible_drivers",
    "find_candidates",
    "nearest",
]
