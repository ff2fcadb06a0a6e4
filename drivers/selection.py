"""
Purpose: Candidate Selector, the business rules and distance math for
"which drivers are worth offering this ride to".
What it does:
Accepts a pickup point and a pool of presence records, filters out ineligible
drivers, and ranks the remaining ones closest-first.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from routing.geo import Location, haversine_distance_km
from .models import CandidateDriver, DriverPresence


def filter_eligible_drivers(
    presences: Iterable[DriverPresence],
    now: Optional[datetime] = None,
    freshness_seconds: Optional[float] = None,
) -> List[DriverPresence]:
    """
    Returns only drivers who are online, verified and located,
    and (when a window is given) whose location is fresh.
    """
    eligible = []

    for presence in presences:
        if not presence.is_eligible:
            continue

        if now is not None and not presence.is_fresh(now, freshness_seconds):
            continue

        eligible.append(presence)

    return eligible


def find_candidates(
    presences: Iterable[DriverPresence],
    pickup: Location,
    max_radius_km: float,
    now: Optional[datetime] = None,
    freshness_seconds: Optional[float] = None,
) -> List[CandidateDriver]:
    """
    Eligible drivers within `max_radius_km` of `pickup`, closest first.

    An empty list is a normal outcome ("no drivers available"), not an error.
    Equal distances keep the store's iteration order (sort is stable).
    """
    candidates: List[CandidateDriver] = []

    for presence in filter_eligible_drivers(presences, now, freshness_seconds):
        distance_km = haversine_distance_km(pickup, presence.last_location)
        if distance_km > max_radius_km:
            continue
        candidates.append(CandidateDriver(driver=presence, distance_km=distance_km))

    candidates.sort(key=lambda candidate: candidate.distance_km)
    return candidates


def nearest(candidates: List[CandidateDriver]) -> Optional[CandidateDriver]:
    """
    Default auto-selection shown to the rider before they pick a driver.
    """
    return candidates[0] if candidates else None
