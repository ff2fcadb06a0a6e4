# Driver earnings roll-up over completed rides.

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from .models import Ride, RideStatus


@dataclass(frozen=True)
class EarningsSummary:
    total_rides: int
    total_earnings: float
    rides_today: int
    earnings_today: float


def earnings_summary(rides: Iterable[Ride], today: date) -> EarningsSummary:
    total_rides = rides_today = 0
    total_earnings = earnings_today = 0.0

    for ride in rides:
        if ride.status != RideStatus.COMPLETED:
            continue
        total_rides += 1
        total_earnings += ride.fare or 0.0
        if ride.completed_at is not None and ride.completed_at.date() == today:
            rides_today += 1
            earnings_today += ride.fare or 0.0

    return EarningsSummary(
        total_rides=total_rides,
        total_earnings=round(total_earnings, 2),
        rides_today=rides_today,
        earnings_today=round(earnings_today, 2),
    )
