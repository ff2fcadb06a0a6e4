"""
Rides domain package.

Public API:
- Domain models: Ride, RideStatus, RideClass, PaymentMethod, PaymentStatus
- Storage: InMemoryRideRepository
- Reports: earnings_summary
"""
from .models import PaymentMethod, PaymentStatus, Ride, RideClass, RideStatus
from .repository import InMemoryRideRepository
from .reports import EarningsSummary, earnings_summary

__all__ = ["Ride",
           "RideStatus",
             "RideClass",
               "PaymentMethod",
               "PaymentStatus",
               "InMemoryRideRepository",
               "EarningsSummary",
               "earnings_summary",
               ]
