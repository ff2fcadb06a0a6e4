"""
Pricing package.

Public API:
- FareEstimator, Quote
- FarePolicy, default_fare_policy, fare_policy_from_settings
"""

from .estimator import FareEstimator, Quote
from .policy import FarePolicy, default_fare_policy, fare_policy_from_settings

__all__ = [
    "FareEstimator",
    "Quote",
    "FarePolicy",
    "default_fare_policy",
    "fare_policy_from_settings",
]
