"""
Purpose: Environment configuration and logging setup.
What it does:
Reads tunables from the process environment (and a local .env file, if present)
into a frozen Settings object. Package policies (drivers.policy, pricing.policy)
build themselves from these values so deployments can tune radii and rates
without code changes.

Example .env:
OSRM_BASE_URL=http://router.project-osrm.org
RIDER_SEARCH_RADIUS_KM=10
DRIVER_SEARCH_RADIUS_KM=15
PRESENCE_FRESHNESS_SECONDS=120
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    """
    Process-wide configuration. Values come from the environment, defaults otherwise.
    """
    osrm_base_url: Optional[str] = None
    osrm_profile: str = "driving"
    osrm_timeout_seconds: float = 5.0

    rider_search_radius_km: float = 10.0
    driver_search_radius_km: float = 15.0

    # 0 disables the freshness window entirely
    presence_freshness_seconds: float = 120.0

    per_km_rate: float = 1.5

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        load_dotenv()
        return cls(
            osrm_base_url=os.getenv("OSRM_BASE_URL") or None,
            osrm_profile=os.getenv("OSRM_PROFILE", "driving"),
            osrm_timeout_seconds=_env_float("OSRM_TIMEOUT_SECONDS", 5.0),
            rider_search_radius_km=_env_float("RIDER_SEARCH_RADIUS_KM", 10.0),
            driver_search_radius_km=_env_float("DRIVER_SEARCH_RADIUS_KM", 15.0),
            presence_freshness_seconds=_env_float("PRESENCE_FRESHNESS_SECONDS", 120.0),
            per_km_rate=_env_float("PER_KM_RATE", 1.5),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance, read once per process."""
    return Settings.from_env()


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging once for scripts and the Django process.
    """
    level_name = (level or get_settings().log_level).upper()
    numeric_level = getattr(logging, level_name, None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level_name}")

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
