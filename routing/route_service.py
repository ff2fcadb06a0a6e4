#Purpose: Route computation for downstream use.
#Returns the "best route" information needed by pricing and ETAs.
#Uses the OSRM /route adapter when one is configured and reachable,
#otherwise degrades to a straight-line (Haversine) estimate so quoting never fails
#because the routing provider is down.

from __future__ import annotations

import logging
from typing import Optional

from common.exceptions import UpstreamUnavailableError
from routing.geo import Location, haversine_distance_km
from routing.osrm_client import SOURCE_HAVERSINE, OSRMClient, RouteResult

logger = logging.getLogger(__name__)

# Rough city driving: 2 minutes per straight-line km.
FALLBACK_MINUTES_PER_KM = 2.0


def fallback_route(start: Location, end: Location) -> RouteResult:
    distance_km = haversine_distance_km(start, end)
    return RouteResult(
        distance_km=distance_km,
        duration_min=distance_km * FALLBACK_MINUTES_PER_KM,
        polyline=[start.as_tuple(), end.as_tuple()],
        source=SOURCE_HAVERSINE,
    )


class RouteService:
    """
    Road route with graceful degradation.
    """

    def __init__(self, client: Optional[OSRMClient] = None):
        self.client = client

    @classmethod
    def from_settings(cls, settings) -> RouteService:
        if not settings.osrm_base_url:
            logger.info("OSRM_BASE_URL not set, routes will use the Haversine estimate")
            return cls(client=None)
        return cls(
            client=OSRMClient(
                base_url=settings.osrm_base_url,
                profile=settings.osrm_profile,
                timeout=settings.osrm_timeout_seconds,
            )
        )

    def route(self, start: Location, end: Location) -> RouteResult:
        if self.client is None:
            return fallback_route(start, end)

        try:
            return self.client.route(start, end)
        except UpstreamUnavailableError as exc:
            # degraded accuracy is logged, never shown to the rider
            logger.warning("Routing provider unavailable, using Haversine estimate: %s", exc.message)
            return fallback_route(start, end)
