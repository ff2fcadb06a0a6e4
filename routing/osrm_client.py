#Purpose: The OSRM "adapter/client".
#Sole responsibility: talk to OSRM via HTTP and return normalized outputs.
#Encapsulates OSRM-specific details:
#coordinate formatting (lon,lat)
#URL construction (/route)
#timeouts / transport errors -> UpstreamUnavailableError
#parsing response JSON into RouteResult (km / minutes / (lat,lng) polyline)
#It should not contain fallback, dispatch or pricing rules.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import requests

from common.exceptions import UpstreamUnavailableError
from common.settings import get_settings
from routing.geo import Location

logger = logging.getLogger(__name__)

# Internal coordinate type: (lat, lng)
LatLng = Tuple[float, float]

SOURCE_OSRM = "osrm"
SOURCE_HAVERSINE = "haversine"


@dataclass(frozen=True)
class RouteResult:
    """
    Normalized route between two points.
    """
    distance_km: float
    duration_min: float
    polyline: List[LatLng] = field(default_factory=list)
    source: str = SOURCE_OSRM


class OSRMError(UpstreamUnavailableError):
    """OSRM answered, but with a non-Ok code or an unusable body."""
    pass


class OSRMClient:
    """
    OSRM Adapter / Client

    Sole responsibility:
    - Talk to OSRM via HTTP
    - Convert internal Location(lat, lng) -> OSRM "lon,lat"
    - Return normalized outputs
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        profile: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.osrm_base_url or "").rstrip("/")
        self.profile = profile or settings.osrm_profile  # driving, walking, cycling
        self.timeout = timeout if timeout is not None else settings.osrm_timeout_seconds
        self.session = session or requests.Session()

        if not self.base_url:
            raise ValueError("OSRM base URL not set. Please set OSRM_BASE_URL in the .env file.")

    #----------------
    # Internal helpers
    #----------------
    @staticmethod
    def format_coordinates(locations: List[Location]) -> str:
        """Convert Locations to OSRM format 'lon,lat;lon,lat;...'"""
        return ";".join(f"{loc.longitude},{loc.latitude}" for loc in locations)

    def _get(self, url: str, params: dict) -> dict:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            raise UpstreamUnavailableError(f"Routing provider unreachable: {exc}") from exc
        except ValueError as exc:
            # body was not JSON
            raise OSRMError(f"Routing provider returned an invalid response: {exc}") from exc

    #----------------
    # Public methods
    #----------------
    def route(self, start: Location, end: Location) -> RouteResult:
        """
        Calls the OSRM /route endpoint and returns the shortest road route.

        Returns:
            RouteResult(distance_km, duration_min, polyline=[(lat, lng), ...])
        """
        coordinates = self.format_coordinates([start, end])
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinates}"

        data = self._get(url, params={"overview": "full", "geometries": "geojson"})

        if not isinstance(data, dict):
            raise OSRMError("OSRM returned an unexpected response body")
        if data.get("code") != "Ok" or not data.get("routes"):
            raise OSRMError(f"OSRM error: {data.get('message', data.get('code', 'Unknown error'))}")

        try:
            route = data["routes"][0]  # OSRM may return alternatives, first is best
            distance_m = float(route["distance"])
            duration_s = float(route["duration"])
            geometry = route.get("geometry") or {}
            polyline = [(float(lat), float(lng)) for lng, lat in geometry.get("coordinates", [])]
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as exc:
            raise OSRMError(f"OSRM returned an unusable route: {exc!r}") from exc

        logger.debug(
            "OSRM route %s -> %s: %.0f m, %.0f s",
            start.as_tuple(), end.as_tuple(), distance_m, duration_s,
        )
        return RouteResult(
            distance_km=distance_m / 1000.0,
            duration_min=duration_s / 60.0,
            polyline=polyline,
            source=SOURCE_OSRM,
        )
