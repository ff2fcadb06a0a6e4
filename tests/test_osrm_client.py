import pytest
import requests

from common.exceptions import UpstreamUnavailableError
from common.settings import get_settings
from routing.geo import Location, haversine_distance_km
from routing.osrm_client import SOURCE_HAVERSINE, SOURCE_OSRM, OSRMClient, OSRMError
from routing.route_service import RouteService


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, params, timeout))
        if self.error is not None:
            raise self.error
        return self.response


OK_ROUTE = {
    "code": "Ok",
    "routes": [
        {
            "distance": 9500.0,
            "duration": 1080.0,
            "geometry": {"coordinates": [[-74.006, 40.7128], [-73.9352, 40.7306]]},
        }
    ],
}

START = Location(40.7128, -74.006)
END = Location(40.7306, -73.9352)


def make_client(session):
    return OSRMClient(base_url="http://osrm.test/", profile="driving", timeout=2, session=session)


def test_route_builds_lon_lat_url_and_normalizes_units():
    session = FakeSession(FakeResponse(OK_ROUTE))

    result = make_client(session).route(START, END)

    url, params, timeout = session.requests[0]
    assert url == "http://osrm.test/route/v1/driving/-74.006,40.7128;-73.9352,40.7306"
    assert params == {"overview": "full", "geometries": "geojson"}
    assert timeout == 2

    assert result.distance_km == 9.5
    assert result.duration_min == 18.0
    assert result.source == SOURCE_OSRM
    # polyline comes back as (lat, lng)
    assert result.polyline == [(40.7128, -74.006), (40.7306, -73.9352)]


def test_non_ok_code_raises_osrm_error():
    session = FakeSession(FakeResponse({"code": "NoRoute", "message": "Impossible route"}))

    with pytest.raises(OSRMError) as excinfo:
        make_client(session).route(START, END)
    assert "Impossible route" in excinfo.value.message


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(error=requests.ConnectionError("refused")),
        FakeSession(error=requests.Timeout("slow")),
        FakeSession(FakeResponse({}, status_code=503)),
        FakeSession(FakeResponse(ValueError("not json"))),
    ],
)
def test_transport_failures_become_upstream_unavailable(session):
    with pytest.raises(UpstreamUnavailableError):
        make_client(session).route(START, END)


def test_missing_base_url_is_a_configuration_error(monkeypatch):
    monkeypatch.setenv("OSRM_BASE_URL", "")
    get_settings.cache_clear()
    try:
        with pytest.raises(ValueError):
            OSRMClient(session=FakeSession())
    finally:
        get_settings.cache_clear()


@pytest.mark.parametrize(
    "payload",
    [
        {"code": "Ok", "routes": [{"duration": 600.0}]},
        {"code": "Ok", "routes": [{"distance": 9500.0, "duration": 1080.0, "geometry": "abc_encoded"}]},
        {"code": "Ok", "routes": [{"distance": "far", "duration": 1080.0}]},
        {"code": "Ok", "routes": [None]},
        ["not", "an", "object"],
    ],
)
def test_malformed_ok_response_raises_osrm_error(payload):
    session = FakeSession(FakeResponse(payload))

    with pytest.raises(OSRMError):
        make_client(session).route(START, END)


def test_route_service_falls_back_on_malformed_route():
    session = FakeSession(FakeResponse({"code": "Ok", "routes": [{"duration": 600.0}]}))
    service = RouteService(client=make_client(session))

    result = service.route(START, END)

    assert result.source == SOURCE_HAVERSINE
    assert result.distance_km == pytest.approx(haversine_distance_km(START, END))
    assert result.polyline == [START.as_tuple(), END.as_tuple()]
