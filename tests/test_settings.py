import pytest

from common.settings import Settings, configure_logging
from drivers.policy import DispatchPolicy, dispatch_policy_from_settings
from pricing.policy import fare_policy_from_settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "OSRM_BASE_URL", "OSRM_PROFILE", "OSRM_TIMEOUT_SECONDS", "RIDER_SEARCH_RADIUS_KM",
        "DRIVER_SEARCH_RADIUS_KM", "PRESENCE_FRESHNESS_SECONDS", "PER_KM_RATE", "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings.from_env()

    assert settings.osrm_base_url is None
    assert settings.osrm_profile == "driving"
    assert settings.rider_search_radius_km == 10
    assert settings.driver_search_radius_km == 15
    assert settings.presence_freshness_seconds == 120
    assert settings.per_km_rate == 1.5


def test_env_overrides_flow_into_policies(clean_env):
    clean_env.setenv("RIDER_SEARCH_RADIUS_KM", "5")
    clean_env.setenv("PRESENCE_FRESHNESS_SECONDS", "0")
    clean_env.setenv("PER_KM_RATE", "2")
    settings = Settings.from_env()

    dispatch_policy = dispatch_policy_from_settings(settings)
    assert dispatch_policy.rider_search_radius_km == 5
    assert dispatch_policy.presence_freshness_seconds is None
    assert fare_policy_from_settings(settings).per_km_rate == 2


def test_non_numeric_value_is_rejected(clean_env):
    clean_env.setenv("PER_KM_RATE", "cheap")
    with pytest.raises(ValueError):
        Settings.from_env()


def test_dispatch_policy_validation():
    with pytest.raises(ValueError):
        DispatchPolicy(rider_search_radius_km=0).validate()
    with pytest.raises(ValueError):
        DispatchPolicy(min_trip_km=10, max_trip_km=5).validate()


def test_configure_logging_rejects_unknown_level():
    with pytest.raises(ValueError):
        configure_logging("CHATTY")
    # lower case names are accepted
    configure_logging("debug")
