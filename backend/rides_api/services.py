from functools import lru_cache

from common.settings import get_settings
from dispatch.dispatcher import Dispatcher
from drivers.policy import dispatch_policy_from_settings
from pricing.estimator import FareEstimator
from pricing.policy import fare_policy_from_settings
from routing.route_service import RouteService
from .stores import DjangoPresenceStore, DjangoRideRepository


def build_dispatcher(route_service=None, notifier=None) -> Dispatcher:
    settings = get_settings()
    return Dispatcher(
        rides=DjangoRideRepository(),
        presence=DjangoPresenceStore(),
        estimator=FareEstimator(
            route_service=route_service or RouteService.from_settings(settings),
            policy=fare_policy_from_settings(settings),
        ),
        notifier=notifier,
        policy=dispatch_policy_from_settings(settings),
    )


@lru_cache()
def get_dispatcher() -> Dispatcher:
    # stores are stateless wrappers over the ORM, one instance per process is enough
    return build_dispatcher()
