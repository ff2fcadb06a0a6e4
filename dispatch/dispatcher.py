"""
Purpose: Orchestrator / decision pipeline (the "glue").
What it does:
Takes a rider's request, prices it, creates a pending Ride, offers it to nearby
drivers, arbitrates the accept race with a conditional write, then walks the
ride through start / complete / cancel on behalf of whoever is allowed to.

Concurrency: no locks are held here. Every transition is a compare-and-set on the
ride's current status in the repository, so two drivers hitting "Accept" at the
same time get exactly one winner and one ConflictError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from typing import Callable, List, Optional

from common.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from drivers.models import CandidateDriver, DriverPresence
from drivers.policy import DispatchPolicy, default_dispatch_policy
from drivers.presence import PresenceStore
from drivers.selection import find_candidates, nearest
from pricing.estimator import FareEstimator, Quote
from rides.models import PaymentMethod, PaymentStatus, Ride, RideClass, RideStatus
from rides.reports import EarningsSummary, earnings_summary
from rides.repository import InMemoryRideRepository
from routing.geo import Location, haversine_distance_km
from .events import LoggingNotificationService, NotificationService, RideEvent, RideEventType
from .state_machines.ride_state import require_transition

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RideOffer:
    """
    A pending ride as seen from one driver's position.
    """
    ride: Ride
    distance_km: float


def validate_ride_request(pickup: Location, dropoff: Location, policy: DispatchPolicy) -> float:
    """
    Reject malformed or unreasonable trips before anything is persisted.
    Returns the straight-line trip length in km.
    """
    pickup.validate("pickup location")
    dropoff.validate("dropoff location")

    distance_km = haversine_distance_km(pickup, dropoff)
    if distance_km < policy.min_trip_km:
        raise ValidationError("Pickup and dropoff locations are too close")
    if distance_km > policy.max_trip_km:
        raise ValidationError("Distance is too far for a single ride")
    return distance_km


class Dispatcher:
    """
    Coordinates a Ride from request to completion.

    Collaborators are injected so the same controller runs over the in-memory
    stores (tests, simulation) and the Django-backed ones (backend/rides_api).
    """

    def __init__(
        self,
        rides=None,
        presence=None,
        estimator: Optional[FareEstimator] = None,
        notifier: Optional[NotificationService] = None,
        policy: Optional[DispatchPolicy] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.rides = rides if rides is not None else InMemoryRideRepository()
        self.presence = presence if presence is not None else PresenceStore()
        self.estimator = estimator or FareEstimator()
        self.notifier = notifier or LoggingNotificationService()
        self.policy = policy or default_dispatch_policy()
        self.clock = clock

    # ------------------------------------------------------------------
    # Driver presence (writes are owned by the driver the record describes)
    # ------------------------------------------------------------------

    def set_driver_online(self, driver_id: str, online: bool) -> DriverPresence:
        return self.presence.set_online(driver_id, online)

    def update_driver_location(self, driver_id: str, location: Location, at: Optional[datetime] = None) -> bool:
        return self.presence.update_location(driver_id, location, at or self.clock())

    # ------------------------------------------------------------------
    # Matching + quoting
    # ------------------------------------------------------------------

    def nearby_drivers(self, pickup: Location, radius_km: Optional[float] = None) -> List[CandidateDriver]:
        """
        Rider-facing driver discovery: eligible drivers around the pickup, closest first.
        """
        pickup.validate("pickup location")
        if radius_km is None:
            radius_km = self.policy.rider_search_radius_km
        return find_candidates(
            self.presence.eligible(),
            pickup,
            max_radius_km=radius_km,
            now=self.clock(),
            freshness_seconds=self.policy.presence_freshness_seconds,
        )

    def quote(
        self,
        pickup: Location,
        dropoff: Location,
        ride_class: RideClass = RideClass.STANDARD,
        driver_id: Optional[str] = None,
    ) -> Quote:
        """
        Fare + ETA. The ETA uses the selected driver, or the nearest one when none is selected.
        """
        if driver_id is not None:
            driver = self.presence.get(driver_id)
        else:
            candidate = nearest(self.nearby_drivers(pickup))
            driver = candidate.driver if candidate else None

        return self.estimator.quote(
            pickup,
            dropoff,
            ride_class,
            driver=driver,
            at=self.clock(),
            default_arrival_min=self.policy.default_driver_arrival_min,
        )

    def available_rides(self, driver_id: str, radius_km: Optional[float] = None) -> List[RideOffer]:
        """
        Driver-facing ride discovery: pending rides whose pickup is within range
        of the driver's last location, oldest request first.
        """
        presence = self.presence.get(driver_id)
        if not presence.is_eligible:
            return []

        if radius_km is None:
            radius_km = self.policy.driver_search_radius_km
        offers: List[RideOffer] = []

        for ride in self.rides.pending():
            if ride.requested_driver_id not in (None, driver_id):
                continue
            distance_km = haversine_distance_km(presence.last_location, ride.pickup)
            if distance_km > radius_km:
                continue
            offers.append(RideOffer(ride=ride, distance_km=distance_km))

        return offers

    # ------------------------------------------------------------------
    # Ride lifecycle
    # ------------------------------------------------------------------

    def request_ride(
        self,
        rider_id: str,
        pickup: Location,
        dropoff: Location,
        ride_class: RideClass = RideClass.STANDARD,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        *,
        requested_driver_id: Optional[str] = None,
        pickup_address: Optional[str] = None,
        dropoff_address: Optional[str] = None,
    ) -> Ride:
        """
        Create a pending ride and offer it.

        Without `requested_driver_id` the ride is broadcast to every eligible driver
        within the driver search radius and the first to accept wins. With it, only
        that driver is offered the ride and only that driver may accept.
        """
        validate_ride_request(pickup, dropoff, self.policy)
        try:
            ride_class = RideClass(ride_class)
            payment_method = PaymentMethod(payment_method)
        except ValueError as exc:
            raise ValidationError(str(exc))

        requested_driver = None
        if requested_driver_id is not None:
            try:
                requested_driver = self.presence.get(requested_driver_id)
            except NotFoundError:
                raise ValidationError("Selected driver does not exist")
            if not requested_driver.is_eligible:
                raise ValidationError("Selected driver is not available")

        quote = self.quote(pickup, dropoff, ride_class, driver_id=requested_driver_id)

        ride = Ride.new(
            rider_id,
            pickup,
            dropoff,
            distance_km=quote.distance_km,
            estimated_duration_min=quote.duration_min,
            fare=quote.fare,
            ride_class=ride_class,
            payment_method=payment_method,
            requested_driver_id=requested_driver_id,
            pickup_address=pickup_address,
            dropoff_address=dropoff_address,
            created_at=self.clock(),
        )

        if requested_driver is not None:
            offered = [requested_driver.driver_id]
        else:
            candidates = find_candidates(
                self.presence.eligible(),
                pickup,
                max_radius_km=self.policy.driver_search_radius_km,
                now=self.clock(),
                freshness_seconds=self.policy.presence_freshness_seconds,
            )
            offered = [candidate.driver_id for candidate in candidates]

        ride = self.rides.add(replace(ride, offered_driver_ids=tuple(offered)))

        logger.info(
            "Ride %s requested by %s (%s, %.2f km, fare %.2f), offered to %d driver(s)",
            ride.id, rider_id, ride_class.value, ride.distance_km, ride.fare, len(offered),
        )
        if offered:
            self.notifier.broadcast_offer(offered, ride)
        self._publish(RideEventType.REQUESTED, ride, rider_id, fare=ride.fare)
        return ride

    def accept_ride(self, ride_id: str, driver_id: str) -> Ride:
        """
        Race Condition Resolver: called when a driver hits "Accept".

        The write is conditioned on the ride still being pending. Losing the race
        raises ConflictError; the caller should refresh its list and try another ride.
        """
        ride = self.rides.get(ride_id)
        if ride.status != RideStatus.PENDING:
            raise ConflictError("This ride is no longer available. Please choose another ride.")

        if ride.requested_driver_id is not None and ride.requested_driver_id != driver_id:
            raise AuthorizationError("This ride was requested from a different driver")

        try:
            presence = self.presence.get(driver_id)
        except NotFoundError:
            raise AuthorizationError("Only registered drivers can accept rides")
        if not (presence.is_online and presence.is_verified):
            raise AuthorizationError("Driver must be online and verified to accept rides")

        accepted = self.rides.compare_and_set(
            ride_id,
            RideStatus.PENDING,
            status=RideStatus.ACCEPTED,
            driver_id=driver_id,
            accepted_at=self.clock(),
        )
        if accepted is None:
            logger.info("Driver %s lost the accept race for ride %s", driver_id, ride_id)
            raise ConflictError("This ride is no longer available. Please choose another ride.")

        logger.info("Ride %s accepted by driver %s", ride_id, driver_id)

        # Everyone else who still has the offer on screen drops it.
        others = [other for other in accepted.offered_driver_ids if other != driver_id]
        if others:
            self.notifier.revoke_offer(others, ride_id)
        self._publish(RideEventType.ACCEPTED, accepted, driver_id)
        return accepted

    def start_ride(self, ride_id: str, driver_id: str) -> Ride:
        ride = self.rides.get(ride_id)
        self._require_assigned_driver(ride, driver_id)
        require_transition(ride, RideStatus.IN_PROGRESS)

        started = self.rides.compare_and_set(
            ride_id,
            RideStatus.ACCEPTED,
            status=RideStatus.IN_PROGRESS,
            started_at=self.clock(),
        )
        if started is None:
            raise self._stale_write(ride_id, RideStatus.IN_PROGRESS)

        logger.info("Ride %s started by driver %s", ride_id, driver_id)
        self._publish(RideEventType.STARTED, started, driver_id)
        return started

    def complete_ride(self, ride_id: str, driver_id: str) -> Ride:
        ride = self.rides.get(ride_id)
        self._require_assigned_driver(ride, driver_id)
        require_transition(ride, RideStatus.COMPLETED)

        completed = self.rides.compare_and_set(
            ride_id,
            RideStatus.IN_PROGRESS,
            status=RideStatus.COMPLETED,
            completed_at=self.clock(),
            payment_status=PaymentStatus.PAID,
        )
        if completed is None:
            raise self._stale_write(ride_id, RideStatus.COMPLETED)

        logger.info("Ride %s completed by driver %s (fare %.2f)", ride_id, driver_id, completed.fare)
        self._publish(RideEventType.COMPLETED, completed, driver_id, fare=completed.fare)
        return completed

    def cancel_ride(self, ride_id: str, actor_id: str) -> Ride:
        """
        Rider may cancel while pending or accepted; the assigned driver while accepted.

        A driver cancellation clears driver_id, a rider cancellation keeps it for the record.
        Either way the ride is terminal: nothing can accept it afterwards.
        """
        ride = self.rides.get(ride_id)

        changes = {"status": RideStatus.CANCELLED, "cancelled_at": self.clock(), "cancelled_by": actor_id}
        if actor_id != ride.rider_id:
            if ride.driver_id is None or actor_id != ride.driver_id:
                raise AuthorizationError("Only the rider or the assigned driver can cancel this ride")
            changes["driver_id"] = None

        require_transition(ride, RideStatus.CANCELLED)

        cancelled = self.rides.compare_and_set(ride_id, ride.status, **changes)
        if cancelled is None:
            raise self._stale_write(ride_id, RideStatus.CANCELLED)

        logger.info("Ride %s cancelled by %s (was %s)", ride_id, actor_id, ride.status.value)

        if ride.status == RideStatus.PENDING and ride.offered_driver_ids:
            self.notifier.revoke_offer(list(ride.offered_driver_ids), ride_id)
        self._publish(RideEventType.CANCELLED, cancelled, actor_id, previous_status=ride.status.value)
        return cancelled

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def get_ride(self, ride_id: str) -> Ride:
        return self.rides.get(ride_id)

    def active_ride_for_driver(self, driver_id: str) -> Optional[Ride]:
        for ride in self.rides.for_driver(driver_id):
            if ride.is_active:
                return ride
        return None

    def ride_history(self, rider_id: str) -> List[Ride]:
        return self.rides.for_rider(rider_id)

    def driver_earnings(self, driver_id: str, today: Optional[date] = None) -> EarningsSummary:
        today = today or self.clock().date()
        return earnings_summary(self.rides.for_driver(driver_id, RideStatus.COMPLETED), today)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _require_assigned_driver(ride: Ride, driver_id: str) -> None:
        if ride.driver_id is None:
            raise ConflictError(f"Ride {ride.id} has no assigned driver")
        if ride.driver_id != driver_id:
            raise AuthorizationError("Only the assigned driver can update this ride")

    def _stale_write(self, ride_id: str, target: RideStatus) -> ConflictError:
        """
        The conditional write missed: someone else moved the ride between our read and write.
        """
        current = self.rides.get(ride_id)
        logger.warning(
            "Rejected %s on ride %s: status changed concurrently to %s",
            target.value, ride_id, current.status.value,
        )
        return ConflictError(
            f"Ride {ride_id} changed to {current.status.value} before it could move to {target.value}"
        )

    def _publish(self, event_type: RideEventType, ride: Ride, actor_id: str, **payload) -> None:
        self.notifier.publish(
            RideEvent(
                event_type=event_type,
                ride_id=ride.id,
                actor_id=actor_id,
                occurred_at=self.clock(),
                payload={"status": ride.status.value, **payload},
            )
        )
