"""
Django-backed implementations of the presence store and ride repository.

Same method names as drivers.presence.PresenceStore and rides.repository.InMemoryRideRepository,
so the Dispatcher runs unchanged on top of either. Atomicity comes from single-row
conditional UPDATEs, no application-level locks.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import List, Optional

from django.db.models import Q
from django.utils import timezone

from common.exceptions import NotFoundError
from drivers.models import DriverPresence
from rides.models import Ride, RideStatus
from routing.geo import Location
from .models import DriverPresenceRecord, RideRecord

logger = logging.getLogger(__name__)


class DjangoPresenceStore:

    def register(self, driver_id: str, *, is_verified: bool = False) -> DriverPresence:
        record, _ = DriverPresenceRecord.objects.get_or_create(
            driver_id=driver_id, defaults={'is_verified': is_verified}
        )
        return record.to_domain()

    def get(self, driver_id: str) -> DriverPresence:
        try:
            return DriverPresenceRecord.objects.get(pk=driver_id).to_domain()
        except DriverPresenceRecord.DoesNotExist:
            raise NotFoundError(f"Unknown driver {driver_id}")

    def all(self) -> List[DriverPresence]:
        return [record.to_domain() for record in DriverPresenceRecord.objects.order_by('created_at')]

    def set_verified(self, driver_id: str, verified: bool) -> DriverPresence:
        return self._update(driver_id, is_verified=verified)

    def set_online(self, driver_id: str, online: bool) -> DriverPresence:
        presence = self._update(driver_id, is_online=online)
        logger.info("Driver %s is now %s", driver_id, "online" if online else "offline")
        return presence

    def update_location(self, driver_id: str, location: Location, at: Optional[datetime] = None) -> bool:
        """
        Last-write-wins: the UPDATE only matches when the stored timestamp is not newer than `at`.
        """
        location.validate("driver location")
        at = at or timezone.now()

        updated = (
            DriverPresenceRecord.objects
            .filter(pk=driver_id)
            .filter(Q(last_updated_at__isnull=True) | Q(last_updated_at__lte=at))
            .update(latitude=location.latitude, longitude=location.longitude, last_updated_at=at)
        )
        if updated:
            return True

        if not DriverPresenceRecord.objects.filter(pk=driver_id).exists():
            raise NotFoundError(f"Unknown driver {driver_id}")
        logger.debug("Dropping out-of-order location for driver %s at %s", driver_id, at.isoformat())
        return False

    def eligible(self) -> List[DriverPresence]:
        records = DriverPresenceRecord.objects.filter(
            is_online=True,
            is_verified=True,
            latitude__isnull=False,
            longitude__isnull=False,
        ).order_by('created_at')
        return [record.to_domain() for record in records]

    def _update(self, driver_id: str, **fields) -> DriverPresence:
        if not DriverPresenceRecord.objects.filter(pk=driver_id).update(**fields):
            raise NotFoundError(f"Unknown driver {driver_id}")
        return self.get(driver_id)


def _column_value(value):
    return value.value if isinstance(value, Enum) else value


class DjangoRideRepository:

    def add(self, ride: Ride) -> Ride:
        RideRecord.from_domain(ride).save(force_insert=True)
        return ride

    def get(self, ride_id: str) -> Ride:
        try:
            return RideRecord.objects.get(pk=ride_id).to_domain()
        except RideRecord.DoesNotExist:
            raise NotFoundError(f"Ride {ride_id} not found")

    def compare_and_set(self, ride_id: str, expected_status: RideStatus, **changes) -> Optional[Ride]:
        """
        UPDATE rides SET ... WHERE id = :ride_id AND status = :expected_status
        """
        columns = {name: _column_value(value) for name, value in changes.items()}
        updated = RideRecord.objects.filter(
            pk=ride_id, status=RideStatus(expected_status).value
        ).update(**columns)

        if updated:
            return self.get(ride_id)
        if not RideRecord.objects.filter(pk=ride_id).exists():
            raise NotFoundError(f"Ride {ride_id} not found")
        return None

    def pending(self) -> List[Ride]:
        records = RideRecord.objects.filter(status=RideStatus.PENDING.value).order_by('created_at')
        return [record.to_domain() for record in records]

    def for_rider(self, rider_id: str) -> List[Ride]:
        records = RideRecord.objects.filter(rider_id=rider_id).order_by('-created_at')
        return [record.to_domain() for record in records]

    def for_driver(self, driver_id: str, status: Optional[RideStatus] = None) -> List[Ride]:
        records = RideRecord.objects.filter(driver_id=driver_id)
        if status is not None:
            records = records.filter(status=RideStatus(status).value)
        return [record.to_domain() for record in records.order_by('-created_at')]
