from django.db import models

from drivers.models import DriverPresence
from rides.models import PaymentMethod, PaymentStatus, Ride, RideClass, RideStatus
from routing.geo import Location


def _choices(enum_cls):
    return [(member.value, member.value.replace("_", " ").title()) for member in enum_cls]


class DriverPresenceRecord(models.Model):
    """
    One row per driver account: online / verified flags and last known position.
    Rows are created when a driver is provisioned and never deleted, only taken offline.
    """
    driver_id = models.CharField(max_length=64, primary_key=True)
    is_online = models.BooleanField(default=False)
    is_verified = models.BooleanField(default=False)

    # null until the driver's device pushes its first position
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    last_updated_at = models.DateTimeField(null=True, blank=True)

    # registration order, used as the tie-break for equal distances
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['is_online', 'is_verified'], name='presence_eligible_idx'),
        ]

    def __str__(self):
        return f"{self.driver_id} ({'online' if self.is_online else 'offline'})"

    def to_domain(self) -> DriverPresence:
        location = None
        if self.latitude is not None and self.longitude is not None:
            location = Location(self.latitude, self.longitude)
        return DriverPresence(
            driver_id=self.driver_id,
            is_online=self.is_online,
            is_verified=self.is_verified,
            last_location=location,
            last_updated_at=self.last_updated_at,
        )


class RideRecord(models.Model):
    """
    Persisted Ride. Status changes go through RideRecord.objects.filter(pk=..., status=...).update(...)
    (see stores.DjangoRideRepository), never through save().
    """
    id = models.CharField(max_length=36, primary_key=True)

    rider_id = models.CharField(max_length=64, db_index=True)
    # Driver is bound only after they accept the ride
    driver_id = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    requested_driver_id = models.CharField(max_length=64, null=True, blank=True)
    offered_driver_ids = models.JSONField(default=list, blank=True)

    pickup_lat = models.FloatField()
    pickup_lng = models.FloatField()
    dropoff_lat = models.FloatField()
    dropoff_lng = models.FloatField()
    pickup_address = models.TextField(null=True, blank=True)
    dropoff_address = models.TextField(null=True, blank=True)

    distance_km = models.FloatField()
    estimated_duration_min = models.FloatField()
    fare = models.FloatField()
    ride_class = models.CharField(max_length=20, choices=_choices(RideClass), default=RideClass.STANDARD.value)

    payment_method = models.CharField(max_length=20, choices=_choices(PaymentMethod), default=PaymentMethod.CASH.value)
    payment_status = models.CharField(max_length=20, choices=_choices(PaymentStatus), default=PaymentStatus.PENDING.value)

    status = models.CharField(max_length=20, choices=_choices(RideStatus), default=RideStatus.PENDING.value)

    created_at = models.DateTimeField()
    accepted_at = models.DateTimeField(null=True, blank=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.CharField(max_length=64, null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['status', 'created_at'], name='ride_status_created_idx'),
        ]

    def __str__(self):
        return f"Ride {self.id} ({self.status})"

    @classmethod
    def from_domain(cls, ride: Ride) -> "RideRecord":
        return cls(
            id=ride.id,
            rider_id=ride.rider_id,
            driver_id=ride.driver_id,
            requested_driver_id=ride.requested_driver_id,
            offered_driver_ids=list(ride.offered_driver_ids),
            pickup_lat=ride.pickup.latitude,
            pickup_lng=ride.pickup.longitude,
            dropoff_lat=ride.dropoff.latitude,
            dropoff_lng=ride.dropoff.longitude,
            pickup_address=ride.pickup_address,
            dropoff_address=ride.dropoff_address,
            distance_km=ride.distance_km,
            estimated_duration_min=ride.estimated_duration_min,
            fare=ride.fare,
            ride_class=ride.ride_class.value,
            payment_method=ride.payment_method.value,
            payment_status=ride.payment_status.value,
            status=ride.status.value,
            created_at=ride.created_at,
            accepted_at=ride.accepted_at,
            started_at=ride.started_at,
            completed_at=ride.completed_at,
            cancelled_at=ride.cancelled_at,
            cancelled_by=ride.cancelled_by,
        )

    def to_domain(self) -> Ride:
        return Ride(
            id=self.id,
            rider_id=self.rider_id,
            pickup=Location(self.pickup_lat, self.pickup_lng),
            dropoff=Location(self.dropoff_lat, self.dropoff_lng),
            distance_km=self.distance_km,
            estimated_duration_min=self.estimated_duration_min,
            fare=self.fare,
            ride_class=RideClass(self.ride_class),
            payment_method=PaymentMethod(self.payment_method),
            payment_status=PaymentStatus(self.payment_status),
            status=RideStatus(self.status),
            driver_id=self.driver_id,
            requested_driver_id=self.requested_driver_id,
            offered_driver_ids=tuple(self.offered_driver_ids or ()),
            pickup_address=self.pickup_address,
            dropoff_address=self.dropoff_address,
            created_at=self.created_at,
            accepted_at=self.accepted_at,
            started_at=self.started_at,
            completed_at=self.completed_at,
            cancelled_at=self.cancelled_at,
            cancelled_by=self.cancelled_by,
        )
