from rest_framework import serializers

from rides.models import PaymentMethod, RideClass
from routing.geo import Location


class LocationSerializer(serializers.Serializer):
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)


def to_location(data, label: str = 'location') -> Location:
    return Location.parse(data['lat'], data['lng'], label)


class QuoteRequestSerializer(serializers.Serializer):
    pickup = LocationSerializer()
    dropoff = LocationSerializer()
    ride_class = serializers.ChoiceField(choices=[c.value for c in RideClass], default=RideClass.STANDARD.value)
    driver_id = serializers.CharField(required=False, allow_null=True, default=None)


class RideRequestSerializer(QuoteRequestSerializer):
    payment_method = serializers.ChoiceField(choices=[m.value for m in PaymentMethod], default=PaymentMethod.CASH.value)
    pickup_address = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    dropoff_address = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)


class LocationUpdateSerializer(LocationSerializer):
    # device timestamp; server time when omitted
    at = serializers.DateTimeField(required=False, allow_null=True, default=None)


class OnlineSerializer(serializers.Serializer):
    online = serializers.BooleanField()


# --- Output ---

class QuoteSerializer(serializers.Serializer):
    distance_km = serializers.FloatField()
    duration_min = serializers.FloatField()
    fare = serializers.FloatField()
    ride_class = serializers.CharField(source='ride_class.value')
    eta_min = serializers.IntegerField()
    route_source = serializers.CharField()


class RideSerializer(serializers.Serializer):
    """
    Read-only view of a domain Ride.
    """
    id = serializers.CharField()
    rider_id = serializers.CharField()
    driver_id = serializers.CharField(allow_null=True)
    requested_driver_id = serializers.CharField(allow_null=True)
    status = serializers.CharField(source='status.value')
    pickup = serializers.SerializerMethodField()
    dropoff = serializers.SerializerMethodField()
    pickup_address = serializers.CharField(allow_null=True)
    dropoff_address = serializers.CharField(allow_null=True)
    distance_km = serializers.FloatField()
    estimated_duration_min = serializers.FloatField()
    fare = serializers.FloatField()
    ride_class = serializers.CharField(source='ride_class.value')
    payment_method = serializers.CharField(source='payment_method.value')
    payment_status = serializers.CharField(source='payment_status.value')
    created_at = serializers.DateTimeField()
    accepted_at = serializers.DateTimeField(allow_null=True)
    started_at = serializers.DateTimeField(allow_null=True)
    completed_at = serializers.DateTimeField(allow_null=True)
    cancelled_at = serializers.DateTimeField(allow_null=True)

    def get_pickup(self, ride):
        return {'lat': ride.pickup.latitude, 'lng': ride.pickup.longitude}

    def get_dropoff(self, ride):
        return {'lat': ride.dropoff.latitude, 'lng': ride.dropoff.longitude}


class CandidateDriverSerializer(serializers.Serializer):
    driver_id = serializers.CharField()
    distance_km = serializers.SerializerMethodField()
    lat = serializers.FloatField(source='driver.last_location.latitude')
    lng = serializers.FloatField(source='driver.last_location.longitude')

    def get_distance_km(self, candidate):
        return round(candidate.distance_km, 2)


class RideOfferSerializer(serializers.Serializer):
    ride = RideSerializer()
    distance_km = serializers.SerializerMethodField()

    def get_distance_km(self, offer):
        return round(offer.distance_km, 2)


class EarningsSerializer(serializers.Serializer):
    total_rides = serializers.IntegerField()
    total_earnings = serializers.FloatField()
    rides_today = serializers.IntegerField()
    earnings_today = serializers.FloatField()
