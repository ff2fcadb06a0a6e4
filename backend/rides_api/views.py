from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from common.exceptions import AuthorizationError, ValidationError
from . import services
from .serializers import (
    CandidateDriverSerializer,
    EarningsSerializer,
    LocationSerializer,
    LocationUpdateSerializer,
    OnlineSerializer,
    QuoteRequestSerializer,
    QuoteSerializer,
    RideOfferSerializer,
    RideRequestSerializer,
    RideSerializer,
    to_location,
)


def caller_id(request) -> str:
    # identity is issued by the platform's auth provider, we only key on it
    return str(request.user.pk)


class QuoteView(APIView):
    """
    Fare and ETA for a pickup/dropoff pair, before anything is booked.
    """

    def post(self, request):
        serializer = QuoteRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        quote = services.get_dispatcher().quote(
            to_location(data['pickup'], 'pickup location'),
            to_location(data['dropoff'], 'dropoff location'),
            data['ride_class'],
            driver_id=data['driver_id'],
        )
        return Response(QuoteSerializer(quote).data)


class DriverViewSet(viewsets.ViewSet):
    """
    Driver discovery for riders, plus the presence endpoints a driver's device calls.
    Presence writes always target the caller's own record.
    """

    @action(detail=False, methods=['get'])
    def nearby(self, request):
        serializer = LocationSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        radius_km = self._radius(request)

        pickup = to_location(serializer.validated_data, 'pickup location')
        candidates = services.get_dispatcher().nearby_drivers(pickup, radius_km)
        return Response({
            'count': len(candidates),
            'drivers': CandidateDriverSerializer(candidates, many=True).data,
        })

    @action(detail=False, methods=['post'], url_path='me/online')
    def online(self, request):
        serializer = OnlineSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        presence = services.get_dispatcher().set_driver_online(caller_id(request), serializer.validated_data['online'])
        return Response({'driver_id': presence.driver_id, 'is_online': presence.is_online})

    @action(detail=False, methods=['post'], url_path='me/location')
    def location(self, request):
        serializer = LocationUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        location = to_location(data, 'driver location')
        applied = services.get_dispatcher().update_driver_location(caller_id(request), location, data['at'])
        return Response({'applied': applied})

    @action(detail=False, methods=['get'], url_path='me/earnings')
    def earnings(self, request):
        summary = services.get_dispatcher().driver_earnings(caller_id(request))
        return Response(EarningsSerializer(summary).data)

    @staticmethod
    def _radius(request):
        raw = request.query_params.get('radius_km')
        if raw in (None, ''):
            return None
        try:
            radius_km = float(raw)
        except ValueError:
            raise ValidationError("radius_km must be a number")
        if radius_km <= 0:
            raise ValidationError("radius_km must be > 0")
        return radius_km


class RideViewSet(viewsets.ViewSet):
    """
    Ride booking and lifecycle.
    - Rider: create, list (history), cancel
    - Driver: available, accept, start, complete, cancel
    """

    def list(self, request):
        rides = services.get_dispatcher().ride_history(caller_id(request))
        return Response(RideSerializer(rides, many=True).data)

    def create(self, request):
        serializer = RideRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        ride = services.get_dispatcher().request_ride(
            caller_id(request),
            to_location(data['pickup'], 'pickup location'),
            to_location(data['dropoff'], 'dropoff location'),
            data['ride_class'],
            data['payment_method'],
            requested_driver_id=data['driver_id'],
            pickup_address=data['pickup_address'],
            dropoff_address=data['dropoff_address'],
        )
        return Response(RideSerializer(ride).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        ride = services.get_dispatcher().get_ride(pk)
        user_id = caller_id(request)
        if user_id not in (ride.rider_id, ride.driver_id) and user_id not in ride.offered_driver_ids:
            raise AuthorizationError("You are not part of this ride")
        return Response(RideSerializer(ride).data)

    @action(detail=False, methods=['get'])
    def available(self, request):
        offers = services.get_dispatcher().available_rides(caller_id(request))
        return Response(RideOfferSerializer(offers, many=True).data)

    @action(detail=True, methods=['post'])
    def accept(self, request, pk=None):
        ride = services.get_dispatcher().accept_ride(pk, caller_id(request))
        return Response(RideSerializer(ride).data)

    @action(detail=True, methods=['post'])
    def start(self, request, pk=None):
        ride = services.get_dispatcher().start_ride(pk, caller_id(request))
        return Response(RideSerializer(ride).data)

    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        ride = services.get_dispatcher().complete_ride(pk, caller_id(request))
        return Response(RideSerializer(ride).data)

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        ride = services.get_dispatcher().cancel_ride(pk, caller_id(request))
        return Response(RideSerializer(ride).data)
