"""Driver-related views"""
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.authentication import JWTAuthentication

from ..models import Driver
from ..permissions import IsAdminRole, IsDriver
from ..serializers import BookingSerializer, DriverSerializer, AvailabilitySerializer, ApprovalSerializer
from ..services import BookingService, DriverService, RatingService
from ..utils.identity import get_driver_for_user, is_admin
from .responses import service_response


def booking_body(result):
    return {'booking': BookingSerializer(result['booking']).data}


def driver_body(result):
    return {'driver': DriverSerializer(result['driver']).data}


class DriverViewSet(viewsets.ReadOnlyModelViewSet):
    authentication_classes = [JWTAuthentication]
    permission_classes = [IsAuthenticated]
    serializer_class = DriverSerializer

    def get_queryset(self):
        drivers = Driver.objects.select_related('user', 'vehicle_type').order_by('id')
        if is_admin(self.request.user):
            return drivers
        return drivers.filter(user=self.request.user)

    def get_permissions(self):
        if self.action in ('start_trip', 'complete_trip'):
            return [IsAuthenticated(), IsDriver()]
        if self.action in ('approval', 'available'):
            return [IsAuthenticated(), IsAdminRole()]
        return super().get_permissions()

    @action(detail=False, methods=['post'], url_path='start-trip')
    def start_trip(self, request):
        booking_id = request.data.get('booking_id')
        if not booking_id:
            return Response({'error': 'booking_id is required'}, status=status.HTTP_400_BAD_REQUEST)
        return service_response(BookingService().start_trip(booking_id, request.user), booking_body)

    @action(detail=False, methods=['post'], url_path='complete-trip')
    def complete_trip(self, request):
        booking_id = request.data.get('booking_id')
        if not booking_id:
            return Response({'error': 'booking_id is required'}, status=status.HTTP_400_BAD_REQUEST)
        return service_response(BookingService().complete_trip(booking_id, request.user), booking_body)

    @action(detail=False, methods=['get'], url_path='current-booking')
    def current_booking(self, request):
        driver_id = request.query_params.get('driver_id')
        if driver_id is None or not is_admin(request.user):
            driver = get_driver_for_user(request.user)
            if driver is None:
                return Response({'error': 'Driver profile not found'}, status=status.HTTP_404_NOT_FOUND)
            driver_id = driver.id

        result = DriverService().get_current_booking(driver_id)
        return service_response(result, lambda r: {
            'booking': BookingSerializer(r['booking']).data if r['booking'] else None,
            'repaired': r['repaired'],
        })

    @action(detail=True, methods=['post', 'patch'], url_path='availability')
    def availability(self, request, pk=None):
        serializer = AvailabilitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = DriverService().set_availability(pk, serializer.validated_data['is_available'], request.user)
        return service_response(result, driver_body)

    @action(detail=True, methods=['post', 'patch'], url_path='approval')
    def approval(self, request, pk=None):
        serializer = ApprovalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = DriverService().set_approval(pk, serializer.validated_data['is_approved'], request.user)
        return service_response(result, driver_body)

    @action(detail=False, methods=['get'], url_path='available')
    def available(self, request):
        result = DriverService().list_available_drivers()
        return service_response(result, lambda r: DriverSerializer(r['drivers'], many=True).data)

    @action(detail=True, methods=['get'], url_path='bookings')
    def bookings(self, request, pk=None):
        result = DriverService().driver_bookings(pk, request.user)
        return service_response(result, lambda r: BookingSerializer(r['bookings'], many=True).data)

    @action(detail=True, methods=['get'], url_path='ratings')
    def ratings(self, request, pk=None):
        return service_response(RatingService().driver_ratings(pk))


__all__ = ['DriverViewSet']
