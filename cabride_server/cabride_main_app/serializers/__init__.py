"""Serializers package - request and response shapes"""

from .booking_serializers import (
    BookingSerializer, BookingTrackSerializer, BookingCreateSerializer, AssignDriverSerializer, PaymentUpdateSerializer,
    PaymentVerifySerializer, StatusUpdateSerializer, CancelSerializer, RefundRequestSerializer,
)
from .driver_serializers import DriverSerializer, AvailabilitySerializer, ApprovalSerializer
from .location_serializers import CitySerializer, RouteSerializer, CabTypeSerializer, DistanceRequestSerializer
from .rating_serializers import RateDriverSerializer, RateRiderSerializer

__all__ = [
    'BookingSerializer', 'BookingTrackSerializer', 'BookingCreateSerializer', 'AssignDriverSerializer', 'PaymentUpdateSerializer',
    'PaymentVerifySerializer', 'StatusUpdateSerializer', 'CancelSerializer', 'RefundRequestSerializer',
    'DriverSerializer', 'AvailabilitySerializer', 'ApprovalSerializer',
    'CitySerializer', 'RouteSerializer', 'CabTypeSerializer', 'DistanceRequestSerializer',
    'RateDriverSerializer', 'RateRiderSerializer',
]
