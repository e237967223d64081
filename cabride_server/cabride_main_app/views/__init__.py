"""Views package - HTTP request handlers"""

from .booking_views import BookingViewSet, stripe_webhook
from .driver_views import DriverViewSet
from .rating_views import RatingViewSet
from .payment_views import PaymentViewSet
from .distance_views import DistanceViewSet

__all__ = [
    'BookingViewSet', 'stripe_webhook', 'DriverViewSet',
    'RatingViewSet', 'PaymentViewSet', 'DistanceViewSet',
]
