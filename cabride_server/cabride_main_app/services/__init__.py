"""Services package - business logic layer"""

from .booking_service import BookingService
from .driver_service import DriverService
from .distance_service import DistanceService
from .rating_service import RatingService
from .refund_service import RefundService
from .payment_service import PaymentService
from .notification_service import NotificationService

__all__ = [
    'BookingService',
    'DriverService',
    'DistanceService',
    'RatingService',
    'RefundService',
    'PaymentService',
    'NotificationService',
]
