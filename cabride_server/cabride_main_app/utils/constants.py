"""Centralized constants and business rules"""

class UserRole:
    USER = 'user'
    DRIVER = 'driver'
    ADMIN = 'admin'

    CHOICES = [
        (USER, 'User'),
        (DRIVER, 'Driver'),
        (ADMIN, 'Admin'),
    ]

class BookingStatus:
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    ASSIGNED = 'assigned'
    IN_PROGRESS = 'inProgress'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    CHOICES = [
        (PENDING, 'Pending'),
        (CONFIRMED, 'Confirmed'),
        (ASSIGNED, 'Assigned'),
        (IN_PROGRESS, 'In Progress'),
        (COMPLETED, 'Completed'),
        (CANCELLED, 'Cancelled'),
    ]

    ALL = [value for value, _ in CHOICES]
    TERMINAL = [COMPLETED, CANCELLED]
    CANCELLABLE = [PENDING, CONFIRMED, ASSIGNED, IN_PROGRESS]
    # statuses in which Booking.driver must be set
    WITH_DRIVER = [ASSIGNED, IN_PROGRESS, COMPLETED]
    # statuses in which the driver is still occupied by the booking
    DRIVER_OCCUPIED = [ASSIGNED, IN_PROGRESS]

class JourneyType:
    ONE_WAY = 'oneWay'
    ROUND_TRIP = 'roundTrip'

    CHOICES = [
        (ONE_WAY, 'One Way'),
        (ROUND_TRIP, 'Round Trip'),
    ]

class PaymentStatus:
    PENDING = 'pending'
    COMPLETED = 'completed'
    FAILED = 'failed'

    CHOICES = [
        (PENDING, 'Pending'),
        (COMPLETED, 'Completed'),
        (FAILED, 'Failed'),
    ]

class PaymentMethod:
    ONLINE = 'online'
    COD = 'cod'

    CHOICES = [
        (ONLINE, 'Online'),
        (COD, 'Cash on Delivery'),
    ]

class RefundStatus:
    NONE = 'none'
    PROCESSED = 'processed'
    FAILED = 'failed'

    CHOICES = [
        (NONE, 'None'),
        (PROCESSED, 'Processed'),
        (FAILED, 'Failed'),
    ]

class RoadType:
    DEFAULT = 'default'
    URBAN = 'urban'
    HIGHWAY = 'highway'

class RealtimeEvents:
    DRIVER_ASSIGNED = 'driver-assigned'
    BOOKING_STATUS_CHANGED = 'booking-status-changed'
    RIDE_CANCELLED = 'ride-cancelled'
    REFUND_PROCESSED = 'refund-processed'
    RIDE_COMPLETED = 'ride-completed'
    RATING_SUBMITTED = 'rating-submitted'

class BusinessRules:
    """Business rules and limits"""
    BOOKING_NUMBER_PREFIX = 'CB'
    BOOKING_NUMBER_SUFFIX_LENGTH = 4
    BOOKING_NUMBER_MAX_ATTEMPTS = 10
    DEFAULT_PICKUP_TIME = '10:00'
    NIGHT_START_HOUR = 22
    NIGHT_END_HOUR = 5
    SIMPLE_RATE_PER_KM = 10
    SIMPLE_TAX_RATE = 0.05
    SIMPLE_NIGHT_SURCHARGE_RATE = 0.10
    LONG_DISTANCE_KM = 80
    DRIVER_ALLOWANCE = 500
    MIN_RATING = 1
    MAX_RATING = 5
    ADMIN_ROOM = 'admin'
    UNKNOWN_DRIVER_NAME = 'Unknown Driver'
    UNKNOWN_VEHICLE_MODEL = 'Standard Vehicle'
    NOT_AVAILABLE = 'N/A'
    AVERAGE_SPEED_KMPH = 60
    DEFAULT_REFUND_REASON = 'Cancelled by user with refund'
