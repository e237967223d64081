"""Booking service - business logic for the booking lifecycle"""
import logging
import re
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.crypto import get_random_string
from django.utils.dateparse import parse_date

from ..models import Booking, Driver, Route
from ..utils.constants import (
    BookingStatus, BusinessRules, JourneyType, PaymentMethod, PaymentStatus,
)
from ..utils.errors import service_result, Conflict, DependencyFailure, Forbidden, NotFound, ValidationFailed
from ..utils.geo import calculate_fare, is_night_time, quote_simple_fare
from ..utils.identity import is_admin, get_driver_for_user
from ..utils.lookups import ById, ByNumber, parse_booking_lookup, parse_id
from .distance_service import DistanceService
from .driver_service import DriverService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ['pickup_address', 'drop_address', 'pickup_date', 'passenger_name', 'passenger_email', 'passenger_phone']
TIME_PATTERN = re.compile(r'^([01]?\d|2[0-3]):[0-5]\d$')
BOOKING_NUMBER_CHARS = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789'


def generate_booking_number():
    """CB + YYMMDD + 4 random uppercase alphanumerics"""
    date_part = timezone.localdate().strftime('%y%m%d')
    suffix = get_random_string(BusinessRules.BOOKING_NUMBER_SUFFIX_LENGTH, BOOKING_NUMBER_CHARS)
    return f'{BusinessRules.BOOKING_NUMBER_PREFIX}{date_part}{suffix}'


def load_booking(lookup, for_update=False):
    """Resolve a parsed (or raw) booking reference to a Booking row"""
    lookup = parse_booking_lookup(lookup)
    queryset = Booking.objects.select_for_update() if for_update else Booking.objects.select_related('driver', 'cab_type')
    if isinstance(lookup, ById):
        booking = queryset.filter(pk=lookup.id).first()
    else:
        booking = queryset.filter(booking_number=lookup.booking_number).first()
    if booking is None:
        raise NotFound('Booking not found')
    return booking


def transition(booking, expected, **changes):
    """
    Test-and-set status change: applies `changes` only if the row still has
    one of the `expected` statuses, otherwise raises Conflict.
    """
    expected = [expected] if isinstance(expected, str) else list(expected)
    changes['updated_at'] = timezone.now()
    updated = Booking.objects.filter(pk=booking.pk, status__in=expected).update(**changes)
    if not updated:
        booking.refresh_from_db(fields=['status'])
        raise Conflict(
            f'Booking {booking.booking_number} is {booking.status}, expected {" or ".join(expected)}',
            current_status=booking.status,
        )
    for field, value in changes.items():
        setattr(booking, field, value)
    return booking


def _amount(data, field):
    raw = data.get(field)
    if raw in (None, ''):
        return Decimal('0')
    try:
        value = Decimal(str(raw))
    except InvalidOperation:
        raise ValidationFailed(f'{field} must be a number')
    if not value.is_finite() or value < 0:
        raise ValidationFailed(f'{field} must be a non-negative number')
    return value.quantize(Decimal('0.01'))


class BookingService:
    """Service for booking lifecycle operations"""

    def __init__(self, notifications=None, drivers=None, distances=None, gateway=None):
        self.notifications = notifications or NotificationService()
        self.drivers = drivers or DriverService()
        self.distances = distances or DistanceService()
        self._gateway = gateway

    @property
    def gateway(self):
        if self._gateway is None:
            from ..payment_gateways.stripe_payment_gateway import StripePaymentGateway
            self._gateway = StripePaymentGateway()
        return self._gateway

    # ----- creation -----

    @staticmethod
    def _date(value, label):
        if not isinstance(value, str):
            return value
        try:
            parsed = parse_date(value)
        except ValueError:
            parsed = None
        if parsed is None:
            raise ValidationFailed(f'{label} must be a valid YYYY-MM-DD date')
        return parsed

    def _validate_create(self, data):
        missing = [field for field in REQUIRED_FIELDS if not data.get(field)]
        if missing:
            raise ValidationFailed(f'Missing required fields: {", ".join(missing)}', fields=missing)

        try:
            validate_email(data['passenger_email'])
        except DjangoValidationError:
            raise ValidationFailed('Invalid passenger email')

        journey_type = data.get('journey_type') or JourneyType.ONE_WAY
        if journey_type not in dict(JourneyType.CHOICES):
            raise ValidationFailed(f'Invalid journey type: {journey_type}')

        pickup_date = self._date(data['pickup_date'], 'pickup_date')
        return_date = self._date(data.get('return_date') or None, 'return_date')

        pickup_time = data.get('pickup_time') or BusinessRules.DEFAULT_PICKUP_TIME
        for label, value in (('pickup_time', pickup_time), ('return_time', data.get('return_time'))):
            if value and not TIME_PATTERN.match(str(value)):
                raise ValidationFailed(f'{label} must be HH:MM')

        return journey_type, pickup_date, return_date, pickup_time

    def _price(self, data, distance, journey_type, pickup_time, cab_type, route):
        """
        Fare components for a new booking.

        Caller-supplied amounts win; otherwise a cab type profile is used when
        one is given, and the flat per-km quote when it is not.
        """
        toll = route.toll_charges if route else Decimal('0')

        if _amount(data, 'base_amount') > 0:
            components = {field: _amount(data, field) for field in Booking.AMOUNT_FIELDS}
            return components, None

        if cab_type is not None:
            fare = calculate_fare(distance, cab_type, is_night_time(pickup_time))
            components = {
                'base_amount': Decimal(fare['base_fare'] + fare['extra_km_fare'] + fare['fuel_charge']),
                'tax_amount': Decimal('0'),
                'toll_charges': Decimal(toll),
                'driver_allowance': Decimal(fare['driver_charge']),
                'night_charges': Decimal(fare['night_charge']),
            }
            return components, fare

        quote = quote_simple_fare(distance, journey_type, pickup_time, toll)
        quote.pop('total_amount')
        return quote, None

    def _insert_with_unique_number(self, fields):
        for _ in range(BusinessRules.BOOKING_NUMBER_MAX_ATTEMPTS):
            number = generate_booking_number()
            if Booking.objects.filter(booking_number=number).exists():
                continue
            try:
                with transaction.atomic():
                    return Booking.objects.create(booking_number=number, **fields)
            except IntegrityError:
                logger.warning(f'[BOOKING] Booking number {number} collided on insert, retrying')
        raise DependencyFailure('Could not generate a unique booking number')

    @service_result
    def create_booking(self, user, data):
        """
        Create a pending booking for an authenticated user

        Args:
            user: Authenticated User placing the booking
            data: Request payload (addresses, passenger contact, dates, optional
                  pickup/drop city, cab type, distance and fare components)

        Returns:
            {'booking': Booking}
        """
        if user is None or not user.is_authenticated:
            raise Forbidden('Authentication required to book a ride')

        journey_type, pickup_date, return_date, pickup_time = self._validate_create(data)

        pickup_city = self.distances.resolve_city(data['pickup_location']) if data.get('pickup_location') else None
        drop_city = self.distances.resolve_city(data['drop_location']) if data.get('drop_location') else None
        cab_type = self.distances.resolve_cab_type(data['cab_type']) if data.get('cab_type') else None

        route = Route.between(pickup_city, drop_city)
        if data.get('distance') not in (None, ''):
            try:
                distance = float(data['distance'])
            except (TypeError, ValueError):
                raise ValidationFailed('distance must be a number')
            if distance < 0:
                raise ValidationFailed('distance must be non-negative')
        elif pickup_city and drop_city:
            distance, route, _ = self.distances.distance_for(pickup_city, drop_city, journey_type)
        elif _amount(data, 'base_amount') > 0:
            distance = 0
        else:
            raise ValidationFailed('distance is required when pickup and drop cities are not given')

        components, fare = self._price(data, distance, journey_type, pickup_time, cab_type, route)

        booking = self._insert_with_unique_number({
            'user': user,
            'cab_type': cab_type,
            'pickup_location': pickup_city,
            'drop_location': drop_city,
            'pickup_address': data['pickup_address'],
            'drop_address': data['drop_address'],
            'journey_type': journey_type,
            'pickup_date': pickup_date,
            'pickup_time': pickup_time,
            'return_date': return_date,
            'return_time': data.get('return_time') or None,
            'distance': round(distance, 2),
            'duration': parse_id(data['duration'], 'duration') if data.get('duration') else (route.estimated_time if route else None),
            'passenger_name': data['passenger_name'],
            'passenger_email': data['passenger_email'],
            'passenger_phone': data['passenger_phone'],
            'additional_notes': data.get('additional_notes'),
            'total_amount': sum(components.values(), Decimal('0')),
            'fare_breakdown': fare,
            'status': BookingStatus.PENDING,
            **components,
        })
        logger.info(f'[BOOKING] Created {booking.booking_number} for user {user.id}, total {booking.total_amount}')

        self.notifications.booking_created(booking)
        return {'booking': booking}

    # ----- payment -----

    def _confirm(self, lookup, payment_id=None, payment_status=None, payment_method=None):
        if payment_method and payment_method not in dict(PaymentMethod.CHOICES):
            raise ValidationFailed(f'Invalid payment method: {payment_method}')

        cash = payment_method == PaymentMethod.COD
        paid = payment_status == PaymentStatus.COMPLETED or payment_method == PaymentMethod.ONLINE
        if not cash and not paid:
            raise ValidationFailed('Payment must be completed or cash on delivery')
        new_payment_status = PaymentStatus.PENDING if cash else PaymentStatus.COMPLETED
        payment_method = payment_method or PaymentMethod.ONLINE

        with transaction.atomic():
            booking = load_booking(lookup, for_update=True)

            if booking.status == BookingStatus.CANCELLED:
                raise Conflict('Cannot confirm payment for a cancelled booking', current_status=booking.status)

            if booking.status != BookingStatus.PENDING:
                same_payment = (booking.payment_status == new_payment_status
                                and (payment_id is None or booking.payment_id == payment_id))
                if not same_payment:
                    # Past confirmation: record the payment, leave the lifecycle alone
                    booking.payment_status = new_payment_status
                    booking.payment_method = payment_method
                    booking.payment_id = payment_id or booking.payment_id
                    booking.save(update_fields=['payment_status', 'payment_method', 'payment_id', 'updated_at'])
                    logger.info(f'[PAYMENT] Recorded {new_payment_status} payment on {booking.booking_number} ({booking.status})')
                return {'booking': booking, 'already_confirmed': True}

            transition(
                booking, BookingStatus.PENDING,
                status=BookingStatus.CONFIRMED,
                payment_status=new_payment_status,
                payment_method=payment_method,
                payment_id=payment_id or booking.payment_id,
            )

        logger.info(f'[PAYMENT] Booking {booking.booking_number} confirmed ({payment_method}, payment {new_payment_status})')
        self.notifications.booking_status_changed(booking, BookingStatus.PENDING)
        return {'booking': booking, 'already_confirmed': False}

    @service_result
    def confirm_payment(self, lookup, payment_id=None, payment_status=None, payment_method=None):
        """Move a pending booking to confirmed after payment (or COD selection)"""
        return self._confirm(lookup, payment_id, payment_status, payment_method)

    @service_result
    def update_payment(self, lookup, actor, payment_id=None, payment_status=None, payment_method=None):
        """
        Payment selection from the booking endpoint

        Riders may only pick cash on delivery here. Online payments are
        confirmed through signature verification or the checkout webhook,
        admins can still mark a payment completed by hand.
        """
        booking = load_booking(lookup)
        admin = is_admin(actor)
        if booking.user_id != actor.id and not admin:
            raise Forbidden('Not allowed to update payment for this booking')
        if not admin and (payment_method != PaymentMethod.COD or payment_status == PaymentStatus.COMPLETED):
            raise Forbidden('Online payments must be confirmed through the payment gateway')
        if admin:
            logger.info(f'[PAYMENT] Admin {actor.id} updating payment on {booking.booking_number}')
        return self._confirm(booking.pk, payment_id, payment_status, payment_method)

    @service_result
    def verify_payment(self, lookup, order_id, payment_id, signature):
        if not (order_id and payment_id and signature):
            raise ValidationFailed('order_id, payment_id and signature are required')
        if not self.gateway.verify_signature(order_id, payment_id, signature):
            logger.warning(f'[PAYMENT] Invalid signature for order {order_id}')
            raise ValidationFailed('Invalid payment signature')
        return self._confirm(lookup, payment_id, PaymentStatus.COMPLETED, PaymentMethod.ONLINE)

    # ----- driver lifecycle -----

    @service_result
    def assign_driver(self, lookup, driver_id, actor):
        """
        Assign a driver to a confirmed booking (admin only)

        A driver already flagged unavailable is still accepted; a driver that
        holds a different live booking is not.
        """
        if not is_admin(actor):
            raise Forbidden('Only admins can assign drivers')
        driver_id = parse_id(driver_id, 'driver id')

        with transaction.atomic():
            booking = load_booking(lookup, for_update=True)
            if booking.status != BookingStatus.CONFIRMED:
                raise Conflict(
                    f'Only confirmed bookings can be assigned, booking is {booking.status}',
                    current_status=booking.status,
                )

            driver = Driver.objects.select_for_update().filter(pk=driver_id).first()
            if driver is None:
                raise NotFound(f'Driver {driver_id} not found')

            self.drivers.reconcile(driver)
            if driver.current_booking_id and driver.current_booking_id != booking.pk:
                raise Conflict(
                    f'Driver {driver.id} is already on booking {driver.current_booking_id}',
                    current_status=booking.status,
                )
            if not driver.is_available:
                logger.warning(f'[BOOKING] Assigning driver {driver.id} to {booking.booking_number} although marked unavailable')

            transition(
                booking, BookingStatus.CONFIRMED,
                status=BookingStatus.ASSIGNED,
                driver=driver,
                assigned_at=timezone.now(),
            )
            self.drivers.occupy(driver, booking)

        summary = driver.summary()
        logger.info(f'[BOOKING] Driver {driver.id} assigned to {booking.booking_number} by {actor.username}')
        self.notifications.driver_assigned(booking, summary)
        return {'booking': booking, 'driver': summary}

    def _assigned_driver(self, booking, actor, expected_status, action):
        driver = get_driver_for_user(actor)
        if driver is None:
            raise Forbidden('Only drivers can update trips')
        if booking.status != expected_status:
            raise Conflict(
                f'Cannot {action} a trip that is {booking.status}',
                current_status=booking.status,
            )
        if booking.driver_id != driver.pk:
            raise Forbidden('Only the assigned driver can update this trip')
        return driver

    @service_result
    def start_trip(self, lookup, actor):
        with transaction.atomic():
            booking = load_booking(lookup, for_update=True)
            self._assigned_driver(booking, actor, BookingStatus.ASSIGNED, 'start')
            transition(booking, BookingStatus.ASSIGNED, status=BookingStatus.IN_PROGRESS, started_at=timezone.now())

        logger.info(f'[BOOKING] Trip {booking.booking_number} started')
        self.notifications.booking_status_changed(booking, BookingStatus.ASSIGNED)
        return {'booking': booking}

    @service_result
    def complete_trip(self, lookup, actor):
        """Finish an in-progress trip and free the driver"""
        with transaction.atomic():
            booking = load_booking(lookup, for_update=True)
            self._assigned_driver(booking, actor, BookingStatus.IN_PROGRESS, 'complete')
            driver = Driver.objects.select_for_update().get(pk=booking.driver_id)
            transition(booking, BookingStatus.IN_PROGRESS, status=BookingStatus.COMPLETED, completed_at=timezone.now())
            self.drivers.release(driver, booking=booking, completed=True)

        logger.info(f'[BOOKING] Trip {booking.booking_number} completed by driver {driver.id}')
        self.notifications.ride_completed(booking)
        return {'booking': booking}

    @service_result
    def cancel_booking(self, lookup, actor, reason=None):
        """Cancel any non-terminal booking; frees a driver that was already committed"""
        with transaction.atomic():
            booking = load_booking(lookup, for_update=True)
            if booking.user_id != actor.id and not is_admin(actor):
                raise Forbidden('Not allowed to cancel this booking')
            if booking.status in BookingStatus.TERMINAL:
                raise Conflict(f'Booking is already {booking.status}', current_status=booking.status)

            previous_status = booking.status
            previous_driver_id = booking.driver_id
            driver = None
            if previous_status in BookingStatus.DRIVER_OCCUPIED and previous_driver_id:
                driver = Driver.objects.select_for_update().filter(pk=previous_driver_id).first()

            transition(
                booking, previous_status,
                status=BookingStatus.CANCELLED,
                driver=None,
                cancelled_at=timezone.now(),
                cancellation_reason=reason or booking.cancellation_reason,
            )
            if driver is not None:
                self.drivers.release(driver, booking=booking)

        logger.info(f'[BOOKING] {booking.booking_number} cancelled from {previous_status} by {actor.username}')
        self.notifications.ride_cancelled(booking, previous_driver_id)
        return {'booking': booking, 'previous_status': previous_status}

    @service_result
    def force_status(self, lookup, status, actor):
        """Admin override: set any status directly, without driver coupling"""
        if not is_admin(actor):
            raise Forbidden('Only admins can set booking status directly')
        if status not in BookingStatus.ALL:
            raise ValidationFailed(f'Invalid status: {status}')

        with transaction.atomic():
            booking = load_booking(lookup, for_update=True)
            previous_status = booking.status
            booking.status = status
            booking.save(update_fields=['status', 'updated_at'])

        if not booking.has_consistent_driver():
            logger.warning(
                f'[BOOKING] Forced {booking.booking_number} {previous_status} -> {status} '
                f'leaves driver {booking.driver_id} inconsistent with status'
            )
        else:
            logger.info(f'[BOOKING] Forced {booking.booking_number} {previous_status} -> {status} by {actor.username}')
        self.notifications.booking_status_changed(booking, previous_status)
        return {'booking': booking, 'previous_status': previous_status}

    # ----- queries -----

    @service_result
    def get_booking(self, lookup, actor):
        booking = load_booking(lookup)
        if booking.user_id != actor.id and not is_admin(actor):
            driver = get_driver_for_user(actor)
            if driver is None or booking.driver_id != driver.pk:
                raise Forbidden('Not allowed to view this booking')
        return {'booking': booking}

    @service_result
    def list_bookings(self, actor):
        bookings = Booking.objects.select_related('driver', 'cab_type')
        if not is_admin(actor):
            driver = get_driver_for_user(actor)
            if driver is not None:
                bookings = bookings.filter(driver=driver)
            else:
                bookings = bookings.filter(user=actor)
        return {'bookings': list(bookings)}

    @service_result
    def track_booking(self, booking_number):
        """Public status lookup by human booking number"""
        return {'booking': load_booking(ByNumber(str(booking_number).strip().upper()))}

    @service_result
    def list_unassigned_confirmed(self):
        bookings = Booking.objects.filter(status=BookingStatus.CONFIRMED, driver__isnull=True).order_by('pickup_date', 'pickup_time')
        return {'bookings': list(bookings)}
