"""Shared builders and collaborator doubles for the test suite"""
import datetime
from decimal import Decimal

from django.contrib.auth.models import User

from ..models import Booking, CabType, City, Driver
from ..payment_gateways.payment_gateway import PaymentGateway
from ..services.notification_service import RealtimeNotifier, NotificationService
from ..utils.constants import BookingStatus, PaymentStatus, UserRole

_counter = {'value': 0}


def _next():
    _counter['value'] += 1
    return _counter['value']


def make_user(username=None, role=UserRole.USER, **kwargs):
    email = kwargs.pop('email', 'rider@example.com')
    user = User.objects.create_user(username or f'user{_next()}', email=email, **kwargs)
    user.profile.role = role
    user.profile.save()
    return user


def make_admin(username=None):
    return make_user(username or f'admin{_next()}', role=UserRole.ADMIN)


def make_driver(user=None, **kwargs):
    n = _next()
    if user is None:
        user = make_user(f'driver{n}', role=UserRole.DRIVER)
    defaults = {
        'name': f'Driver {n}',
        'phone': '9000000000',
        'license_number': f'LIC{n:05d}',
        'vehicle_number': f'GJ03AB{n:04d}',
        'vehicle_model': 'Swift Dzire',
        'is_approved': True,
    }
    defaults.update(kwargs)
    return Driver.objects.create(user=user, **defaults)


def make_cab_type(**kwargs):
    defaults = {
        'name': f'Sedan {_next()}',
        'base_km_price': Decimal('10'),
        'extra_fare_per_km': Decimal('12'),
        'included_km': 80,
    }
    defaults.update(kwargs)
    return CabType.objects.create(**defaults)


def make_city(name, latitude=None, longitude=None, state='Gujarat'):
    return City.objects.create(name=name, state=state, latitude=latitude, longitude=longitude)


def make_booking(user, status=BookingStatus.PENDING, driver=None, **kwargs):
    """Insert a booking row directly, bypassing the service"""
    n = _next()
    defaults = {
        'booking_number': f'CB241017{n:04d}',
        'pickup_address': 'Race Course Road, Rajkot',
        'drop_address': 'Marine Drive, Mumbai',
        'pickup_date': datetime.date(2024, 10, 20),
        'pickup_time': '14:00',
        'distance': 100,
        'passenger_name': 'Asha Patel',
        'passenger_email': 'asha@example.com',
        'passenger_phone': '9876543210',
        'base_amount': Decimal('1000.00'),
        'tax_amount': Decimal('50.00'),
        'total_amount': Decimal('1050.00'),
    }
    defaults.update(kwargs)
    if status != BookingStatus.PENDING and 'payment_status' not in kwargs:
        defaults['payment_status'] = PaymentStatus.COMPLETED
        defaults.setdefault('payment_id', f'pi_test_{n}')
    booking = Booking.objects.create(user=user, status=status, driver=driver, **defaults)
    if driver is not None and status in BookingStatus.DRIVER_OCCUPIED:
        driver.is_available = False
        driver.current_booking = booking
        driver.save()
    return booking


class RecordingNotifier(RealtimeNotifier):
    def __init__(self):
        self.events = []

    def emit(self, room, event, payload):
        self.events.append((room, event, payload))

    def rooms_for(self, event):
        return [room for room, name, _ in self.events if name == event]


class FailingNotifier(RealtimeNotifier):
    def emit(self, room, event, payload):
        raise ConnectionError('socket gateway unreachable')


class FailingEmailSender:
    def send(self, to_address, subject, body):
        raise OSError('SMTP server unavailable')


def recording_notifications():
    notifier = RecordingNotifier()
    return NotificationService(notifier=notifier), notifier


class FakeGateway(PaymentGateway):
    def __init__(self, refund_error=None, refund_status='succeeded'):
        self.refund_error = refund_error
        self.refund_status = refund_status
        self.refunds = []
        self.refund_keys = []
        self.orders = []
        self._keyed_refunds = {}

    def create_order(self, amount, currency, reference, customer_email=None):
        self.orders.append((amount, currency, reference))
        return {'order_id': f'cs_test_{reference}', 'payment_url': 'https://checkout.test/session'}

    def refund(self, payment_id, amount, idempotency_key=None):
        self.refund_keys.append(idempotency_key)
        if self.refund_error is not None:
            raise self.refund_error
        if idempotency_key in self._keyed_refunds:
            return self._keyed_refunds[idempotency_key]
        self.refunds.append((payment_id, amount))
        result = {
            'refund_id': f're_{len(self.refunds)}',
            'status': self.refund_status,
            'success': self.refund_status in ('succeeded', 'pending'),
        }
        if idempotency_key:
            self._keyed_refunds[idempotency_key] = result
        return result
