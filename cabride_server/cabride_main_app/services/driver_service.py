"""Driver service - availability coupling between drivers and their bookings"""
import logging

from django.db import transaction

from ..models import Booking, Driver
from ..utils.constants import BookingStatus
from ..utils.errors import service_result, Conflict, Forbidden, NotFound
from ..utils.identity import is_admin, get_driver_for_user
from ..utils.lookups import parse_id

logger = logging.getLogger(__name__)

AVAILABILITY_FIELDS = ['is_available', 'current_booking', 'updated_at']


class DriverService:
    """
    Owns Driver.is_available, Driver.current_booking and Driver.total_rides.

    occupy/release/reconcile expect a driver row already locked by the
    caller's transaction and do not commit on their own.
    """

    def occupy(self, driver, booking):
        driver.is_available = False
        driver.current_booking = booking
        driver.save(update_fields=AVAILABILITY_FIELDS)
        logger.info(f'[DRIVER] Driver {driver.id} occupied by booking {booking.booking_number}')

    def release(self, driver, booking=None, completed=False):
        """Free the driver; a completed trip also counts towards total_rides"""
        fields = list(AVAILABILITY_FIELDS)
        if booking is not None and driver.current_booking_id not in (None, booking.pk):
            # Driver has since moved on to another booking
            logger.warning(
                f'[DRIVER] Driver {driver.id} holds booking {driver.current_booking_id}, '
                f'not {booking.pk}; leaving availability untouched'
            )
            fields = ['updated_at']
        else:
            driver.is_available = True
            driver.current_booking = None

        if completed:
            driver.total_rides += 1
            fields.append('total_rides')
        driver.save(update_fields=fields)
        logger.info(f'[DRIVER] Driver {driver.id} released (completed={completed})')

    def is_stale(self, driver):
        """True if current_booking points at a missing, cancelled or completed booking"""
        if driver.current_booking_id is None:
            return False
        booking = Booking.objects.filter(pk=driver.current_booking_id).only('id', 'status').first()
        return booking is None or booking.status in BookingStatus.TERMINAL

    def reconcile(self, driver):
        """
        Clear a current_booking that points at a missing or finished booking.

        Returns True when a repair was made.
        """
        if not self.is_stale(driver):
            return False

        logger.warning(f'[DRIVER] Driver {driver.id} referenced stale booking {driver.current_booking_id}, repairing')
        driver.current_booking = None
        driver.is_available = True
        driver.save(update_fields=AVAILABILITY_FIELDS)
        return True

    def _locked_driver(self, driver_id):
        driver = Driver.objects.select_for_update().filter(pk=parse_id(driver_id, 'driver id')).first()
        if driver is None:
            raise NotFound(f'Driver {driver_id} not found')
        return driver

    def _check_self_or_admin(self, driver, actor):
        if is_admin(actor):
            return
        own = get_driver_for_user(actor)
        if own is None or own.pk != driver.pk:
            raise Forbidden('Not allowed to act for this driver')

    @service_result
    def get_current_booking(self, driver_id):
        """Live booking held by the driver, repairing a stale reference first"""
        with transaction.atomic():
            driver = self._locked_driver(driver_id)
            repaired = self.reconcile(driver)
            booking = None
            if driver.current_booking_id:
                booking = Booking.objects.select_related('user', 'cab_type').get(pk=driver.current_booking_id)
        return {'driver': driver, 'booking': booking, 'repaired': repaired}

    @service_result
    def set_availability(self, driver_id, is_available, actor):
        with transaction.atomic():
            driver = self._locked_driver(driver_id)
            self._check_self_or_admin(driver, actor)
            self.reconcile(driver)
            if is_available and driver.current_booking_id:
                raise Conflict(f'Driver is on booking {driver.current_booking_id} and cannot be marked available')
            driver.is_available = bool(is_available)
            driver.save(update_fields=['is_available', 'updated_at'])
        logger.info(f'[DRIVER] Driver {driver.id} availability set to {driver.is_available}')
        return {'driver': driver}

    @service_result
    def set_approval(self, driver_id, is_approved, actor):
        if not is_admin(actor):
            raise Forbidden('Only admins can approve drivers')
        with transaction.atomic():
            driver = self._locked_driver(driver_id)
            driver.is_approved = bool(is_approved)
            driver.save(update_fields=['is_approved', 'updated_at'])
        logger.info(f'[DRIVER] Driver {driver.id} approval set to {driver.is_approved} by {actor.username}')
        return {'driver': driver}

    @service_result
    def list_available_drivers(self):
        drivers = Driver.objects.filter(
            is_available=True,
            is_approved=True,
            current_booking__isnull=True,
        ).select_related('user', 'vehicle_type').order_by('id')
        return {'drivers': list(drivers)}

    @service_result
    def driver_bookings(self, driver_id, actor):
        driver = Driver.objects.filter(pk=parse_id(driver_id, 'driver id')).first()
        if driver is None:
            raise NotFound(f'Driver {driver_id} not found')
        self._check_self_or_admin(driver, actor)
        bookings = Booking.objects.filter(driver=driver).select_related('user', 'cab_type')
        return {'driver': driver, 'bookings': list(bookings)}
