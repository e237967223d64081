"""Tests for driver availability and stale reference repair"""
from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from ..models import Booking, Driver
from ..services.driver_service import DriverService
from ..utils.constants import BookingStatus
from .fixtures import make_admin, make_booking, make_driver, make_user


class ReconcileTest(TestCase):
    def setUp(self):
        self.service = DriverService()
        self.user = make_user()
        self.driver = make_driver()

    def test_missing_booking_is_repaired(self):
        booking = make_booking(self.user, status=BookingStatus.ASSIGNED, driver=self.driver)
        Booking.objects.filter(pk=booking.pk).delete()
        self.driver.refresh_from_db()

        self.assertTrue(self.service.reconcile(self.driver))
        self.driver.refresh_from_db()
        self.assertIsNone(self.driver.current_booking_id)
        self.assertTrue(self.driver.is_available)

    def test_cancelled_booking_is_repaired(self):
        booking = make_booking(self.user, status=BookingStatus.ASSIGNED, driver=self.driver)
        Booking.objects.filter(pk=booking.pk).update(status=BookingStatus.CANCELLED, driver=None)
        self.driver.refresh_from_db()

        self.assertTrue(self.service.reconcile(self.driver))
        self.assertIsNone(self.driver.current_booking_id)

    def test_live_booking_is_kept(self):
        booking = make_booking(self.user, status=BookingStatus.IN_PROGRESS, driver=self.driver)
        self.driver.refresh_from_db()

        self.assertFalse(self.service.reconcile(self.driver))
        self.driver.refresh_from_db()
        self.assertEqual(self.driver.current_booking_id, booking.id)
        self.assertFalse(self.driver.is_available)

    def test_idle_driver_untouched(self):
        self.assertFalse(self.service.is_stale(self.driver))
        self.assertFalse(self.service.reconcile(self.driver))


class CurrentBookingTest(TestCase):
    def setUp(self):
        self.service = DriverService()
        self.user = make_user()
        self.driver = make_driver()

    def test_returns_live_booking(self):
        booking = make_booking(self.user, status=BookingStatus.ASSIGNED, driver=self.driver)
        result = self.service.get_current_booking(self.driver.id)

        self.assertTrue(result['success'])
        self.assertEqual(result['booking'].id, booking.id)
        self.assertFalse(result['repaired'])

    def test_stale_reference_repaired_on_read(self):
        booking = make_booking(self.user, status=BookingStatus.ASSIGNED, driver=self.driver)
        Booking.objects.filter(pk=booking.pk).delete()

        result = self.service.get_current_booking(self.driver.id)

        self.assertTrue(result['success'])
        self.assertIsNone(result['booking'])
        self.assertTrue(result['repaired'])
        self.driver.refresh_from_db()
        self.assertTrue(self.driver.is_available)

    def test_unknown_driver(self):
        result = self.service.get_current_booking(424242)
        self.assertEqual(result['kind'], 'not_found')


class AvailabilityTest(TestCase):
    def setUp(self):
        self.service = DriverService()
        self.user = make_user()
        self.driver = make_driver()

    def test_driver_toggles_own_availability(self):
        result = self.service.set_availability(self.driver.id, False, self.driver.user)
        self.assertTrue(result['success'])
        self.assertFalse(Driver.objects.get(pk=self.driver.pk).is_available)

    def test_cannot_go_available_while_on_a_trip(self):
        make_booking(self.user, status=BookingStatus.IN_PROGRESS, driver=self.driver)
        result = self.service.set_availability(self.driver.id, True, self.driver.user)
        self.assertEqual(result['kind'], 'conflict')
        self.assertFalse(Driver.objects.get(pk=self.driver.pk).is_available)

    def test_other_driver_forbidden(self):
        other = make_driver()
        result = self.service.set_availability(self.driver.id, False, other.user)
        self.assertEqual(result['kind'], 'forbidden')

    def test_approval_is_admin_only(self):
        self.assertEqual(self.service.set_approval(self.driver.id, False, self.user)['kind'], 'forbidden')
        self.assertTrue(self.service.set_approval(self.driver.id, False, make_admin())['success'])
        self.assertFalse(Driver.objects.get(pk=self.driver.pk).is_approved)

    def test_available_drivers_excludes_busy_and_unapproved(self):
        busy = make_driver()
        make_booking(self.user, status=BookingStatus.ASSIGNED, driver=busy)
        make_driver(is_approved=False)

        drivers = self.service.list_available_drivers()['drivers']
        self.assertEqual([d.id for d in drivers], [self.driver.id])


class ReconcileCommandTest(TestCase):
    def setUp(self):
        user = make_user()
        self.stale = make_driver()
        booking = make_booking(user, status=BookingStatus.ASSIGNED, driver=self.stale)
        Booking.objects.filter(pk=booking.pk).update(status=BookingStatus.COMPLETED)
        self.busy = make_driver()
        make_booking(user, status=BookingStatus.IN_PROGRESS, driver=self.busy)

    def test_dry_run_reports_only(self):
        out = StringIO()
        call_command('reconcile_drivers', '--dry-run', stdout=out)

        self.assertIn('1/2 drivers would be repaired', out.getvalue())
        self.assertIsNotNone(Driver.objects.get(pk=self.stale.pk).current_booking_id)

    def test_repairs_stale_drivers(self):
        out = StringIO()
        call_command('reconcile_drivers', stdout=out)

        self.assertIn('1/2 drivers repaired', out.getvalue())
        self.assertIsNone(Driver.objects.get(pk=self.stale.pk).current_booking_id)
        self.assertIsNotNone(Driver.objects.get(pk=self.busy.pk).current_booking_id)
