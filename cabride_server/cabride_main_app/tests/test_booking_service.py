"""Tests for booking service"""
from decimal import Decimal
from unittest import mock

from django.core import mail
from django.test import TestCase

from ..models import Booking, Driver, Route
from ..services.booking_service import BookingService, generate_booking_number
from ..services.notification_service import NotificationService
from ..utils.constants import BookingStatus, PaymentMethod, PaymentStatus, RealtimeEvents
from ..utils.lookups import ByNumber
from .fixtures import (
    FailingEmailSender, FailingNotifier, FakeGateway, make_admin, make_booking, make_cab_type, make_city,
    make_driver, make_user,
    recording_notifications,
)


def booking_data(**overrides):
    data = {
        'pickup_address': 'Race Course Road, Rajkot',
        'drop_address': 'Marine Drive, Mumbai',
        'pickup_date': '2024-10-20',
        'pickup_time': '14:00',
        'passenger_name': 'Asha Patel',
        'passenger_email': 'asha@example.com',
        'passenger_phone': '9876543210',
    }
    data.update(overrides)
    return data


class BookingServiceTestBase(TestCase):
    def setUp(self):
        self.notifications, self.notifier = recording_notifications()
        self.gateway = FakeGateway()
        self.service = BookingService(notifications=self.notifications, gateway=self.gateway)
        self.user = make_user('rider')
        self.admin = make_admin('ops')
        self.driver = make_driver()

    def assertDriverInvariant(self, booking):
        booking.refresh_from_db()
        self.assertTrue(booking.has_consistent_driver(), f'{booking.status} with driver {booking.driver_id}')


class CreateBookingTest(BookingServiceTestBase):
    def test_profile_fare(self):
        cab_type = make_cab_type(name='Sedan')
        result = self.service.create_booking(self.user, booking_data(distance=100, cab_type=cab_type.id))

        self.assertTrue(result['success'], result)
        booking = result['booking']
        self.assertEqual(booking.status, BookingStatus.PENDING)
        self.assertEqual(booking.fare_breakdown['base_fare'], 1000)
        self.assertEqual(booking.fare_breakdown['extra_km_fare'], 240)
        self.assertEqual(booking.fare_breakdown['fuel_charge'], 0)
        self.assertEqual(booking.fare_breakdown['driver_charge'], 0)
        self.assertEqual(booking.fare_breakdown['night_charge'], 0)
        self.assertEqual(booking.fare_breakdown['total_fare'], 1240)
        self.assertEqual(booking.total_amount, Decimal('1240'))
        self.assertEqual(booking.total_amount, booking.component_total())

    def test_simple_fare_without_cab_type(self):
        result = self.service.create_booking(self.user, booking_data(distance=100, pickup_time='23:00'))

        booking = Booking.objects.get(pk=result['booking'].pk)
        self.assertEqual(booking.base_amount, Decimal('1000.00'))
        self.assertEqual(booking.tax_amount, Decimal('50.00'))
        self.assertEqual(booking.driver_allowance, Decimal('500.00'))
        self.assertEqual(booking.night_charges, Decimal('100.00'))
        self.assertEqual(booking.total_amount, Decimal('1650.00'))
        self.assertEqual(booking.total_amount, booking.component_total())

    def test_caller_amounts_trusted_and_total_recomputed(self):
        data = booking_data(
            distance=10, base_amount='800', tax_amount='40', toll_charges='60',
            driver_allowance='0', night_charges='0', total_amount='1',
        )
        booking = self.service.create_booking(self.user, data)['booking']

        self.assertEqual(booking.base_amount, Decimal('800.00'))
        self.assertEqual(booking.total_amount, Decimal('900.00'))

    def test_negative_amount_rejected(self):
        result = self.service.create_booking(self.user, booking_data(base_amount='100', tax_amount='-5'))
        self.assertFalse(result['success'])
        self.assertEqual(result['kind'], 'validation_error')

    def test_distance_and_toll_from_route(self):
        rajkot = make_city('Rajkot', 22.3039, 70.8022)
        ahmedabad = make_city('Ahmedabad', 23.0225, 72.5714)
        Route.objects.create(source_city=rajkot, destination_city=ahmedabad, distance=215, estimated_time=240, toll_charges=Decimal('150'))

        booking = self.service.create_booking(
            self.user, booking_data(pickup_location='ahmedabad', drop_location=rajkot.id),
        )['booking']

        self.assertEqual(booking.distance, 215)
        self.assertEqual(booking.duration, 240)
        self.assertEqual(booking.toll_charges, Decimal('150.00'))
        self.assertEqual(booking.total_amount, booking.component_total())

    def test_booking_number_format(self):
        booking = self.service.create_booking(self.user, booking_data(distance=20))['booking']
        self.assertRegex(booking.booking_number, r'^CB\d{6}[A-Z0-9]{4}$')

    def test_booking_number_collision_retries(self):
        existing = make_booking(self.user)
        fresh = 'CB241017ZZZZ'
        with mock.patch('cabride_main_app.services.booking_service.generate_booking_number',
                        side_effect=[existing.booking_number, fresh]):
            booking = self.service.create_booking(self.user, booking_data(distance=20))['booking']
        self.assertEqual(booking.booking_number, fresh)

    def test_booking_number_exhausted(self):
        existing = make_booking(self.user)
        with mock.patch('cabride_main_app.services.booking_service.generate_booking_number',
                        return_value=existing.booking_number):
            result = self.service.create_booking(self.user, booking_data(distance=20))
        self.assertFalse(result['success'])
        self.assertEqual(result['kind'], 'dependency_failure')

    def test_missing_passenger_contact(self):
        result = self.service.create_booking(self.user, booking_data(distance=20, passenger_phone=''))
        self.assertFalse(result['success'])
        self.assertEqual(result['status_code'], 400)
        self.assertIn('passenger_phone', result['error'])
        self.assertFalse(Booking.objects.exists())

    def test_invalid_email(self):
        result = self.service.create_booking(self.user, booking_data(distance=20, passenger_email='not-an-email'))
        self.assertEqual(result['kind'], 'validation_error')

    def test_impossible_dates_rejected(self):
        result = self.service.create_booking(self.user, booking_data(distance=20, pickup_date='2024-02-30'))
        self.assertEqual(result['kind'], 'validation_error')
        self.assertEqual(result['error'], 'pickup_date must be a valid YYYY-MM-DD date')

        result = self.service.create_booking(self.user, booking_data(distance=20, return_date='2024-13-01'))
        self.assertEqual(result['kind'], 'validation_error')
        self.assertEqual(result['error'], 'return_date must be a valid YYYY-MM-DD date')
        self.assertFalse(Booking.objects.exists())

    def test_unknown_cab_type(self):
        result = self.service.create_booking(self.user, booking_data(distance=20, cab_type='Helicopter'))
        self.assertEqual(result['kind'], 'not_found')

    def test_anonymous_rejected(self):
        result = self.service.create_booking(None, booking_data(distance=20))
        self.assertFalse(result['success'])
        self.assertEqual(result['kind'], 'forbidden')

    def test_creation_email_sent(self):
        self.service.create_booking(self.user, booking_data(distance=20))
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['asha@example.com'])


class ConfirmPaymentTest(BookingServiceTestBase):
    def test_online_payment_confirms(self):
        booking = make_booking(self.user)
        result = self.service.confirm_payment(booking.id, payment_id='pi_1', payment_status=PaymentStatus.COMPLETED)

        self.assertTrue(result['success'])
        booking.refresh_from_db()
        self.assertEqual(booking.status, BookingStatus.CONFIRMED)
        self.assertEqual(booking.payment_status, PaymentStatus.COMPLETED)
        self.assertEqual(booking.payment_id, 'pi_1')

    def test_cash_on_delivery_confirms_with_pending_payment(self):
        booking = make_booking(self.user)
        self.service.confirm_payment(booking.booking_number, payment_method=PaymentMethod.COD)

        booking.refresh_from_db()
        self.assertEqual(booking.status, BookingStatus.CONFIRMED)
        self.assertEqual(booking.payment_status, PaymentStatus.PENDING)
        self.assertEqual(booking.payment_method, PaymentMethod.COD)

    def test_repeat_confirmation_has_no_side_effects(self):
        booking = make_booking(self.user)
        first = self.service.confirm_payment(ByNumber(booking.booking_number), payment_id='pi_1', payment_method=PaymentMethod.ONLINE)
        events_after_first = len(self.notifier.events)
        emails_after_first = len(mail.outbox)

        second = self.service.confirm_payment(booking.id, payment_id='pi_1', payment_method=PaymentMethod.ONLINE)

        self.assertFalse(first['already_confirmed'])
        self.assertTrue(second['already_confirmed'])
        self.assertEqual(len(self.notifier.events), events_after_first)
        self.assertEqual(len(mail.outbox), emails_after_first)

    def test_cancelled_booking_rejected(self):
        booking = make_booking(self.user, status=BookingStatus.CANCELLED)
        result = self.service.confirm_payment(booking.id, payment_id='pi_1', payment_status=PaymentStatus.COMPLETED)
        self.assertEqual(result['kind'], 'conflict')
        self.assertEqual(result['current_status'], BookingStatus.CANCELLED)

    def test_payment_after_assignment_only_recorded(self):
        booking = make_booking(self.user, status=BookingStatus.ASSIGNED, driver=self.driver, payment_status=PaymentStatus.PENDING)
        self.service.confirm_payment(booking.id, payment_id='pi_9', payment_status=PaymentStatus.COMPLETED)

        booking.refresh_from_db()
        self.assertEqual(booking.status, BookingStatus.ASSIGNED)
        self.assertEqual(booking.payment_status, PaymentStatus.COMPLETED)
        self.assertEqual(booking.payment_id, 'pi_9')

    def test_unknown_booking(self):
        result = self.service.confirm_payment('CB000000XXXX', payment_status=PaymentStatus.COMPLETED)
        self.assertEqual(result['kind'], 'not_found')

    def test_rider_can_only_choose_cash_on_delivery(self):
        booking = make_booking(self.user)

        for payment in ({'payment_id': 'made_up', 'payment_status': PaymentStatus.COMPLETED},
                        {'payment_id': 'made_up', 'payment_method': PaymentMethod.ONLINE},
                        {'payment_method': PaymentMethod.COD, 'payment_status': PaymentStatus.COMPLETED}):
            result = self.service.update_payment(booking.id, self.user, **payment)
            self.assertEqual(result['kind'], 'forbidden', payment)

        booking.refresh_from_db()
        self.assertEqual(booking.status, BookingStatus.PENDING)
        self.assertEqual(booking.payment_status, PaymentStatus.PENDING)

        result = self.service.update_payment(booking.id, self.user, payment_method=PaymentMethod.COD)
        self.assertTrue(result['success'], result)
        booking.refresh_from_db()
        self.assertEqual(booking.status, BookingStatus.CONFIRMED)
        self.assertEqual(booking.payment_method, PaymentMethod.COD)

    def test_admin_can_mark_payment_completed(self):
        booking = make_booking(self.user)
        result = self.service.update_payment(booking.id, self.admin, payment_id='bank_ref_9',
                                             payment_status=PaymentStatus.COMPLETED)

        self.assertTrue(result['success'], result)
        booking.refresh_from_db()
        self.assertEqual(booking.payment_status, PaymentStatus.COMPLETED)
        self.assertEqual(booking.payment_id, 'bank_ref_9')

    def test_stranger_cannot_update_payment(self):
        booking = make_booking(self.user)
        result = self.service.update_payment(booking.id, make_user('stranger'), payment_method=PaymentMethod.COD)
        self.assertEqual(result['kind'], 'forbidden')

    def test_verify_payment_signature(self):
        booking = make_booking(self.user)
        with mock.patch.object(self.gateway, 'verify_signature', return_value=False):
            rejected = self.service.verify_payment(booking.id, 'order_1', 'pay_1', 'bad')
        self.assertEqual(rejected['kind'], 'validation_error')

        with mock.patch.object(self.gateway, 'verify_signature', return_value=True):
            accepted = self.service.verify_payment(booking.id, 'order_1', 'pay_1', 'good')
        self.assertTrue(accepted['success'])
        booking.refresh_from_db()
        self.assertEqual(booking.status, BookingStatus.CONFIRMED)
        self.assertEqual(booking.payment_id, 'pay_1')


class AssignDriverTest(BookingServiceTestBase):
    def test_assignment(self):
        booking = make_booking(self.user, status=BookingStatus.CONFIRMED)
        result = self.service.assign_driver(booking.id, self.driver.id, self.admin)

        self.assertTrue(result['success'], result)
        booking.refresh_from_db()
        self.driver.refresh_from_db()
        self.assertEqual(booking.status, BookingStatus.ASSIGNED)
        self.assertEqual(booking.driver_id, self.driver.id)
        self.assertIsNotNone(booking.assigned_at)
        self.assertFalse(self.driver.is_available)
        self.assertEqual(self.driver.current_booking_id, booking.id)
        self.assertCountEqual(
            self.notifier.rooms_for(RealtimeEvents.DRIVER_ASSIGNED),
            [f'driver_{self.driver.id}', f'user_{self.user.id}', 'admin'],
        )
        self.assertDriverInvariant(booking)

    def test_only_admin_can_assign(self):
        booking = make_booking(self.user, status=BookingStatus.CONFIRMED)
        result = self.service.assign_driver(booking.id, self.driver.id, self.user)
        self.assertEqual(result['kind'], 'forbidden')

    def test_booking_must_be_confirmed(self):
        booking = make_booking(self.user)
        result = self.service.assign_driver(booking.id, self.driver.id, self.admin)
        self.assertEqual(result['kind'], 'conflict')
        self.assertEqual(result['current_status'], BookingStatus.PENDING)

    def test_unknown_driver(self):
        booking = make_booking(self.user, status=BookingStatus.CONFIRMED)
        result = self.service.assign_driver(booking.id, 99999, self.admin)
        self.assertEqual(result['kind'], 'not_found')
        booking.refresh_from_db()
        self.assertEqual(booking.status, BookingStatus.CONFIRMED)

    def test_unavailable_flag_only_warns(self):
        Driver.objects.filter(pk=self.driver.pk).update(is_available=False)
        booking = make_booking(self.user, status=BookingStatus.CONFIRMED)

        with self.assertLogs('cabride_main_app.services.booking_service', level='WARNING'):
            result = self.service.assign_driver(booking.id, self.driver.id, self.admin)
        self.assertTrue(result['success'])

    def test_driver_on_another_live_booking_rejected(self):
        make_booking(self.user, status=BookingStatus.IN_PROGRESS, driver=self.driver)
        booking = make_booking(self.user, status=BookingStatus.CONFIRMED)

        result = self.service.assign_driver(booking.id, self.driver.id, self.admin)
        self.assertEqual(result['kind'], 'conflict')
        booking.refresh_from_db()
        self.assertEqual(booking.status, BookingStatus.CONFIRMED)
        self.assertIsNone(booking.driver_id)

    def test_stale_reference_repaired_before_assignment(self):
        old = make_booking(self.user, status=BookingStatus.ASSIGNED, driver=self.driver)
        Booking.objects.filter(pk=old.pk).update(status=BookingStatus.CANCELLED, driver=None)
        booking = make_booking(self.user, status=BookingStatus.CONFIRMED)

        result = self.service.assign_driver(booking.id, self.driver.id, self.admin)
        self.assertTrue(result['success'], result)
        self.driver.refresh_from_db()
        self.assertEqual(self.driver.current_booking_id, booking.id)

    def test_placeholder_summary_for_sparse_driver(self):
        sparse = Driver.objects.create(license_number='LICX', vehicle_number='GJ01XX0001')
        booking = make_booking(self.user, status=BookingStatus.CONFIRMED)

        result = self.service.assign_driver(booking.id, sparse.id, self.admin)
        self.assertTrue(result['success'])
        self.assertEqual(result['driver']['name'], 'Unknown Driver')
        self.assertEqual(result['driver']['phone'], 'N/A')
        self.assertEqual(result['driver']['vehicle_model'], 'Standard Vehicle')


class TripLifecycleTest(BookingServiceTestBase):
    def test_start_then_complete(self):
        booking = make_booking(self.user, status=BookingStatus.ASSIGNED, driver=self.driver)
        rides_before = self.driver.total_rides

        started = self.service.start_trip(booking.id, self.driver.user)
        self.assertTrue(started['success'], started)
        booking.refresh_from_db()
        self.assertEqual(booking.status, BookingStatus.IN_PROGRESS)
        self.assertIsNotNone(booking.started_at)
        self.assertDriverInvariant(booking)

        completed = self.service.complete_trip(booking.booking_number, self.driver.user)
        self.assertTrue(completed['success'], completed)
        booking.refresh_from_db()
        self.driver.refresh_from_db()
        self.assertEqual(booking.status, BookingStatus.COMPLETED)
        self.assertIsNotNone(booking.completed_at)
        self.assertEqual(booking.driver_id, self.driver.id)
        self.assertTrue(self.driver.is_available)
        self.assertIsNone(self.driver.current_booking_id)
        self.assertEqual(self.driver.total_rides, rides_before + 1)
        self.assertIn(f'driver_{self.driver.id}', self.notifier.rooms_for(RealtimeEvents.RIDE_COMPLETED))
        self.assertDriverInvariant(booking)

    def test_start_rejected_for_every_other_status(self):
        for status in (BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS,
                       BookingStatus.COMPLETED, BookingStatus.CANCELLED):
            with self.subTest(status=status):
                driver = self.driver if status in BookingStatus.WITH_DRIVER else None
                booking = make_booking(self.user, status=status, driver=driver)
                result = self.service.start_trip(booking.id, self.driver.user)
                self.assertFalse(result['success'])
                self.assertEqual(result['kind'], 'conflict')
                self.assertEqual(result['current_status'], status)

    def test_only_assigned_driver_can_start(self):
        booking = make_booking(self.user, status=BookingStatus.ASSIGNED, driver=self.driver)
        other = make_driver()
        result = self.service.start_trip(booking.id, other.user)
        self.assertEqual(result['kind'], 'forbidden')

    def test_rider_cannot_start(self):
        booking = make_booking(self.user, status=BookingStatus.ASSIGNED, driver=self.driver)
        result = self.service.start_trip(booking.id, self.user)
        self.assertEqual(result['kind'], 'forbidden')

    def test_complete_requires_in_progress(self):
        booking = make_booking(self.user, status=BookingStatus.ASSIGNED, driver=self.driver)
        result = self.service.complete_trip(booking.id, self.driver.user)
        self.assertEqual(result['kind'], 'conflict')
        self.assertEqual(result['current_status'], BookingStatus.ASSIGNED)


class CancelBookingTest(BookingServiceTestBase):
    def test_cancel_from_each_live_status(self):
        for status in BookingStatus.CANCELLABLE:
            with self.subTest(status=status):
                driver = make_driver() if status in BookingStatus.DRIVER_OCCUPIED else None
                booking = make_booking(self.user, status=status, driver=driver)

                result = self.service.cancel_booking(booking.id, self.user, 'Plans changed')
                self.assertTrue(result['success'], result)
                booking.refresh_from_db()
                self.assertEqual(booking.status, BookingStatus.CANCELLED)
                self.assertEqual(booking.cancellation_reason, 'Plans changed')
                self.assertDriverInvariant(booking)
                if driver is not None:
                    driver.refresh_from_db()
                    self.assertTrue(driver.is_available)
                    self.assertIsNone(driver.current_booking_id)

    def test_cancel_assigned_frees_driver(self):
        booking = make_booking(self.user, status=BookingStatus.ASSIGNED, driver=self.driver)
        self.service.cancel_booking(booking.id, self.user)

        self.driver.refresh_from_db()
        self.assertTrue(self.driver.is_available)
        self.assertIsNone(self.driver.current_booking_id)
        self.assertIn(f'driver_{self.driver.id}', self.notifier.rooms_for(RealtimeEvents.RIDE_CANCELLED))

    def test_cancel_pending_leaves_drivers_alone(self):
        booking = make_booking(self.user)
        before = Driver.objects.get(pk=self.driver.pk).updated_at

        self.service.cancel_booking(booking.id, self.user)

        self.assertEqual(Driver.objects.get(pk=self.driver.pk).updated_at, before)

    def test_completed_booking_cannot_be_cancelled(self):
        booking = make_booking(self.user, status=BookingStatus.COMPLETED, driver=self.driver)
        result = self.service.cancel_booking(booking.id, self.user)
        self.assertEqual(result['kind'], 'conflict')
        self.assertEqual(result['current_status'], BookingStatus.COMPLETED)

    def test_cancelled_booking_cannot_be_cancelled_again(self):
        booking = make_booking(self.user, status=BookingStatus.CANCELLED)
        result = self.service.cancel_booking(booking.id, self.user)
        self.assertEqual(result['kind'], 'conflict')

    def test_admin_can_cancel_others_booking(self):
        booking = make_booking(self.user, status=BookingStatus.CONFIRMED)
        self.assertTrue(self.service.cancel_booking(booking.id, self.admin)['success'])

    def test_stranger_cannot_cancel(self):
        booking = make_booking(self.user)
        result = self.service.cancel_booking(booking.id, make_user('stranger'))
        self.assertEqual(result['kind'], 'forbidden')


class ForceStatusTest(BookingServiceTestBase):
    def test_admin_override_skips_coupling(self):
        booking = make_booking(self.user, status=BookingStatus.ASSIGNED, driver=self.driver)

        with self.assertLogs('cabride_main_app.services.booking_service', level='WARNING'):
            result = self.service.force_status(booking.id, BookingStatus.CANCELLED, self.admin)

        self.assertTrue(result['success'])
        self.driver.refresh_from_db()
        self.assertFalse(self.driver.is_available)
        self.assertEqual(self.driver.current_booking_id, booking.id)

    def test_invalid_status(self):
        booking = make_booking(self.user)
        result = self.service.force_status(booking.id, 'teleported', self.admin)
        self.assertEqual(result['kind'], 'validation_error')

    def test_non_admin_rejected(self):
        booking = make_booking(self.user)
        result = self.service.force_status(booking.id, BookingStatus.CONFIRMED, self.user)
        self.assertEqual(result['kind'], 'forbidden')


class SideEffectFailureTest(BookingServiceTestBase):
    def test_failing_channels_do_not_fail_transition(self):
        service = BookingService(notifications=NotificationService(FailingNotifier(), FailingEmailSender()))
        booking = make_booking(self.user, status=BookingStatus.CONFIRMED)

        result = service.assign_driver(booking.id, self.driver.id, self.admin)

        self.assertTrue(result['success'])
        booking.refresh_from_db()
        self.assertEqual(booking.status, BookingStatus.ASSIGNED)


class BookingNumberTest(TestCase):
    def test_generated_number_shape(self):
        number = generate_booking_number()
        self.assertEqual(len(number), 12)
        self.assertTrue(number.startswith('CB'))
        self.assertTrue(number[2:8].isdigit())
