"""Notification service - passenger emails and realtime events on booking changes"""
import logging
from abc import ABC, abstractmethod

import requests
from django.conf import settings
from django.core.mail import send_mail

from ..utils.constants import BusinessRules, RealtimeEvents, BookingStatus
from ..utils.side_effects import best_effort

logger = logging.getLogger(__name__)


def user_room(user_id):
    return f'user_{user_id}'


def driver_room(driver_id):
    return f'driver_{driver_id}'


ADMIN_ROOM = BusinessRules.ADMIN_ROOM


class RealtimeNotifier(ABC):
    @abstractmethod
    def emit(self, room, event, payload):
        pass


class HttpRealtimeNotifier(RealtimeNotifier):
    """Relays events to the socket gateway over HTTP"""

    def __init__(self, base_url, token=None, timeout=None):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout or settings.REALTIME_TIMEOUT

    def emit(self, room, event, payload):
        headers = {'Authorization': f'Bearer {self.token}'} if self.token else {}
        response = requests.post(
            f'{self.base_url}/emit',
            json={'room': room, 'event': event, 'payload': payload},
            headers=headers,
            timeout=self.timeout,
        )
        response.raise_for_status()


class LoggingRealtimeNotifier(RealtimeNotifier):
    """Used when no realtime gateway is configured"""

    def emit(self, room, event, payload):
        logger.debug(f'[REALTIME] {event} -> {room}: {payload}')


def get_realtime_notifier():
    if settings.REALTIME_GATEWAY_URL:
        return HttpRealtimeNotifier(settings.REALTIME_GATEWAY_URL, settings.REALTIME_GATEWAY_TOKEN)
    return LoggingRealtimeNotifier()


class EmailSender:
    def send(self, to_address, subject, body):
        send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [to_address], fail_silently=False)


STATUS_SUBJECTS = {
    BookingStatus.PENDING: 'Booking received',
    BookingStatus.CONFIRMED: 'Booking confirmed',
    BookingStatus.ASSIGNED: 'Driver assigned to your booking',
    BookingStatus.IN_PROGRESS: 'Your ride has started',
    BookingStatus.COMPLETED: 'Ride completed',
    BookingStatus.CANCELLED: 'Booking cancelled',
}


def booking_payload(booking, **extra):
    payload = {
        'booking_id': booking.id,
        'booking_number': booking.booking_number,
        'status': booking.status,
        'payment_status': booking.payment_status,
        'total_amount': str(booking.total_amount),
    }
    payload.update(extra)
    return payload


class NotificationService:
    """
    Fans booking events out to realtime rooms and passenger email.

    Every delivery goes through best_effort, so nothing here raises.
    Payloads are built on the caller's thread; only delivery is offloaded.
    """

    def __init__(self, notifier=None, email_sender=None):
        self.notifier = notifier or get_realtime_notifier()
        self.email_sender = email_sender or EmailSender()

    def emit(self, rooms, event, payload):
        delivered = 0
        for room in rooms:
            if best_effort(f'realtime {event} -> {room}', self.notifier.emit, room, event, payload,
                           timeout=settings.REALTIME_TIMEOUT):
                delivered += 1
        return delivered

    def send_email(self, to_address, subject, body):
        if not to_address:
            logger.info(f'[EMAIL] No recipient for "{subject}", skipping')
            return False
        return best_effort(f'email "{subject}" to {to_address}', self.email_sender.send, to_address, subject, body,
                           timeout=settings.EMAIL_TIMEOUT)

    def _booking_rooms(self, booking, driver_id=None):
        rooms = [user_room(booking.user_id), ADMIN_ROOM]
        driver_id = driver_id or booking.driver_id
        if driver_id:
            rooms.insert(0, driver_room(driver_id))
        return rooms

    def email_status(self, booking, message=None):
        subject = f'{STATUS_SUBJECTS.get(booking.status, "Booking update")} - {booking.booking_number}'
        lines = [
            f'Dear {booking.passenger_name},',
            '',
            message or f'Your booking {booking.booking_number} is now {booking.get_status_display().lower()}.',
            '',
            f'Pickup: {booking.pickup_address} on {booking.pickup_date} at {booking.pickup_time}',
            f'Drop: {booking.drop_address}',
            f'Total amount: {booking.total_amount}',
        ]
        return self.send_email(booking.passenger_email, subject, '\n'.join(lines))

    def booking_created(self, booking):
        self.email_status(booking, f'We have received your booking {booking.booking_number}.')
        self.emit(self._booking_rooms(booking), RealtimeEvents.BOOKING_STATUS_CHANGED, booking_payload(booking))

    def booking_status_changed(self, booking, previous_status=None):
        self.email_status(booking)
        self.emit(self._booking_rooms(booking), RealtimeEvents.BOOKING_STATUS_CHANGED,
                  booking_payload(booking, previous_status=previous_status))

    def driver_assigned(self, booking, driver_summary):
        self.email_status(booking, (
            f'{driver_summary["name"]} will drive you in a {driver_summary["vehicle_model"]} '
            f'({driver_summary["vehicle_number"]}). Contact: {driver_summary["phone"]}.'
        ))
        self.emit(self._booking_rooms(booking, driver_summary['id']), RealtimeEvents.DRIVER_ASSIGNED,
                  booking_payload(booking, driver=driver_summary))

    def ride_completed(self, booking):
        self.email_status(booking, f'Thank you for riding with us. Your booking {booking.booking_number} is complete.')
        self.emit(self._booking_rooms(booking), RealtimeEvents.RIDE_COMPLETED, booking_payload(booking))

    def ride_cancelled(self, booking, previous_driver_id=None):
        reason = booking.cancellation_reason or 'No reason given'
        self.email_status(booking, f'Your booking {booking.booking_number} has been cancelled. Reason: {reason}.')
        self.emit(self._booking_rooms(booking, previous_driver_id), RealtimeEvents.RIDE_CANCELLED,
                  booking_payload(booking, reason=reason))

    def refund_processed(self, booking):
        self.send_email(
            booking.passenger_email,
            f'Refund processed - {booking.booking_number}',
            (
                f'Dear {booking.passenger_name},\n\n'
                f'A refund of {booking.refund_amount} for booking {booking.booking_number} has been processed.\n'
                f'Refund reference: {booking.refund_id}'
            ),
        )
        self.emit([user_room(booking.user_id), ADMIN_ROOM], RealtimeEvents.REFUND_PROCESSED,
                  booking_payload(booking, refund_id=booking.refund_id, refund_amount=str(booking.refund_amount)))

    def rating_submitted(self, booking, rated_room, rating):
        self.emit([rated_room, ADMIN_ROOM], RealtimeEvents.RATING_SUBMITTED,
                  booking_payload(booking, rating=rating))
