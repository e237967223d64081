"""Refund service - refunds against the payment gateway before a driver is committed"""
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from ..utils.constants import BookingStatus, BusinessRules, PaymentStatus, RefundStatus
from ..utils.errors import service_result, Conflict, DependencyFailure, Forbidden, ValidationFailed
from ..utils.identity import is_admin
from ..utils.side_effects import bounded_call
from .booking_service import load_booking
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


def _check_owner_or_admin(booking, actor):
    if booking.user_id != actor.id and not is_admin(actor):
        raise Forbidden('Not allowed to access refunds for this booking')


class RefundService:
    def __init__(self, gateway=None, notifications=None):
        self._gateway = gateway
        self.notifications = notifications or NotificationService()

    @property
    def gateway(self):
        if self._gateway is None:
            from ..payment_gateways.stripe_payment_gateway import StripePaymentGateway
            self._gateway = StripePaymentGateway()
        return self._gateway

    def _submit(self, booking, payment_id, amount):
        """Gateway refund within the configured timeout; returns (result, error)"""
        try:
            result = bounded_call(
                self.gateway.refund, payment_id, amount,
                idempotency_key=f'refund-{booking.booking_number}',
                timeout=settings.PAYMENT_GATEWAY_TIMEOUT,
            )
        except Exception as e:
            return None, str(e) or e.__class__.__name__
        if not result.get('success', True) or not result.get('refund_id'):
            return None, f'Gateway reported refund status {result.get("status")}'
        return result, None

    @service_result
    def process_refund(self, lookup, actor, payment_id=None, reason=None):
        """
        Refund the full booking amount and cancel the booking

        The booking is cancelled only when the gateway accepts the refund; a
        failed or timed-out refund is recorded and the booking stays as it was.
        """
        with transaction.atomic():
            booking = load_booking(lookup, for_update=True)
            _check_owner_or_admin(booking, actor)

            if booking.status in BookingStatus.WITH_DRIVER:
                raise Conflict(
                    'Refund not allowed: a driver is already committed or the trip has finished',
                    current_status=booking.status,
                )
            if booking.refund_status == RefundStatus.PROCESSED:
                raise Conflict('Refund already processed for this booking', current_status=booking.status)
            if booking.payment_status != PaymentStatus.COMPLETED:
                raise Conflict('No completed payment to refund', current_status=booking.status)

            payment_id = payment_id or booking.payment_id
            if not payment_id:
                raise ValidationFailed('Payment reference is required for a refund')

            amount = booking.total_amount
            result, error = self._submit(booking, payment_id, amount)

            if error:
                booking.refund_status = RefundStatus.FAILED
                booking.save(update_fields=['refund_status', 'updated_at'])
            else:
                now = timezone.now()
                booking.status = BookingStatus.CANCELLED
                booking.cancelled_at = booking.cancelled_at or now
                booking.refund_status = RefundStatus.PROCESSED
                booking.refund_id = result['refund_id']
                booking.refund_amount = amount
                booking.refund_processed_at = now
                booking.cancellation_reason = reason or BusinessRules.DEFAULT_REFUND_REASON
                booking.save(update_fields=[
                    'status', 'cancelled_at', 'refund_status', 'refund_id', 'refund_amount',
                    'refund_processed_at', 'cancellation_reason', 'updated_at',
                ])

        if error:
            logger.error(f'[REFUND] Refund for {booking.booking_number} failed: {error}')
            raise DependencyFailure(f'Refund failed: {error}', refund_status=RefundStatus.FAILED)

        logger.info(f'[REFUND] Refunded {amount} for {booking.booking_number} (refund {booking.refund_id})')
        self.notifications.refund_processed(booking)
        return {
            'booking': booking,
            'refund_id': booking.refund_id,
            'refund_amount': booking.refund_amount,
            'refund_status': booking.refund_status,
        }

    @service_result
    def refund_status(self, lookup, actor):
        booking = load_booking(lookup)
        _check_owner_or_admin(booking, actor)
        return {
            'booking_number': booking.booking_number,
            'refund_status': booking.refund_status or RefundStatus.NONE,
            'refund_id': booking.refund_id,
            'refund_amount': booking.refund_amount,
            'refund_processed_at': booking.refund_processed_at,
        }
