"""Payment service - orchestrates the payment gateway for bookings"""
import logging

from django.conf import settings

from ..utils.constants import BookingStatus, PaymentMethod, PaymentStatus
from ..utils.errors import service_result, Conflict, DependencyFailure, Forbidden
from ..utils.identity import is_admin
from ..utils.lookups import ByNumber
from ..utils.side_effects import bounded_call
from .booking_service import BookingService, load_booking

logger = logging.getLogger(__name__)


class PaymentService:
    """Service for payment operations"""

    def __init__(self, gateway=None, bookings=None):
        self._gateway = gateway
        self.bookings = bookings or BookingService(gateway=gateway)

    @property
    def gateway(self):
        if self._gateway is None:
            from ..payment_gateways.stripe_payment_gateway import StripePaymentGateway
            self._gateway = StripePaymentGateway()
        return self._gateway

    @service_result
    def create_order(self, lookup, actor):
        """Open a gateway order for the full amount of a pending booking"""
        booking = load_booking(lookup)
        if booking.user_id != actor.id and not is_admin(actor):
            raise Forbidden('Not allowed to pay for this booking')
        if booking.status != BookingStatus.PENDING:
            raise Conflict(f'Booking is {booking.status}, payment is only taken for pending bookings',
                           current_status=booking.status)

        try:
            order = bounded_call(
                self.gateway.create_order,
                booking.total_amount,
                settings.PAYMENT_CURRENCY,
                booking.booking_number,
                customer_email=booking.passenger_email,
                timeout=settings.PAYMENT_GATEWAY_TIMEOUT,
            )
        except Exception as e:
            logger.error(f'[PAYMENT] Order creation failed for {booking.booking_number}: {e}')
            raise DependencyFailure(f'Could not create payment order: {e}')

        logger.info(f'[PAYMENT] Order {order.get("order_id")} created for {booking.booking_number}')
        return {'booking': booking, 'order': order}

    def handle_checkout_completed(self, session):
        """Confirm the booking referenced by a completed checkout session"""
        booking_number = (session.get('metadata') or {}).get('booking_number')
        if not booking_number:
            logger.warning(f'[PAYMENT] Checkout session {session.get("id")} has no booking reference')
            return None
        return self.bookings.confirm_payment(
            ByNumber(booking_number),
            payment_id=session.get('payment_intent') or session.get('id'),
            payment_status=PaymentStatus.COMPLETED,
            payment_method=PaymentMethod.ONLINE,
        )
