from decimal import Decimal, ROUND_HALF_UP

import stripe
from django.conf import settings

from .payment_gateway import PaymentGateway


def to_minor_units(amount):
    return int((Decimal(str(amount)) * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


class StripePaymentGateway(PaymentGateway):
    SUCCESSFUL_REFUND_STATUSES = ('succeeded', 'pending')

    def __init__(self):
        stripe.api_key = settings.STRIPE_SECRET_KEY

    def create_order(self, amount, currency, reference, customer_email=None):
        session = stripe.checkout.Session.create(
            payment_method_types=['card'],
            line_items=[
                {
                    'price_data': {
                        'currency': currency,
                        'unit_amount': to_minor_units(amount),
                        'product_data': {
                            'name': f'Booking {reference}',
                        },
                    },
                    'quantity': 1,
                }
            ],
            mode='payment',
            metadata={'booking_number': reference},
            success_url=settings.PAYMENT_SUCCESS_URL,
            cancel_url=settings.PAYMENT_CANCEL_URL,
            customer_email=customer_email,
        )
        return {
            'order_id': session.id,
            'payment_url': session.url,
            'amount': str(amount),
            'currency': currency,
            'reference': reference,
        }

    def refund(self, payment_id, amount, idempotency_key=None):
        refund = stripe.Refund.create(
            payment_intent=payment_id,
            amount=to_minor_units(amount),
            idempotency_key=idempotency_key,
        )
        return {
            'refund_id': refund.id,
            'status': refund.status,
            'success': refund.status in self.SUCCESSFUL_REFUND_STATUSES,
        }

    def construct_webhook_event(self, payload, sig_header):
        return stripe.Webhook.construct_event(payload, sig_header, settings.STRIPE_WEBHOOK_SECRET)
