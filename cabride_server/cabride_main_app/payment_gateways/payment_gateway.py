import hashlib
import hmac
from abc import ABC, abstractmethod

from django.conf import settings


class PaymentGateway(ABC):
    @abstractmethod
    def create_order(self, amount, currency, reference, customer_email=None):
        """Returns a dict with at least order_id"""
        pass

    @abstractmethod
    def refund(self, payment_id, amount, idempotency_key=None):
        """Returns a dict with refund_id and status; a repeated idempotency_key returns the original refund"""
        pass

    def verify_signature(self, order_id, payment_id, signature):
        """HMAC-SHA256 of "<order_id>|<payment_id>" with the shared payment secret"""
        secret = settings.PAYMENT_SIGNATURE_SECRET
        if not secret or not signature:
            return False
        expected = hmac.new(
            secret.encode(),
            f'{order_id}|{payment_id}'.encode(),
            hashlib.sha256,
        ).hexdigest()
        return hmac.compare_digest(expected, str(signature))
