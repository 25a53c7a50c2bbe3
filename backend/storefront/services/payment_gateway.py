"""
Razorpay gateway client

Thin wrapper over the razorpay SDK plus the HMAC checks used for
checkout callbacks and webhooks. Amounts cross this boundary in rupees
and are converted to paise here.

Author: Taksha Engineering
Date: 2025-10-17
"""
import hmac
import hashlib
import logging
from decimal import Decimal
from typing import Dict, Optional

import razorpay

from storefront.core.config import settings
from storefront.core.exceptions import GatewayError

logger = logging.getLogger(__name__)


def to_paise(amount) -> int:
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1")))


def _hmac_sha256(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def verify_payment_signature(order_id: str, payment_id: str, signature: str, secret: Optional[str] = None) -> bool:
    """
    Check the checkout signature: HMAC-SHA256(key_secret, "order_id|payment_id")

    Compared in constant time.
    """
    expected = _hmac_sha256(secret or settings.RAZORPAY_KEY_SECRET, f"{order_id}|{payment_id}".encode())
    return hmac.compare_digest(expected, signature or "")


def verify_webhook_signature(body: bytes, signature: Optional[str], secret: Optional[str] = None) -> bool:
    """Check X-Razorpay-Signature: HMAC-SHA256 of the raw body with the webhook secret"""
    if not signature:
        return False
    expected = _hmac_sha256(secret or settings.RAZORPAY_WEBHOOK_SECRET, body)
    return hmac.compare_digest(expected, signature)


class RazorpayGateway:
    """
    Razorpay API calls used by checkout and refunds

    The SDK client is created on first use so the app starts without keys.
    """

    def __init__(self, key_id: Optional[str] = None, key_secret: Optional[str] = None):
        self.key_id = key_id or settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret or settings.RAZORPAY_KEY_SECRET
        self._client = None

    @property
    def client(self) -> razorpay.Client:
        if self._client is None:
            if not self.key_id or not self.key_secret:
                raise GatewayError("configuration", "Razorpay keys are not configured")
            self._client = razorpay.Client(auth=(self.key_id, self.key_secret))
        return self._client

    def _call(self, operation: str, func) -> Dict:
        try:
            return func()
        except GatewayError:
            raise
        except Exception as e:
            logger.error(f"Razorpay {operation} error: {str(e)}")
            raise GatewayError(operation, str(e)) from e

    def create_order(self, amount, currency: str, receipt: str, notes: Optional[Dict] = None) -> Dict:
        """Create a gateway order; `amount` is in rupees"""
        payload = {
            "amount": to_paise(amount),
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        }
        order = self._call("order creation", lambda: self.client.order.create(payload))
        logger.info(f"Razorpay order {order['id']} created for receipt {receipt}")
        return order

    def fetch_payment(self, payment_id: str) -> Dict:
        return self._call("payment fetch", lambda: self.client.payment.fetch(payment_id))

    def refund_payment(self, payment_id: str, amount=None, notes: Optional[Dict] = None) -> Dict:
        """Refund a captured payment; full refund when `amount` is None"""
        payload = {"notes": notes or {}}
        if amount is not None:
            payload["amount"] = to_paise(amount)
        refund = self._call("refund", lambda: self.client.payment.refund(payment_id, payload))
        logger.info(f"Razorpay refund {refund.get('id')} created for payment {payment_id}")
        return refund

    def fetch_refund(self, refund_id: str) -> Dict:
        return self._call("refund fetch", lambda: self.client.refund.fetch(refund_id))
