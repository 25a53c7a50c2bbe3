"""
Unit tests for the Razorpay gateway wrapper and signature checks

Author: Taksha Engineering
Date: 2025-10-17
"""
import hashlib
import hmac
import pytest
from decimal import Decimal
from unittest.mock import MagicMock, patch

from storefront.core.exceptions import GatewayError
from storefront.services.payment_gateway import (
    RazorpayGateway,
    to_paise,
    verify_payment_signature,
    verify_webhook_signature,
)


def _sign(secret, message):
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


class TestSignatures:

    def test_valid_checkout_signature(self):
        signature = _sign("secret", b"order_1|pay_1")
        assert verify_payment_signature("order_1", "pay_1", signature, secret="secret")

    def test_signature_binds_order_and_payment(self):
        signature = _sign("secret", b"order_1|pay_1")
        assert not verify_payment_signature("order_2", "pay_1", signature, secret="secret")
        assert not verify_payment_signature("order_1", "pay_1", signature, secret="other")

    def test_empty_signature_rejected(self):
        assert not verify_payment_signature("order_1", "pay_1", "", secret="secret")

    def test_webhook_signature_over_raw_body(self):
        body = b'{"event":"payment.captured"}'
        signature = _sign("whsec", body)

        assert verify_webhook_signature(body, signature, secret="whsec")
        assert not verify_webhook_signature(body + b" ", signature, secret="whsec")
        assert not verify_webhook_signature(body, None, secret="whsec")


class TestRazorpayGateway:

    @pytest.mark.parametrize("amount,paise", [(944, 94400), (Decimal("99.99"), 9999), (0.5, 50)])
    def test_to_paise(self, amount, paise):
        assert to_paise(amount) == paise

    def test_missing_keys(self):
        gateway = RazorpayGateway(key_id="", key_secret="")
        gateway.key_id = ""
        gateway.key_secret = ""

        with pytest.raises(GatewayError) as exc_info:
            gateway.fetch_payment("pay_1")
        assert exc_info.value.message == "Payment gateway configuration failed: Razorpay keys are not configured"

    @patch('storefront.services.payment_gateway.razorpay.Client')
    def test_create_order_in_paise(self, mock_client_class):
        # Arrange
        client = mock_client_class.return_value
        client.order.create.return_value = {"id": "order_rzp_1"}
        gateway = RazorpayGateway(key_id="rzp_test", key_secret="secret")

        # Act
        order = gateway.create_order(Decimal("944.00"), "INR", receipt="TK1", notes={"order_id": "101"})

        # Assert
        assert order == {"id": "order_rzp_1"}
        mock_client_class.assert_called_once_with(auth=("rzp_test", "secret"))
        client.order.create.assert_called_once_with({
            "amount": 94400,
            "currency": "INR",
            "receipt": "TK1",
            "notes": {"order_id": "101"},
        })

    @patch('storefront.services.payment_gateway.razorpay.Client')
    def test_full_refund_omits_amount(self, mock_client_class):
        client = mock_client_class.return_value
        client.payment.refund.return_value = {"id": "rfnd_1"}
        gateway = RazorpayGateway(key_id="rzp_test", key_secret="secret")

        gateway.refund_payment("pay_1", notes={"reason": "Damaged"})

        client.payment.refund.assert_called_once_with("pay_1", {"notes": {"reason": "Damaged"}})

    @patch('storefront.services.payment_gateway.razorpay.Client')
    def test_sdk_errors_become_gateway_errors(self, mock_client_class):
        mock_client_class.return_value.refund.fetch.side_effect = RuntimeError("timeout")
        gateway = RazorpayGateway(key_id="rzp_test", key_secret="secret")

        with pytest.raises(GatewayError) as exc_info:
            gateway.fetch_refund("rfnd_1")

        assert exc_info.value.status_code == 502
        assert exc_info.value.details == {"operation": "refund fetch", "reason": "timeout"}

    def test_injected_client_is_used(self):
        gateway = RazorpayGateway(key_id="rzp_test", key_secret="secret")
        gateway._client = MagicMock()
        gateway._client.payment.fetch.return_value = {"id": "pay_1", "status": "captured"}

        assert gateway.fetch_payment("pay_1")["status"] == "captured"
