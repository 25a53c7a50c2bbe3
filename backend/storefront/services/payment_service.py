"""
Payment Service
Checkout with Razorpay: order creation, signature verification, failures,
refunds and webhook events

Stock flow:
- create-order reserves the units
- a verified payment turns the reservation into a sale
- a failed or rejected payment releases the reservation

Author: Taksha Engineering
Date: 2025-10-17
"""
import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from storefront.core.config import settings
from storefront.core.exceptions import (
    NotFoundError,
    PaymentError,
    PermissionDeniedError,
    StoreError,
    ValidationError,
)
from storefront.domain.constants import money
from storefront.domain.coupon import get_coupon
from storefront.domain.order import (
    CouponInfo,
    Order,
    OrderItem,
    OrderNotes,
    PaymentInfo,
    RefundInfo,
    calculate_pricing,
)
from storefront.domain.payment import CreatePaymentOrder, PaymentFailure, RefundCreate, VerifyPayment
from storefront.repositories.cart_repository import CartRepository
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.services.order_service import stock_lines
from storefront.services.payment_gateway import (
    RazorpayGateway,
    verify_payment_signature,
    verify_webhook_signature,
)

logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE = Decimal("0.01")
MERCHANT_NAME = "Taksha Veda"
MERCHANT_DESCRIPTION = "Handcrafted Products"
REFUNDABLE_STATUSES = ("none", "requested", "approved")


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _order_brief(order: Order, **extra) -> Dict:
    brief = {
        "id": order.id,
        "order_number": order.order_number,
        "status": order.status,
        "total": float(order.pricing.total),
    }
    brief.update(extra)
    return brief


class PaymentService:
    """
    Service for the Razorpay checkout flow

    Handles:
    - Server-side pricing and amount check
    - Stock reservation and settlement
    - Gateway order, payment and refund calls
    - Idempotent webhook processing
    """

    def __init__(
        self,
        order_repo: Optional[OrderRepository] = None,
        product_repo: Optional[ProductRepository] = None,
        cart_repo: Optional[CartRepository] = None,
        gateway: Optional[RazorpayGateway] = None,
    ):
        self.order_repo = order_repo or OrderRepository()
        self.product_repo = product_repo or ProductRepository()
        self.cart_repo = cart_repo or CartRepository()
        self.gateway = gateway or RazorpayGateway()

    # =========================================================================
    # Checkout
    # =========================================================================

    def _build_items(self, request: CreatePaymentOrder) -> List[OrderItem]:
        items = []
        for line in request.items:
            product = self.product_repo.find_by_id(line.product_id)
            if not product:
                raise ValidationError(f"Product not found: {line.product_id}")
            product.ensure_purchasable()
            product.ensure_available(line.quantity)

            items.append(OrderItem(
                product_id=product.id,
                name=product.name,
                image=product.main_image,
                price=product.price,
                quantity=line.quantity,
                customization=line.customization,
                sku=product.sku,
                category=product.category,
                series=product.series,
            ))
        return items

    def _cart_discount(self, user_id: int, subtotal: Decimal) -> CouponInfo:
        """Coupon saved on the cart, if it still applies to this subtotal"""
        cart = self.cart_repo.get_or_create(user_id)
        if not cart.coupon_code:
            return CouponInfo()
        try:
            discount = get_coupon(cart.coupon_code).discount_for(subtotal)
        except ValidationError:
            logger.info(f"Cart coupon {cart.coupon_code} no longer applies for user {user_id}")
            return CouponInfo()
        return CouponInfo(code=cart.coupon_code, discount=discount)

    def create_order(self, user_id: int, request: CreatePaymentOrder) -> Dict:
        """
        Price the items server-side, reserve stock and open a gateway order

        Raises:
            ValidationError: Unknown/inactive product or "Amount mismatch"
            InsufficientStockError: Not enough available stock
            GatewayError: Razorpay rejected the order
        """
        items = self._build_items(request)

        subtotal = sum((item.line_total for item in items), Decimal("0"))
        threshold = Decimal(str(settings.FREE_SHIPPING_THRESHOLD))
        shipping = Decimal("0") if subtotal >= threshold else Decimal(str(settings.SHIPPING_FEE))
        coupon = self._cart_discount(user_id, subtotal)

        pricing = calculate_pricing(
            items,
            shipping=shipping,
            discount=coupon.discount,
            tax_rate=Decimal(str(settings.TAX_RATE)),
        )

        if abs(request.amount - pricing.total) > AMOUNT_TOLERANCE:
            raise ValidationError(
                "Amount mismatch",
                {"calculated": float(pricing.total), "provided": float(request.amount)},
            )

        order = Order(
            user_id=user_id,
            items=items,
            shipping_address=request.shipping_address,
            payment=PaymentInfo(
                method=request.payment_method,
                status="pending",
                amount=pricing.total,
                currency=request.currency,
            ),
            pricing=pricing,
            notes=OrderNotes(customer=request.notes),
            coupon=coupon,
        )
        order.add_tracking("pending", "Order placed, awaiting payment", updated_by=user_id)

        lines = stock_lines(order)
        self.product_repo.reserve_stock(lines)

        try:
            order = self.order_repo.create(order)
        except Exception:
            self.product_repo.release_stock(lines)
            raise

        try:
            gateway_order = self.gateway.create_order(
                order.pricing.total,
                request.currency,
                receipt=order.order_number,
                notes={"order_id": str(order.id), "user_id": str(user_id)},
            )
        except StoreError as e:
            order.mark_payment_failed(e.message)
            order.cancel("Payment gateway unavailable")
            self.order_repo.save(order)
            self.product_repo.release_stock(lines)
            raise

        order.payment.razorpay_order_id = gateway_order["id"]
        order = self.order_repo.save(order)
        logger.info(f"Order {order.order_number} created with Razorpay order {gateway_order['id']}")

        address = request.shipping_address
        return {
            "order_id": order.id,
            "order_number": order.order_number,
            "razorpay_order_id": gateway_order["id"],
            "amount": float(order.pricing.total),
            "currency": request.currency,
            "key": settings.RAZORPAY_KEY_ID,
            "name": MERCHANT_NAME,
            "description": MERCHANT_DESCRIPTION,
            "prefill": {
                "name": address.name,
                "email": address.email,
                "contact": address.phone,
            },
        }

    def _owned_order(self, order_id: int, user, message: str = "Unauthorized access to order") -> Order:
        order = self.order_repo.find_by_id(order_id)
        if not order:
            raise NotFoundError("Order")
        if order.user_id != user.id and not user.is_admin:
            raise PermissionDeniedError(message)
        return order

    def verify_payment(self, user, request: VerifyPayment) -> Dict:
        """
        Verify the checkout signature and settle the order

        Raises:
            PaymentError: Signature mismatch (the order is marked failed and
                its reservation released first)
        """
        order = self._owned_order(request.order_id, user)

        if order.is_paid:
            if order.payment.razorpay_payment_id == request.razorpay_payment_id:
                return _order_brief(order, paid_at=_iso(order.payment.paid_at))
            raise ValidationError("Order is already paid")

        gateway_order_id = order.payment.razorpay_order_id or request.razorpay_order_id
        valid = (
            gateway_order_id == request.razorpay_order_id
            and verify_payment_signature(
                gateway_order_id,
                request.razorpay_payment_id,
                request.razorpay_signature,
            )
        )

        if not valid:
            logger.warning(f"Invalid payment signature for order {order.order_number}")
            held_reservation = order.holds_reservation
            order.mark_payment_failed("Invalid signature", request.razorpay_payment_id)
            self.order_repo.save(order)
            if held_reservation:
                self.product_repo.release_stock(stock_lines(order))
            raise PaymentError("Payment verification failed")

        if order.status == "cancelled":
            order.record_late_payment(request.razorpay_payment_id, request.razorpay_signature)
            order = self.order_repo.save(order)
            logger.warning(f"Payment {request.razorpay_payment_id} verified for cancelled order {order.order_number}, refund required")
            return _order_brief(order, paid_at=_iso(order.payment.paid_at))

        order.mark_paid(request.razorpay_payment_id, request.razorpay_signature)
        order = self.order_repo.save(order)
        self.product_repo.commit_sale(stock_lines(order))
        self.cart_repo.clear(order.user_id)

        logger.info(f"Payment {request.razorpay_payment_id} verified for order {order.order_number}")
        return _order_brief(order, paid_at=_iso(order.payment.paid_at))

    def record_failure(self, user, request: PaymentFailure) -> Dict:
        """Client-reported failure: cancel the order and release its stock"""
        order = self._owned_order(request.order_id, user)

        if order.is_paid:
            raise ValidationError("Order is already paid")

        if order.payment.status != "failed" or order.status != "cancelled":
            held_reservation = order.holds_reservation
            order.mark_payment_failed(request.reason)
            if order.status != "cancelled":
                order.cancel("Payment failed", user.id)
                order.tracking[-1].message = f"Payment failed: {request.reason}"
            self.order_repo.save(order)
            if held_reservation:
                self.product_repo.release_stock(stock_lines(order))
            logger.info(f"Payment failure recorded for order {order.order_number}: {request.reason}")

        return _order_brief(order, failure_reason=order.payment.failure_reason)

    # =========================================================================
    # Payments and refunds
    # =========================================================================

    def _order_for_payment(self, payment_id: str, user, message: str) -> Order:
        order = self.order_repo.find_by_payment_id(payment_id)
        if not order:
            raise NotFoundError("Order", "Order not found for this payment")
        if order.user_id != user.id and not user.is_admin:
            raise PermissionDeniedError(message)
        return order

    def get_payment(self, user, payment_id: str) -> Dict:
        order = self._order_for_payment(payment_id, user, "Unauthorized access to payment details")
        payment = self.gateway.fetch_payment(payment_id)
        return {"payment": payment, "order": _order_brief(order)}

    def refund(self, user, request: RefundCreate) -> Dict:
        """
        Refund a paid order through the gateway

        Raises:
            ValidationError: Unpaid order, refund already processed, or
                amount above the order total
        """
        order = self._order_for_payment(request.payment_id, user, "Unauthorized access to refund")

        if not order.is_paid:
            raise ValidationError("Cannot refund unpaid order")
        if order.refund.status not in REFUNDABLE_STATUSES:
            raise ValidationError("Refund already processed for this order")

        amount = request.amount if request.amount is not None else order.pricing.total
        if amount > order.pricing.total:
            raise ValidationError("Refund amount cannot exceed order total")

        reason = request.reason or order.refund.reason or "Refund requested"
        refund = self.gateway.refund_payment(
            request.payment_id,
            request.amount,
            notes={"reason": reason, "order_id": str(order.id)},
        )

        order.refund = RefundInfo(
            status="processing",
            amount=money(amount),
            reason=reason,
            requested_at=order.refund.requested_at or datetime.now(timezone.utc),
            refund_id=refund["id"],
        )
        order.payment.status = "refunded"
        order.add_tracking(order.status, f"Refund initiated: {reason}", updated_by=user.id)
        order = self.order_repo.save(order)

        logger.info(f"Refund {refund['id']} initiated for order {order.order_number}")
        return {
            "refund": refund,
            "order": _order_brief(
                order,
                refund_status=order.refund.status,
                refund_amount=float(order.refund.amount),
            ),
        }

    def get_refund(self, user, refund_id: str) -> Dict:
        order = self.order_repo.find_by_refund_id(refund_id)
        if not order:
            raise NotFoundError("Order", "Order not found for this refund")
        if order.user_id != user.id and not user.is_admin:
            raise PermissionDeniedError("Unauthorized access to refund details")

        refund = self.gateway.fetch_refund(refund_id)
        return {"refund": refund, "order": _order_brief(order, refund_status=order.refund.status)}

    # =========================================================================
    # Webhooks
    # =========================================================================

    def handle_webhook(self, body: bytes, signature: Optional[str]) -> Dict:
        """
        Process a Razorpay webhook delivery

        Deliveries for an order already in the target state change nothing,
        so retries from Razorpay are safe.

        Raises:
            PaymentError: Signature missing or wrong
        """
        if not verify_webhook_signature(body, signature):
            logger.warning("Rejected webhook with invalid signature")
            raise PaymentError("Invalid webhook signature")

        try:
            event = json.loads(body)
        except ValueError:
            raise ValidationError("Invalid webhook payload")

        if not isinstance(event, dict) or not isinstance(event.get("payload", {}), dict):
            raise ValidationError("Invalid webhook payload")

        name = event.get("event")
        payload = event.get("payload", {})
        handlers = {
            "payment.captured": self._on_payment_captured,
            "payment.failed": self._on_payment_failed,
            "refund.processed": self._on_refund_processed,
        }

        handler = handlers.get(name)
        if not handler:
            logger.info(f"Unhandled webhook event: {name}")
            return {"received": True, "event": name, "handled": False}

        entity_key = "refund" if name.startswith("refund.") else "payment"
        wrapper = payload.get(entity_key, {})
        entity = wrapper.get("entity", {}) if isinstance(wrapper, dict) else None
        if not isinstance(entity, dict):
            raise ValidationError("Invalid webhook payload")
        changed = handler(entity)
        return {"received": True, "event": name, "handled": changed}

    def _on_payment_captured(self, payment: Dict) -> bool:
        order = self.order_repo.find_by_razorpay_order_id(payment.get("order_id"))
        if not order:
            logger.warning(f"payment.captured for unknown Razorpay order {payment.get('order_id')}")
            return False
        if order.is_paid:
            return False

        if order.status == "cancelled":
            order.record_late_payment(payment.get("id"))
            self.order_repo.save(order)
            logger.warning(f"Webhook captured payment {payment.get('id')} for cancelled order {order.order_number}, refund required")
            return True

        order.mark_paid(payment.get("id"))
        self.order_repo.save(order)
        self.product_repo.commit_sale(stock_lines(order))
        logger.info(f"Webhook captured payment {payment.get('id')} for order {order.order_number}")
        return True

    def _on_payment_failed(self, payment: Dict) -> bool:
        order = self.order_repo.find_by_razorpay_order_id(payment.get("order_id"))
        if not order:
            logger.warning(f"payment.failed for unknown Razorpay order {payment.get('order_id')}")
            return False
        if order.is_paid or (order.payment.status == "failed" and order.status == "cancelled"):
            return False

        held_reservation = order.holds_reservation
        reason = payment.get("error_description") or "Payment failed"
        order.mark_payment_failed(reason, payment.get("id"))
        if order.status != "cancelled":
            order.cancel("Payment failed")
        self.order_repo.save(order)
        if held_reservation:
            self.product_repo.release_stock(stock_lines(order))
        logger.info(f"Webhook recorded failed payment for order {order.order_number}")
        return True

    def _on_refund_processed(self, refund: Dict) -> bool:
        order = self.order_repo.find_by_refund_id(refund.get("id"))
        if not order:
            logger.warning(f"refund.processed for unknown refund {refund.get('id')}")
            return False
        if order.refund.status == "completed":
            return False

        order.refund.status = "completed"
        order.refund.processed_at = datetime.now(timezone.utc)
        self.order_repo.save(order)
        logger.info(f"Refund {refund.get('id')} completed for order {order.order_number}")
        return True
