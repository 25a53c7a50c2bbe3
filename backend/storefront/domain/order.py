"""
Order Domain Models

An order snapshots the purchased items, prices and shipping address at
checkout time. Status changes are recorded in an append-only tracking log.

Author: Taksha Engineering
Date: 2025-10-17
"""
import random
import string
import time
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime, timezone, timedelta
from decimal import Decimal

from storefront.core.exceptions import ValidationError
from storefront.domain.constants import (
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    RefundStatus,
    GST_RATE,
    money,
)

# Statuses from which an order can no longer be cancelled
FINAL_STATUSES = ("delivered", "cancelled", "returned")
CANCELLABLE_STATUSES = ("pending", "confirmed", "processing")
RETURN_WINDOW_DAYS = 7
# Payment states in which a live order still holds a stock reservation
RESERVED_PAYMENT_STATUSES = ("pending", "processing")

_BASE36 = string.digits + string.ascii_uppercase


def _now() -> datetime:
    return datetime.now(timezone.utc)


def generate_order_number(now: Optional[float] = None) -> str:
    """'TK' + last 8 digits of the millisecond timestamp + 4 random base36 characters"""
    timestamp = str(int((now if now is not None else time.time()) * 1000))
    suffix = "".join(random.choices(_BASE36, k=4))
    return f"TK{timestamp[-8:]}{suffix}"


class OrderItem(BaseModel):
    """
    Snapshot of a purchased product

    Fields:
        product_id: Reference to the catalog product
        name / image / sku / category / series: Copied at checkout time
        price: Unit price charged
        quantity: Units ordered
        customization: Free-form personalisation (engraving text, colour...)
    """
    product_id: int
    name: str
    image: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    customization: Dict[str, Any] = Field(default_factory=dict)
    sku: Optional[str] = None
    category: Optional[str] = None
    series: Optional[str] = None

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class ShippingAddress(BaseModel):
    name: str
    phone: str = Field(..., min_length=10)
    email: Optional[str] = None
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    pincode: str
    country: str = "India"
    landmark: Optional[str] = None

    @field_validator("pincode")
    @classmethod
    def check_pincode(cls, value: str) -> str:
        if len(value) != 6 or not value.isdigit():
            raise ValueError("Pincode must be 6 digits")
        return value


class PaymentInfo(BaseModel):
    method: PaymentMethod = "card"
    status: PaymentStatus = "pending"
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None
    amount: Decimal = Decimal("0")
    currency: str = "INR"
    paid_at: Optional[datetime] = None
    failure_reason: Optional[str] = None


class Pricing(BaseModel):
    subtotal: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    shipping: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    total: Decimal = Decimal("0")


class TrackingEvent(BaseModel):
    status: OrderStatus
    message: Optional[str] = None
    location: Optional[str] = None
    timestamp: datetime = Field(default_factory=_now)
    updated_by: Optional[int] = None


class ShippingDetails(BaseModel):
    method: Literal["standard", "express", "overnight"] = "standard"
    carrier: Optional[str] = None
    tracking_number: Optional[str] = None
    estimated_delivery: Optional[datetime] = None


class OrderNotes(BaseModel):
    customer: Optional[str] = None
    admin: Optional[str] = None
    internal: Optional[str] = None


class CouponInfo(BaseModel):
    code: Optional[str] = None
    discount: Decimal = Decimal("0")


class RefundInfo(BaseModel):
    status: RefundStatus = "none"
    amount: Decimal = Decimal("0")
    reason: Optional[str] = None
    requested_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    refund_id: Optional[str] = None


class CancellationInfo(BaseModel):
    reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[int] = None


def calculate_pricing(
    items: List[OrderItem],
    shipping: Decimal = Decimal("0"),
    discount: Decimal = Decimal("0"),
    tax_rate: Decimal = GST_RATE,
) -> Pricing:
    """Subtotal, GST on the subtotal, and the grand total"""
    subtotal = sum((item.line_total for item in items), Decimal("0"))
    tax = subtotal * tax_rate
    total = subtotal + tax + shipping - discount
    return Pricing(
        subtotal=money(subtotal),
        tax=money(tax),
        shipping=money(shipping),
        discount=money(discount),
        total=money(max(total, Decimal("0"))),
    )


class Order(BaseModel):
    """
    Order domain model

    Fields:
        id: Internal order ID
        order_number: Human-facing number (TK...)
        user_id: Customer
        items: Item snapshots
        shipping_address / payment / pricing / shipping / notes: Nested details
        status: Current lifecycle status
        tracking: Append-only history of status changes
        coupon / refund / cancellation: Optional sub-records
    """

    id: Optional[int] = None
    order_number: str = Field(default_factory=generate_order_number)
    user_id: int
    items: List[OrderItem] = Field(..., min_length=1)
    shipping_address: ShippingAddress
    billing_address: Optional[ShippingAddress] = None
    payment: PaymentInfo = Field(default_factory=PaymentInfo)
    pricing: Pricing = Field(default_factory=Pricing)
    status: OrderStatus = "pending"
    tracking: List[TrackingEvent] = Field(default_factory=list)
    shipping: ShippingDetails = Field(default_factory=ShippingDetails)
    notes: OrderNotes = Field(default_factory=OrderNotes)
    coupon: CouponInfo = Field(default_factory=CouponInfo)
    refund: RefundInfo = Field(default_factory=RefundInfo)
    cancellation: CancellationInfo = Field(default_factory=CancellationInfo)
    is_gift: bool = False
    gift_message: Optional[str] = None
    priority: Literal["low", "normal", "high", "urgent"] = "normal"
    source: Literal["website", "mobile", "admin", "api"] = "website"
    delivered_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    # Computed properties
    @property
    def is_cancellable(self) -> bool:
        return self.status in CANCELLABLE_STATUSES

    @property
    def order_age_days(self) -> int:
        created = self.created_at or _now()
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return (_now() - created).days

    @property
    def is_returnable(self) -> bool:
        return self.status == "delivered" and self.order_age_days <= RETURN_WINDOW_DAYS

    @property
    def current_tracking(self) -> Optional[TrackingEvent]:
        return self.tracking[-1] if self.tracking else None

    @property
    def is_paid(self) -> bool:
        return self.payment.status == "completed"

    @property
    def holds_reservation(self) -> bool:
        """Cancelling releases the reservation, whatever the payment state says"""
        return self.status != "cancelled" and self.payment.status in RESERVED_PAYMENT_STATUSES

    def add_tracking(
        self,
        status: str,
        message: Optional[str] = None,
        location: Optional[str] = None,
        updated_by: Optional[int] = None,
    ) -> TrackingEvent:
        event = TrackingEvent(status=status, message=message, location=location, updated_by=updated_by)
        self.tracking.append(event)
        return event

    def update_status(
        self,
        status: str,
        message: Optional[str] = None,
        location: Optional[str] = None,
        updated_by: Optional[int] = None,
    ) -> TrackingEvent:
        """Set the status, log it, and stamp delivered_at on delivery"""
        self.status = status
        event = self.add_tracking(status, message, location, updated_by)
        if status == "delivered":
            self.delivered_at = event.timestamp
        return event

    def recalculate(self, tax_rate: Decimal = GST_RATE) -> Decimal:
        self.pricing = calculate_pricing(
            self.items,
            shipping=self.pricing.shipping,
            discount=self.pricing.discount,
            tax_rate=tax_rate,
        )
        return self.pricing.total

    def cancel(self, reason: str, cancelled_by: Optional[int] = None) -> None:
        if self.status in FINAL_STATUSES:
            raise ValidationError("Order cannot be cancelled")

        self.status = "cancelled"
        self.cancellation = CancellationInfo(
            reason=reason,
            cancelled_at=_now(),
            cancelled_by=cancelled_by,
        )
        self.add_tracking("cancelled", f"Order cancelled. Reason: {reason}", updated_by=cancelled_by)

    def request_refund(self, reason: str, amount: Optional[Decimal] = None) -> RefundInfo:
        if not self.is_paid:
            raise ValidationError("Cannot refund unpaid order")
        if self.refund.status != "none":
            raise ValidationError("Refund already requested for this order")

        refund_amount = amount if amount is not None else self.pricing.total
        if refund_amount > self.pricing.total:
            raise ValidationError("Refund amount cannot exceed order total")

        self.refund = RefundInfo(
            status="requested",
            amount=money(refund_amount),
            reason=reason,
            requested_at=_now(),
        )
        return self.refund

    def mark_paid(self, payment_id: str, signature: Optional[str] = None) -> None:
        self.payment.status = "completed"
        self.payment.razorpay_payment_id = payment_id
        if signature:
            self.payment.razorpay_signature = signature
        self.payment.paid_at = _now()
        self.update_status("confirmed", "Payment received and order confirmed")

    def record_late_payment(self, payment_id: str, signature: Optional[str] = None) -> None:
        """Payment captured after the order was cancelled: keep it cancelled, owe a refund"""
        self.payment.status = "completed"
        self.payment.razorpay_payment_id = payment_id
        if signature:
            self.payment.razorpay_signature = signature
        self.payment.paid_at = _now()
        self.add_tracking("cancelled", "Payment received after cancellation, pending refund")

    def mark_payment_failed(self, reason: str, payment_id: Optional[str] = None) -> None:
        self.payment.status = "failed"
        self.payment.failure_reason = reason
        if payment_id:
            self.payment.razorpay_payment_id = payment_id

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")

        # Money fields as floats instead of strings
        data["pricing"] = {k: float(v) for k, v in self.pricing.model_dump().items()}
        data["payment"]["amount"] = float(self.payment.amount)
        data["refund"]["amount"] = float(self.refund.amount)
        data["coupon"]["discount"] = float(self.coupon.discount)
        for item, raw in zip(data["items"], self.items):
            item["price"] = float(raw.price)

        data["is_cancellable"] = self.is_cancellable
        data["is_returnable"] = self.is_returnable
        current = self.current_tracking
        data["current_tracking"] = current.model_dump(mode="json") if current else None
        return data


class OrderCancel(BaseModel):
    reason: str = Field(..., min_length=5, max_length=500)


class RefundRequest(BaseModel):
    reason: str = Field(..., min_length=5, max_length=500)
    amount: Optional[Decimal] = Field(None, ge=1)


class StatusUpdate(BaseModel):
    status: OrderStatus
    message: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=100)


class ShippingUpdate(BaseModel):
    tracking_number: Optional[str] = Field(None, min_length=1)
    carrier: Optional[str] = Field(None, min_length=1)
    estimated_delivery: Optional[datetime] = None
    method: Optional[Literal["standard", "express", "overnight"]] = None
