"""
Checkout and payment request schemas
"""
from decimal import Decimal
from typing import Optional, List, Dict, Any, Literal

from pydantic import BaseModel, Field

from storefront.domain.constants import PaymentMethod
from storefront.domain.order import ShippingAddress


class CheckoutItem(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1, le=100)
    customization: Dict[str, Any] = Field(default_factory=dict)


class CreatePaymentOrder(BaseModel):
    """Body of create-order: what the client believes it is paying for"""
    items: List[CheckoutItem] = Field(..., min_length=1)
    shipping_address: ShippingAddress
    payment_method: PaymentMethod = "card"
    amount: Decimal = Field(..., ge=1)
    currency: Literal["INR", "USD"] = "INR"
    notes: Optional[str] = Field(None, max_length=500)


class VerifyPayment(BaseModel):
    order_id: int
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class PaymentFailure(BaseModel):
    order_id: int
    razorpay_order_id: Optional[str] = None
    error: Dict[str, Any] = Field(default_factory=dict)

    @property
    def reason(self) -> str:
        return self.error.get("description") or "Payment failed"


class RefundCreate(BaseModel):
    payment_id: str = Field(..., min_length=1)
    amount: Optional[Decimal] = Field(None, ge=1)
    reason: Optional[str] = Field(None, min_length=5, max_length=500)
