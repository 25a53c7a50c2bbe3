"""
Coupon definitions and discount calculation
"""
from decimal import Decimal
from typing import Dict, Literal

from pydantic import BaseModel

from storefront.core.exceptions import ValidationError
from storefront.domain.constants import money


class Coupon(BaseModel):
    code: str
    type: Literal["percentage", "fixed"]
    value: Decimal
    min_amount: Decimal

    def discount_for(self, subtotal: Decimal) -> Decimal:
        """Discount granted on `subtotal`, never more than the subtotal itself"""
        if subtotal < self.min_amount:
            raise ValidationError(
                f"Minimum order amount of ₹{self.min_amount} required for this coupon"
            )
        if self.type == "percentage":
            discount = subtotal * self.value / Decimal(100)
        else:
            discount = self.value
        return money(min(discount, subtotal))


COUPONS: Dict[str, Coupon] = {
    "WELCOME10": Coupon(code="WELCOME10", type="percentage", value=Decimal("10"), min_amount=Decimal("500")),
    "SAVE50": Coupon(code="SAVE50", type="fixed", value=Decimal("50"), min_amount=Decimal("1000")),
    "FIRSTORDER": Coupon(code="FIRSTORDER", type="percentage", value=Decimal("15"), min_amount=Decimal("300")),
}


def get_coupon(code: str) -> Coupon:
    coupon = COUPONS.get(code.strip().upper())
    if not coupon:
        raise ValidationError("Invalid coupon code")
    return coupon
