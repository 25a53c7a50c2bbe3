"""
Cart Domain Model

One cart per user. Line items keep the price seen when they were added;
the coupon discount is recomputed whenever the lines change.

Author: Taksha Engineering
Date: 2025-10-17
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
from decimal import Decimal

from storefront.core.exceptions import NotFoundError, ValidationError
from storefront.domain.constants import money
from storefront.domain.coupon import get_coupon


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CartItem(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0)
    customization: Dict[str, Any] = Field(default_factory=dict)
    added_at: datetime = Field(default_factory=_now)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class Cart(BaseModel):
    """
    Cart domain model

    Fields:
        user_id: Owner (one cart per user)
        items: Line items, at most one per product
        coupon_code: Applied coupon (upper-case) or None
        coupon_discount: Discount amount for the current subtotal
    """

    user_id: int
    items: List[CartItem] = Field(default_factory=list)
    coupon_code: Optional[str] = None
    coupon_discount: Decimal = Decimal("0")
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def subtotal(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0"))

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def total(self) -> Decimal:
        return max(Decimal("0"), self.subtotal - self.coupon_discount)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find_item(self, product_id: int) -> Optional[CartItem]:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def add_item(
        self,
        product_id: int,
        quantity: int,
        price: Decimal,
        customization: Optional[Dict[str, Any]] = None,
    ) -> CartItem:
        """Add a line, or merge into the existing one for the same product"""
        item = self.find_item(product_id)
        if item:
            item.quantity += quantity
            item.price = price
            if customization is not None:
                item.customization = customization
        else:
            item = CartItem(
                product_id=product_id,
                quantity=quantity,
                price=price,
                customization=customization or {},
            )
            self.items.append(item)
        self._refresh_discount()
        return item

    def update_quantity(self, product_id: int, quantity: int) -> None:
        """Set a line's quantity; zero or less removes the line"""
        item = self.find_item(product_id)
        if not item:
            raise NotFoundError("Item", "Item not found in cart")
        if quantity <= 0:
            self.remove_item(product_id)
            return
        item.quantity = quantity
        self._refresh_discount()

    def remove_item(self, product_id: int) -> None:
        if not self.find_item(product_id):
            raise NotFoundError("Item", "Item not found in cart")
        self.items = [item for item in self.items if item.product_id != product_id]
        self._refresh_discount()

    def clear(self) -> None:
        self.items = []
        self.coupon_code = None
        self.coupon_discount = Decimal("0")

    def apply_coupon(self, code: str) -> Decimal:
        if self.is_empty:
            raise ValidationError("Cart is empty")
        coupon = get_coupon(code)
        self.coupon_discount = coupon.discount_for(self.subtotal)
        self.coupon_code = coupon.code
        return self.coupon_discount

    def remove_coupon(self) -> None:
        self.coupon_code = None
        self.coupon_discount = Decimal("0")

    def retain_items(self, product_ids) -> List[CartItem]:
        """Drop lines whose product is not in `product_ids`; returns the dropped lines"""
        keep = set(product_ids)
        dropped = [item for item in self.items if item.product_id not in keep]
        if dropped:
            self.items = [item for item in self.items if item.product_id in keep]
            self._refresh_discount()
        return dropped

    def _refresh_discount(self) -> None:
        """Recompute the coupon for the new subtotal, dropping it if no longer eligible"""
        if not self.coupon_code:
            return
        try:
            self.coupon_discount = get_coupon(self.coupon_code).discount_for(self.subtotal)
        except ValidationError:
            self.remove_coupon()

    def summary(self) -> dict:
        return {
            "item_count": len(self.items),
            "total_items": self.total_items,
            "subtotal": float(money(self.subtotal)),
            "coupon_code": self.coupon_code,
            "coupon_discount": float(money(self.coupon_discount)),
            "total": float(money(self.total)),
        }

    def to_dict(self, products: Optional[Dict[int, dict]] = None) -> dict:
        """Serialize the cart; `products` maps product id to its summary for embedding"""
        products = products or {}
        items = []
        for item in self.items:
            items.append({
                "product_id": item.product_id,
                "product": products.get(item.product_id),
                "quantity": item.quantity,
                "price": float(item.price),
                "line_total": float(money(item.line_total)),
                "customization": item.customization,
                "added_at": item.added_at.isoformat(),
            })
        data = {"user_id": self.user_id, "items": items}
        data.update(self.summary())
        return data


class CartItemAdd(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=1, le=100)
    customization: Dict[str, Any] = Field(default_factory=dict)


class CartItemQuantity(BaseModel):
    quantity: int = Field(..., ge=0, le=100)


class CouponApply(BaseModel):
    coupon_code: str = Field(..., min_length=1)
