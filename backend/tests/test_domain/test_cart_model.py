"""
Unit tests for the Cart domain model and coupons

Author: Taksha Engineering
Date: 2025-10-17
"""
import pytest
from decimal import Decimal

from storefront.core.exceptions import NotFoundError, ValidationError
from storefront.domain.cart import Cart
from storefront.domain.coupon import get_coupon


@pytest.fixture
def cart():
    cart = Cart(user_id=7)
    cart.add_item(11, 2, Decimal("400"))
    return cart


class TestCartLines:
    """Test adding, updating and removing lines"""

    def test_add_item_merges_same_product(self, cart):
        cart.add_item(11, 3, Decimal("450"))

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5
        assert cart.items[0].price == Decimal("450")

    def test_totals(self, cart):
        cart.add_item(12, 1, Decimal("150"))

        assert cart.subtotal == Decimal("950")
        assert cart.total_items == 3

    def test_update_quantity_zero_removes_line(self, cart):
        cart.update_quantity(11, 0)
        assert cart.is_empty

    def test_update_missing_item(self, cart):
        with pytest.raises(NotFoundError) as exc_info:
            cart.update_quantity(99, 1)
        assert exc_info.value.message == "Item not found in cart"

    def test_remove_missing_item(self, cart):
        with pytest.raises(NotFoundError):
            cart.remove_item(99)

    def test_retain_items_returns_dropped_lines(self, cart):
        cart.add_item(12, 1, Decimal("150"))

        dropped = cart.retain_items([12])

        assert [item.product_id for item in dropped] == [11]
        assert [item.product_id for item in cart.items] == [12]

    def test_clear_drops_coupon(self, cart):
        cart.apply_coupon("WELCOME10")
        cart.clear()

        assert cart.is_empty
        assert cart.coupon_code is None
        assert cart.coupon_discount == Decimal("0")


class TestCartCoupons:
    """Test coupon application and recalculation"""

    def test_apply_percentage_coupon(self, cart):
        discount = cart.apply_coupon("welcome10")

        assert discount == Decimal("80.00")
        assert cart.coupon_code == "WELCOME10"
        assert cart.total == Decimal("720.00")

    def test_fixed_coupon_needs_minimum(self, cart):
        with pytest.raises(ValidationError) as exc_info:
            cart.apply_coupon("SAVE50")
        assert "Minimum order amount" in exc_info.value.message

    def test_unknown_coupon(self, cart):
        with pytest.raises(ValidationError) as exc_info:
            cart.apply_coupon("FREESTUFF")
        assert exc_info.value.message == "Invalid coupon code"

    def test_empty_cart_cannot_take_coupon(self):
        with pytest.raises(ValidationError) as exc_info:
            Cart(user_id=7).apply_coupon("WELCOME10")
        assert exc_info.value.message == "Cart is empty"

    def test_discount_follows_quantity_changes(self, cart):
        cart.apply_coupon("FIRSTORDER")
        cart.update_quantity(11, 4)

        assert cart.coupon_discount == Decimal("240.00")

    def test_coupon_dropped_below_minimum(self, cart):
        cart.apply_coupon("WELCOME10")
        cart.update_quantity(11, 1)

        assert cart.coupon_code is None
        assert cart.coupon_discount == Decimal("0")

    def test_fixed_discount_capped_at_subtotal(self):
        coupon = get_coupon("SAVE50")
        assert coupon.discount_for(Decimal("1000")) == Decimal("50.00")

    def test_summary_uses_floats(self, cart):
        cart.apply_coupon("WELCOME10")
        summary = cart.summary()

        assert summary == {
            "item_count": 1,
            "total_items": 2,
            "subtotal": 800.0,
            "coupon_code": "WELCOME10",
            "coupon_discount": 80.0,
            "total": 720.0,
        }
