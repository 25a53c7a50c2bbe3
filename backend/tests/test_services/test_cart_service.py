"""
Unit tests for CartService

Repositories are mocked; carts and products are real domain models.

Author: Taksha Engineering
Date: 2025-10-17
"""
import pytest
from decimal import Decimal
from unittest.mock import MagicMock

from storefront.core.exceptions import InsufficientStockError, NotFoundError
from storefront.domain.cart import Cart
from storefront.services.cart_service import CartService


@pytest.fixture
def repos(make_product):
    cart_repo = MagicMock()
    product_repo = MagicMock()
    cart = Cart(user_id=7)
    cart_repo.get_or_create.return_value = cart

    product = make_product(stock={"quantity": 5, "reserved": 1, "threshold": 2})
    product_repo.find_by_id.return_value = product
    product_repo.find_by_ids.side_effect = lambda ids: {pid: product for pid in ids if pid == product.id}

    service = CartService(cart_repo=cart_repo, product_repo=product_repo)
    return service, cart, cart_repo, product_repo


class TestCartService:

    def test_add_item_saves_cart_with_product_summary(self, repos):
        service, cart, cart_repo, _ = repos

        data = service.add_item(7, 11, 2)

        assert data["items"][0]["product"]["name"] == "Brass Diya"
        assert data["total_items"] == 2
        assert data["subtotal"] == 800.0
        cart_repo.save.assert_called_once_with(cart)

    def test_add_item_checks_merged_quantity(self, repos):
        service, cart, cart_repo, _ = repos
        cart.add_item(11, 3, Decimal("400"))

        with pytest.raises(InsufficientStockError) as exc_info:
            service.add_item(7, 11, 2)

        assert exc_info.value.available == 4
        assert exc_info.value.requested == 5
        cart_repo.save.assert_not_called()

    def test_add_inactive_product(self, repos, make_product):
        service, _, _, product_repo = repos
        product_repo.find_by_id.return_value = make_product(is_active=False)

        with pytest.raises(NotFoundError):
            service.add_item(7, 11, 1)

    def test_reads_drop_unavailable_lines(self, repos):
        service, cart, cart_repo, _ = repos
        cart.add_item(11, 1, Decimal("400"))
        cart.add_item(99, 1, Decimal("100"))

        data = service.get_cart(7)

        assert [item["product_id"] for item in data["items"]] == [11]
        cart_repo.save.assert_called_once_with(cart)

    def test_update_quantity_checks_stock(self, repos):
        service, cart, _, _ = repos
        cart.add_item(11, 1, Decimal("400"))

        with pytest.raises(InsufficientStockError):
            service.update_quantity(7, 11, 5)

    def test_update_quantity_zero_removes(self, repos):
        service, cart, cart_repo, _ = repos
        cart.add_item(11, 1, Decimal("400"))

        data = service.update_quantity(7, 11, 0)

        assert data["items"] == []
        cart_repo.save.assert_called_once()

    def test_clear(self, repos):
        service, _, cart_repo, _ = repos

        data = service.clear(7)

        cart_repo.clear.assert_called_once_with(7)
        assert data["items"] == []
        assert data["total"] == 0.0

    def test_validate_reports_each_line(self, repos):
        service, cart, cart_repo, _ = repos
        cart.add_item(11, 6, Decimal("400"))
        cart.add_item(99, 1, Decimal("100"))

        result = service.validate(7)

        assert result["is_valid"] is False
        assert result["items"][0]["error"] == "Only 4 items available"
        assert result["items"][1]["error"] == "Product is no longer available"
        cart_repo.save.assert_not_called()

    def test_validate_ok(self, repos):
        service, cart, _, _ = repos
        cart.add_item(11, 2, Decimal("400"))

        result = service.validate(7)

        assert result["is_valid"] is True
        assert result["message"] == "Cart is valid"

    def test_apply_coupon(self, repos):
        service, cart, cart_repo, _ = repos
        cart.add_item(11, 2, Decimal("400"))

        data = service.apply_coupon(7, "welcome10")

        assert data["coupon_code"] == "WELCOME10"
        assert data["total"] == 720.0
        cart_repo.save.assert_called_once_with(cart)
