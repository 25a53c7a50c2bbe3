"""
Unit tests for the Product domain model

Author: Taksha Engineering
Date: 2025-10-17
"""
import pytest
from decimal import Decimal

from storefront.core.exceptions import InsufficientStockError, ValidationError
from storefront.domain.product import (
    ProductCreate,
    ProductImage,
    calculate_rating,
    generate_sku,
)


class TestProductComputedFields:
    """Test computed properties of Product"""

    def test_discount_percentage_rounds(self, make_product):
        product = make_product(price=Decimal("400"), original_price=Decimal("600"))
        assert product.discount_percentage == 33

    def test_discount_is_zero_without_higher_original_price(self, make_product):
        assert make_product(original_price=None).discount_percentage == 0
        assert make_product(original_price=Decimal("300")).discount_percentage == 0

    @pytest.mark.parametrize("quantity,expected", [
        (0, "out_of_stock"),
        (5, "low_stock"),
        (6, "in_stock"),
    ])
    def test_stock_status(self, make_product, quantity, expected):
        product = make_product(stock={"quantity": quantity, "reserved": 0, "threshold": 5})
        assert product.stock_status == expected

    def test_available_stock_subtracts_reserved(self, make_product):
        product = make_product(stock={"quantity": 10, "reserved": 4, "threshold": 5})
        assert product.available_stock == 6

    def test_available_stock_never_negative(self, make_product):
        product = make_product(stock={"quantity": 2, "reserved": 5, "threshold": 5})
        assert product.available_stock == 0

    def test_main_image_prefers_flagged_image(self, make_product):
        product = make_product(images=[
            ProductImage(url="a.jpg"),
            ProductImage(url="b.jpg", is_main=True),
        ])
        assert product.main_image == "b.jpg"

    def test_main_image_falls_back_to_first(self, make_product):
        product = make_product(images=[ProductImage(url="a.jpg"), ProductImage(url="b.jpg")])
        assert product.main_image == "a.jpg"
        assert make_product().main_image is None


class TestProductRules:
    """Test stock and availability checks"""

    def test_ensure_available_raises_with_details(self, make_product):
        product = make_product(stock={"quantity": 3, "reserved": 1, "threshold": 5})

        with pytest.raises(InsufficientStockError) as exc_info:
            product.ensure_available(3)

        assert exc_info.value.available == 2
        assert exc_info.value.requested == 3
        assert "Brass Diya" in exc_info.value.message

    def test_ensure_available_accepts_exact_quantity(self, make_product):
        make_product(stock={"quantity": 3, "reserved": 1, "threshold": 5}).ensure_available(2)

    def test_inactive_product_is_not_purchasable(self, make_product):
        with pytest.raises(ValidationError):
            make_product(is_active=False).ensure_purchasable()

    def test_to_dict_includes_computed_fields(self, make_product):
        data = make_product(original_price=Decimal("500")).to_dict()

        assert data["price"] == 400.0
        assert data["original_price"] == 500.0
        assert data["discount_percentage"] == 20
        assert data["stock_status"] == "in_stock"
        assert data["available_stock"] == 10


class TestProductHelpers:

    def test_generate_sku(self):
        assert generate_sku("home", "Ark Series", now=1700000123.0) == "HOMARK123000"

    def test_generate_sku_strips_series_spaces(self):
        sku = generate_sku("personal", "Moments+", now=1700000000.0)
        assert sku.startswith("PERMOM")
        assert len(sku) == 12

    def test_calculate_rating_rounds_to_one_decimal(self):
        rating = calculate_rating([5, 4, 4])
        assert rating.average == 4.3
        assert rating.count == 3

    def test_calculate_rating_without_reviews(self):
        rating = calculate_rating([])
        assert rating.average == 0
        assert rating.count == 0

    def test_prepare_fills_sku_slug_and_main_image(self):
        data = ProductCreate(
            name="Ark Series Brass Lamp",
            description="A lamp cast in brass",
            category="home",
            series="Ark Series",
            price=Decimal("1200"),
            images=[ProductImage(url="lamp.jpg")],
        ).prepare()

        assert data.sku.startswith("HOMARK")
        assert data.seo.slug == "ark-series-brass-lamp"
        assert data.images[0].is_main is True

    def test_prepare_keeps_given_sku(self):
        data = ProductCreate(
            name="Desk Clock",
            description="Walnut desk clock",
            category="corporate",
            series="Epoch Series",
            price=Decimal("900"),
            sku="CUSTOM-1",
        ).prepare()
        assert data.sku == "CUSTOM-1"
