"""
Unit tests for shared domain helpers

Author: Taksha Engineering
Date: 2025-10-17
"""
import pytest
from decimal import Decimal

from storefront.domain.constants import is_valid_phone, is_valid_pincode, money, pagination_block, slugify


class TestSlugify:

    @pytest.mark.parametrize("text,expected", [
        ("  Ark Series: Brass Lamp_v2 ", "ark-series-brass-lamp-v2"),
        ("Moments+ Frame", "moments-frame"),
        ("--Already--dashed--", "already-dashed"),
    ])
    def test_slugify(self, text, expected):
        assert slugify(text) == expected


class TestValidators:

    @pytest.mark.parametrize("phone,valid", [
        ("9876543210", True),
        ("+919876543210", True),
        ("98765 43210", True),
        ("5876543210", False),
        ("", False),
        (None, False),
    ])
    def test_phone(self, phone, valid):
        assert is_valid_phone(phone) is valid

    @pytest.mark.parametrize("pincode,valid", [("560001", True), ("060001", False), ("56001", False)])
    def test_pincode(self, pincode, valid):
        assert is_valid_pincode(pincode) is valid


class TestMoneyAndPagination:

    def test_money_rounds_half_up(self):
        assert money(Decimal("10.005")) == Decimal("10.01")
        assert money(7) == Decimal("7.00")

    def test_pagination_block(self):
        block = pagination_block(2, 10, 25, label="total_products")

        assert block == {
            "current_page": 2,
            "total_pages": 3,
            "total_products": 25,
            "has_next_page": True,
            "has_prev_page": True,
            "limit": 10,
        }

    def test_pagination_last_page(self):
        block = pagination_block(3, 10, 25)
        assert block["has_next_page"] is False
        assert block["total_items"] == 25
