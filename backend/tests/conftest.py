"""
Pytest fixtures and configuration for Taksha Storefront Backend tests

This file provides shared fixtures that can be used across all test modules.
No test here needs a database: repositories are mocked or their
connection factory is patched.

Author: Taksha Engineering
Date: 2025-10-17
"""
import os
from datetime import datetime, timezone
from decimal import Decimal

import pytest

# Settings are read at import time; pin the secrets tests sign with
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "test-key-secret")
os.environ.setdefault("RAZORPAY_WEBHOOK_SECRET", "test-webhook-secret")

from storefront.core.auth import TokenUser
from storefront.core.rate_limit import rate_limiter
from storefront.domain.order import Order, OrderItem, ShippingAddress
from storefront.domain.product import Product


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Every test starts with empty rate limit windows"""
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture
def customer():
    return TokenUser(id=7, email="asha@example.com", name="Asha", user_type="individual")


@pytest.fixture
def other_customer():
    return TokenUser(id=8, email="ravi@example.com", name="Ravi", user_type="individual")


@pytest.fixture
def admin_user():
    return TokenUser(id=1, email="admin@taksha.in", name="Admin", user_type="admin")


@pytest.fixture
def product_row():
    """
    Provides a products table row as returned by RealDictCursor
    """
    return {
        'id': 11,
        'name': 'Brass Diya',
        'description': 'Hand-cast brass lamp',
        'category': 'spiritual',
        'series': 'Spiritual Collection',
        'price': Decimal('400.00'),
        'original_price': Decimal('500.00'),
        'currency': 'INR',
        'images': [{'url': 'https://cdn.example.com/diya.jpg', 'alt': 'Diya', 'is_main': True}],
        'features': ['Handmade'],
        'specifications': {'material': 'brass'},
        'dimensions': None,
        'materials': ['brass'],
        'colors': [],
        'tags': ['diwali'],
        'sku': 'SPISPI123456',
        'stock_quantity': 10,
        'stock_reserved': 2,
        'stock_threshold': 5,
        'is_new': True,
        'is_limited': False,
        'is_featured': False,
        'is_active': True,
        'rating_average': 4.5,
        'rating_count': 2,
        'sales_count': 3,
        'view_count': 40,
        'wishlist_count': 1,
        'shipping': {},
        'slug': 'brass-diya',
        'seo': {},
        'created_by': 1,
        'created_at': datetime(2025, 10, 1, tzinfo=timezone.utc),
        'updated_at': None,
    }


@pytest.fixture
def make_product():
    """Factory for Product domain models with sensible defaults"""
    def _make(**overrides):
        data = {
            "id": 11,
            "name": "Brass Diya",
            "category": "spiritual",
            "series": "Spiritual Collection",
            "price": Decimal("400"),
            "sku": "SPISPI123456",
            "stock": {"quantity": 10, "reserved": 0, "threshold": 5},
        }
        data.update(overrides)
        return Product(**data)
    return _make


@pytest.fixture
def shipping_address():
    return ShippingAddress(
        name="Asha Rao",
        phone="9876543210",
        email="asha@example.com",
        address_line1="12 MG Road",
        city="Bengaluru",
        state="Karnataka",
        pincode="560001",
    )


@pytest.fixture
def make_order(shipping_address):
    """Factory for Order domain models: one line of 2 x 400"""
    def _make(**overrides):
        data = {
            "id": 101,
            "order_number": "TK12345678ABCD",
            "user_id": 7,
            "items": [OrderItem(product_id=11, name="Brass Diya", price=Decimal("400"), quantity=2)],
            "shipping_address": shipping_address,
        }
        data.update(overrides)
        order = Order(**data)
        order.recalculate()
        return order
    return _make


@pytest.fixture
def api_client():
    """
    Provides a TestClient plus a helper to authenticate as a given user

    Usage:
        client, login_as = api_client
        login_as(customer)
    """
    from fastapi.testclient import TestClient

    from storefront.core.auth import get_current_user, get_current_user_optional
    from storefront.main import app

    def login_as(user):
        async def _current_user():
            return user
        app.dependency_overrides[get_current_user] = _current_user
        app.dependency_overrides[get_current_user_optional] = _current_user

    client = TestClient(app)
    yield client, login_as
    app.dependency_overrides.clear()
