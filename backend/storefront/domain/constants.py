"""
Store-wide constants and small helpers shared by the domain models

Author: Taksha Engineering
Date: 2025-10-17
"""
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Literal, Optional


ProductCategory = Literal["corporate", "custom", "home", "personal", "new", "spiritual"]
ProductSeries = Literal["TakshaVerse", "Moments+", "Epoch Series", "Ark Series", "Spiritual Collection"]
UserType = Literal["individual", "corporate", "institution", "admin"]
OrderStatus = Literal[
    "pending", "confirmed", "processing", "shipped",
    "out_for_delivery", "delivered", "cancelled", "returned",
]
PaymentMethod = Literal["card", "upi", "netbanking", "wallet", "cod"]
PaymentStatus = Literal["pending", "processing", "completed", "failed", "refunded"]
RefundStatus = Literal["none", "requested", "approved", "processing", "completed", "rejected"]
BlogCategory = Literal[
    "design", "culture", "craftsmanship", "spirituality",
    "business", "lifestyle", "tutorial", "news",
]
BlogStatus = Literal["draft", "published", "archived"]

PRODUCT_CATEGORIES = ("corporate", "custom", "home", "personal", "new", "spiritual")

# Orders in these states count as revenue
REVENUE_STATUSES = ("shipped", "out_for_delivery", "delivered")

GST_RATE = Decimal("0.18")

PHONE_PATTERN = re.compile(r"^(\+91|91)?[6-9][0-9]{9}$")
PINCODE_PATTERN = re.compile(r"^[1-9][0-9]{5}$")


def slugify(text: str) -> str:
    """
    Build a URL slug: lowercase, drop non-word characters, collapse
    whitespace/underscore/hyphen runs into a single dash.

    >>> slugify("  Ark Series: Brass Lamp_v2 ")
    'ark-series-brass-lamp-v2'
    """
    slug = text.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")


def is_valid_phone(phone: Optional[str]) -> bool:
    return bool(phone) and bool(PHONE_PATTERN.match(phone.replace(" ", "")))


def is_valid_pincode(pincode: Optional[str]) -> bool:
    return bool(pincode) and bool(PINCODE_PATTERN.match(pincode))


def money(value) -> Decimal:
    """Round a numeric value to paise precision"""
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def pagination_block(page: int, limit: int, total: int, label: str = "total_items") -> dict:
    """Pagination metadata returned alongside paged lists"""
    total_pages = (total + limit - 1) // limit if limit else 0
    return {
        "current_page": page,
        "total_pages": total_pages,
        label: total,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
        "limit": limit,
    }
