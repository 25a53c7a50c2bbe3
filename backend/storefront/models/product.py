"""
Product catalog tables
"""
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text, DECIMAL, Float,
    ForeignKey, UniqueConstraint, CheckConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from storefront.core.database import Base


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_quantity"),
        CheckConstraint("stock_reserved >= 0", name="ck_products_stock_reserved"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(30), nullable=False, index=True)
    series = Column(String(50), nullable=False, index=True)

    # Pricing
    price = Column(DECIMAL(12, 2), nullable=False, index=True)
    original_price = Column(DECIMAL(12, 2))
    currency = Column(String(3), nullable=False, default="INR")

    # Presentation
    images = Column(JSONB, nullable=False, server_default="[]")
    features = Column(JSONB, nullable=False, server_default="[]")
    specifications = Column(JSONB, nullable=False, server_default="{}")
    dimensions = Column(JSONB)
    materials = Column(JSONB, nullable=False, server_default="[]")
    colors = Column(JSONB, nullable=False, server_default="[]")
    tags = Column(JSONB, nullable=False, server_default="[]")

    # Inventory
    sku = Column(String(50), nullable=False, unique=True, index=True)
    stock_quantity = Column(Integer, nullable=False, default=0)
    stock_reserved = Column(Integer, nullable=False, default=0)
    stock_threshold = Column(Integer, nullable=False, default=5)

    # Flags
    is_new = Column(Boolean, nullable=False, default=False, index=True)
    is_limited = Column(Boolean, nullable=False, default=False)
    is_featured = Column(Boolean, nullable=False, default=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    # Engagement
    rating_average = Column(Float, nullable=False, default=0)
    rating_count = Column(Integer, nullable=False, default=0)
    sales_count = Column(Integer, nullable=False, default=0)
    view_count = Column(Integer, nullable=False, default=0)
    wishlist_count = Column(Integer, nullable=False, default=0)

    shipping = Column(JSONB, nullable=False, server_default="{}")
    slug = Column(String(220), unique=True, index=True)
    seo = Column(JSONB, nullable=False, server_default="{}")

    created_by = Column(Integer, ForeignKey("users.id"))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class ProductReview(Base):
    __tablename__ = "product_reviews"
    __table_args__ = (
        UniqueConstraint("product_id", "user_id", name="uq_product_reviews_product_user"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_product_reviews_rating"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(100), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(String(500), nullable=False)
    is_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
