"""
Orders table

Item snapshots and the nested payment/pricing/refund records are JSONB
documents; the columns used for filtering and sorting are plain columns.
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, DECIMAL, ForeignKey, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from storefront.core.database import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(30), nullable=False, unique=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    items = Column(JSONB, nullable=False)
    shipping_address = Column(JSONB, nullable=False)
    billing_address = Column(JSONB)

    # Payment (razorpay ids are columns so webhooks can look orders up)
    payment = Column(JSONB, nullable=False)
    payment_status = Column(String(20), nullable=False, default="pending", index=True)
    razorpay_order_id = Column(String(100), index=True)

    pricing = Column(JSONB, nullable=False)
    total = Column(DECIMAL(12, 2), nullable=False, index=True)

    status = Column(String(30), nullable=False, default="pending", index=True)
    tracking = Column(JSONB, nullable=False, server_default="[]")
    shipping = Column(JSONB, nullable=False, server_default="{}")
    notes = Column(JSONB, nullable=False, server_default="{}")
    coupon = Column(JSONB, nullable=False, server_default="{}")
    refund = Column(JSONB, nullable=False, server_default="{}")
    cancellation = Column(JSONB, nullable=False, server_default="{}")

    is_gift = Column(Boolean, nullable=False, default=False)
    gift_message = Column(Text)
    priority = Column(String(10), nullable=False, default="normal")
    source = Column(String(10), nullable=False, default="website")
    delivered_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
