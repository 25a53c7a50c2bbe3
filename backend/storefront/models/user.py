"""
Users table
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from storefront.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255))
    user_type = Column(String(20), nullable=False, default="individual", index=True)
    phone = Column(String(20))
    profile_picture = Column(String(500))
    provider = Column(String(20), nullable=False, default="email")

    # [{id, name, phone, address_line1, ..., is_default}]
    addresses = Column(JSONB, nullable=False, server_default="[]")
    # {notifications: {email, sms, push}, language, currency}
    preferences = Column(JSONB, nullable=False, server_default="{}")

    is_verified = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    last_login = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
