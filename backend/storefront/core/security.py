"""
Password hashing and JWT issuing for the storefront
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt
from passlib.context import CryptContext

from storefront.core.config import settings


# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(plain_password, password_hash)


def create_access_token(user_id: int, email: str, user_type: str, expires_days: Optional[int] = None) -> str:
    """
    Issue a signed JWT for a user.

    Payload:
    {
        "userId": 42,
        "email": "asha@example.com",
        "userType": "individual",
        "iat": 1234567890,
        "exp": 1234567890
    }
    """
    now = datetime.now(timezone.utc)
    days = expires_days if expires_days is not None else settings.JWT_EXPIRES_DAYS
    payload = {
        "userId": user_id,
        "email": email,
        "userType": user_type,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(days=days)).timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
