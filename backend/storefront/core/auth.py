"""
Authentication dependencies for the storefront API
Validates JWT bearer tokens and resolves the calling user
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, ExpiredSignatureError, JWTError
from pydantic import BaseModel

from storefront.core.config import settings
from storefront.repositories.user_repository import UserRepository


# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)


class TokenUser(BaseModel):
    """The authenticated caller"""
    id: int
    email: str
    name: Optional[str] = None
    user_type: str = "individual"

    @property
    def is_admin(self) -> bool:
        return self.user_type == "admin"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )


def decode_access_token(token: str) -> dict:
    """
    Decode and validate a storefront JWT.

    Raises 401 with "Token has expired." or "Invalid token."
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise _unauthorized("Token has expired.")
    except JWTError:
        raise _unauthorized("Invalid token.")


def _resolve_user(payload: dict) -> TokenUser:
    user_id = payload.get("userId")
    if user_id is None:
        raise _unauthorized("Invalid token.")

    user = UserRepository().find_by_id(int(user_id))
    if not user:
        raise _unauthorized("Token is not valid. User not found.")
    if not user.is_active:
        raise _unauthorized("Account is deactivated.")

    return TokenUser(id=user.id, email=user.email, name=user.name, user_type=user.user_type)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenUser:
    """
    Dependency that extracts and validates the current user from the JWT.

    Usage:
        @router.get("/protected")
        async def protected_route(user: TokenUser = Depends(get_current_user)):
            return {"message": f"Hello {user.email}"}
    """
    if not credentials:
        raise _unauthorized("Access denied. No token provided.")

    payload = decode_access_token(credentials.credentials)
    return _resolve_user(payload)


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[TokenUser]:
    """
    Optional authentication - returns None if no valid token provided.
    """
    if not credentials:
        return None

    try:
        payload = decode_access_token(credentials.credentials)
        return _resolve_user(payload)
    except HTTPException:
        return None


async def require_admin(user: TokenUser = Depends(get_current_user)) -> TokenUser:
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin privileges required."
        )
    return user
