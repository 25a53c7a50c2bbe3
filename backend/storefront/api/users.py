"""
Users API Endpoints
Profile, preferences and saved addresses of the caller, plus user
administration

Author: Taksha Engineering
Date: 2025-10-17
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from storefront.core.auth import TokenUser, get_current_user, require_admin
from storefront.core.exceptions import StoreError, NotFoundError, ValidationError, to_http_exception
from storefront.domain.constants import UserType, pagination_block
from storefront.domain.user import (
    Address,
    AddressCreate,
    AddressUpdate,
    PreferencesUpdate,
    ProfileUpdate,
    User,
)
from storefront.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter()


# Request models
class StatusChange(BaseModel):
    is_active: bool


class TypeChange(BaseModel):
    user_type: UserType


def _load_user(user_id: int) -> User:
    user = UserRepository().find_by_id(user_id)
    if not user:
        raise NotFoundError("User")
    return user


# =============================================================================
# Profile
# =============================================================================

@router.get("/profile")
async def get_profile(current_user: TokenUser = Depends(get_current_user)):
    try:
        user = _load_user(current_user.id)
        return {"status": "success", "data": user.to_dict()}

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching profile: {str(e)}")


@router.put("/profile")
async def update_profile(data: ProfileUpdate, current_user: TokenUser = Depends(get_current_user)):
    try:
        user = UserRepository().update(current_user.id, data.model_dump(exclude_unset=True))
        if not user:
            raise NotFoundError("User")

        return {
            "status": "success",
            "message": "Profile updated successfully",
            "data": user.to_dict()
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating profile: {str(e)}")


@router.put("/preferences")
async def update_preferences(data: PreferencesUpdate, current_user: TokenUser = Depends(get_current_user)):
    try:
        repo = UserRepository()
        user = _load_user(current_user.id)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        user.preferences = user.preferences.model_copy(update={
            key: value for key, value in changes.items() if key != "notifications"
        })
        if data.notifications is not None:
            user.preferences.notifications = data.notifications

        user = repo.save_profile_documents(user)
        return {
            "status": "success",
            "message": "Preferences updated successfully",
            "data": user.preferences.model_dump()
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating preferences: {str(e)}")


# =============================================================================
# Addresses
# =============================================================================

@router.get("/addresses")
async def get_addresses(current_user: TokenUser = Depends(get_current_user)):
    try:
        user = _load_user(current_user.id)
        return {
            "status": "success",
            "data": [address.model_dump() for address in user.addresses]
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching addresses: {str(e)}")


@router.post("/addresses", status_code=status.HTTP_201_CREATED)
async def add_address(data: AddressCreate, current_user: TokenUser = Depends(get_current_user)):
    try:
        user = _load_user(current_user.id)
        address = user.add_address(Address(**data.model_dump()))
        UserRepository().save_profile_documents(user)

        return {
            "status": "success",
            "message": "Address added successfully",
            "data": address.model_dump(),
            "addresses": [item.model_dump() for item in user.addresses]
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error adding address: {str(e)}")


@router.put("/addresses/{address_id}")
async def update_address(
    address_id: str,
    data: AddressUpdate,
    current_user: TokenUser = Depends(get_current_user)
):
    try:
        user = _load_user(current_user.id)
        address = user.update_address(address_id, data.model_dump(exclude_unset=True))
        UserRepository().save_profile_documents(user)

        return {
            "status": "success",
            "message": "Address updated successfully",
            "data": address.model_dump()
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating address: {str(e)}")


@router.delete("/addresses/{address_id}")
async def delete_address(address_id: str, current_user: TokenUser = Depends(get_current_user)):
    try:
        user = _load_user(current_user.id)
        user.remove_address(address_id)
        UserRepository().save_profile_documents(user)

        return {
            "status": "success",
            "message": "Address deleted successfully",
            "data": [address.model_dump() for address in user.addresses]
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting address: {str(e)}")


@router.put("/addresses/{address_id}/default")
async def set_default_address(address_id: str, current_user: TokenUser = Depends(get_current_user)):
    try:
        user = _load_user(current_user.id)
        address = user.set_default_address(address_id)
        UserRepository().save_profile_documents(user)

        return {
            "status": "success",
            "message": "Default address updated",
            "data": address.model_dump()
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error setting default address: {str(e)}")


# =============================================================================
# Administration (admin only)
# =============================================================================

@router.get("/admin/all")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, description="Search by name or email"),
    user_type: Optional[UserType] = Query(None),
    is_active: Optional[bool] = Query(None),
    current_user: TokenUser = Depends(require_admin)
):
    try:
        users, total = UserRepository().find_all(
            search=search,
            user_type=user_type,
            is_active=is_active,
            limit=limit,
            offset=(page - 1) * limit
        )

        return {
            "status": "success",
            "data": [user.to_dict() for user in users],
            "pagination": pagination_block(page, limit, total, label="total_users")
        }

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching users: {str(e)}")


@router.get("/admin/stats")
async def get_user_stats(current_user: TokenUser = Depends(require_admin)):
    try:
        return {
            "status": "success",
            "data": UserRepository().get_stats()
        }

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching user stats: {str(e)}")


@router.get("/admin/{user_id}")
async def get_user(user_id: int, current_user: TokenUser = Depends(require_admin)):
    try:
        repo = UserRepository()
        user = _load_user(user_id)

        data = user.to_dict()
        data.update(repo.get_order_stats(user_id))

        return {"status": "success", "data": data}

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching user: {str(e)}")


@router.put("/admin/{user_id}/status")
async def update_user_status(
    user_id: int,
    data: StatusChange,
    current_user: TokenUser = Depends(require_admin)
):
    try:
        if user_id == current_user.id and not data.is_active:
            raise ValidationError("You cannot deactivate your own account")

        user = UserRepository().update(user_id, {"is_active": data.is_active})
        if not user:
            raise NotFoundError("User")

        logger.info(f"User {user_id} {'activated' if data.is_active else 'deactivated'} by {current_user.id}")
        return {
            "status": "success",
            "message": f"User {'activated' if data.is_active else 'deactivated'} successfully",
            "data": user.to_dict()
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating user status: {str(e)}")


@router.put("/admin/{user_id}/type")
async def update_user_type(
    user_id: int,
    data: TypeChange,
    current_user: TokenUser = Depends(require_admin)
):
    try:
        user = UserRepository().update(user_id, {"user_type": data.user_type})
        if not user:
            raise NotFoundError("User")

        return {
            "status": "success",
            "message": "User type updated successfully",
            "data": user.to_dict()
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating user type: {str(e)}")
