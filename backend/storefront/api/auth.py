"""
Authentication API endpoints
- Registration and login (rate limited per client)
- Current user
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from storefront.core.auth import TokenUser, get_current_user
from storefront.core.exceptions import StoreError, NotFoundError, to_http_exception
from storefront.core.rate_limit import auth_rate_limit
from storefront.domain.user import UserCreate, UserLogin
from storefront.repositories.user_repository import UserRepository
from storefront.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED, dependencies=[Depends(auth_rate_limit)])
async def register(data: UserCreate):
    """Create an account and return a JWT for it"""
    try:
        result = AuthService().register(data)
        return {
            "status": "success",
            "message": "User registered successfully",
            "data": result
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Registration error: {e}")
        raise HTTPException(status_code=500, detail=f"Error registering user: {str(e)}")


@router.post("/login", dependencies=[Depends(auth_rate_limit)])
async def login(credentials: UserLogin):
    try:
        result = AuthService().login(credentials)
        return {
            "status": "success",
            "message": "Login successful",
            "data": result
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Login error: {e}")
        raise HTTPException(status_code=500, detail=f"Error logging in: {str(e)}")


@router.get("/me")
async def get_me(current_user: TokenUser = Depends(get_current_user)):
    """Full profile of the authenticated user"""
    try:
        user = UserRepository().find_by_id(current_user.id)
        if not user:
            raise NotFoundError("User")

        return {
            "status": "success",
            "data": user.to_dict()
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching user: {str(e)}")


@router.post("/logout")
async def logout(current_user: TokenUser = Depends(get_current_user)):
    """Tokens are stateless; the client discards its copy"""
    return {
        "status": "success",
        "message": "Logged out successfully"
    }
