"""
Cart API Endpoints
The caller's shopping cart

Author: Taksha Engineering
Date: 2025-10-17
"""
from fastapi import APIRouter, Depends, HTTPException

from storefront.core.auth import TokenUser, get_current_user
from storefront.core.exceptions import StoreError, to_http_exception
from storefront.domain.cart import CartItemAdd, CartItemQuantity, CouponApply
from storefront.services.cart_service import CartService

router = APIRouter()


@router.get("/")
async def get_cart(current_user: TokenUser = Depends(get_current_user)):
    """Cart with product summaries; unavailable products are dropped"""
    try:
        return {
            "status": "success",
            "data": CartService().get_cart(current_user.id)
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching cart: {str(e)}")


@router.post("/add")
async def add_to_cart(data: CartItemAdd, current_user: TokenUser = Depends(get_current_user)):
    try:
        cart = CartService().add_item(current_user.id, data.product_id, data.quantity, data.customization)
        return {
            "status": "success",
            "message": "Item added to cart",
            "data": cart
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error adding to cart: {str(e)}")


@router.put("/update/{product_id}")
async def update_cart_item(
    product_id: int,
    data: CartItemQuantity,
    current_user: TokenUser = Depends(get_current_user)
):
    try:
        cart = CartService().update_quantity(current_user.id, product_id, data.quantity)
        return {
            "status": "success",
            "message": "Cart updated",
            "data": cart
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating cart: {str(e)}")


@router.delete("/remove/{product_id}")
async def remove_from_cart(product_id: int, current_user: TokenUser = Depends(get_current_user)):
    try:
        cart = CartService().remove_item(current_user.id, product_id)
        return {
            "status": "success",
            "message": "Item removed from cart",
            "data": cart
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error removing from cart: {str(e)}")


@router.delete("/clear")
async def clear_cart(current_user: TokenUser = Depends(get_current_user)):
    try:
        cart = CartService().clear(current_user.id)
        return {
            "status": "success",
            "message": "Cart cleared",
            "data": cart
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error clearing cart: {str(e)}")


@router.post("/coupon")
async def apply_coupon(data: CouponApply, current_user: TokenUser = Depends(get_current_user)):
    try:
        cart = CartService().apply_coupon(current_user.id, data.coupon_code)
        return {
            "status": "success",
            "message": "Coupon applied successfully",
            "data": cart
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error applying coupon: {str(e)}")


@router.delete("/coupon")
async def remove_coupon(current_user: TokenUser = Depends(get_current_user)):
    try:
        cart = CartService().remove_coupon(current_user.id)
        return {
            "status": "success",
            "message": "Coupon removed",
            "data": cart
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error removing coupon: {str(e)}")


@router.get("/summary")
async def get_cart_summary(current_user: TokenUser = Depends(get_current_user)):
    try:
        return {
            "status": "success",
            "data": CartService().get_summary(current_user.id)
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching cart summary: {str(e)}")


@router.post("/validate")
async def validate_cart(current_user: TokenUser = Depends(get_current_user)):
    """Check every line against current stock before checkout"""
    try:
        return {
            "status": "success",
            "data": CartService().validate(current_user.id)
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error validating cart: {str(e)}")
