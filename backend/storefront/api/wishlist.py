"""
Wishlist API Endpoints
Saved products of the caller, with filters and move-to-cart

Author: Taksha Engineering
Date: 2025-10-17
"""
from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.core.auth import TokenUser, get_current_user
from storefront.core.exceptions import StoreError, to_http_exception
from storefront.domain.constants import ProductCategory, ProductSeries
from storefront.domain.wishlist import MoveToCart, WishlistAdd, WishlistSort
from storefront.services.wishlist_service import WishlistService

router = APIRouter()


@router.get("/")
async def get_wishlist(current_user: TokenUser = Depends(get_current_user)):
    try:
        return {
            "status": "success",
            "data": WishlistService().get_wishlist(current_user.id)
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching wishlist: {str(e)}")


@router.post("/add")
async def add_to_wishlist(data: WishlistAdd, current_user: TokenUser = Depends(get_current_user)):
    try:
        wishlist = WishlistService().add(current_user.id, data.product_id)
        return {
            "status": "success",
            "message": "Product added to wishlist",
            "data": wishlist
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error adding to wishlist: {str(e)}")


@router.delete("/remove/{product_id}")
async def remove_from_wishlist(product_id: int, current_user: TokenUser = Depends(get_current_user)):
    try:
        wishlist = WishlistService().remove(current_user.id, product_id)
        return {
            "status": "success",
            "message": "Product removed from wishlist",
            "data": wishlist
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error removing from wishlist: {str(e)}")


@router.post("/toggle/{product_id}")
async def toggle_wishlist(product_id: int, current_user: TokenUser = Depends(get_current_user)):
    try:
        result = WishlistService().toggle(current_user.id, product_id)
        return {
            "status": "success",
            "message": f"Product {result['action']} {'to' if result['action'] == 'added' else 'from'} wishlist",
            "data": result
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error toggling wishlist: {str(e)}")


@router.delete("/clear")
async def clear_wishlist(current_user: TokenUser = Depends(get_current_user)):
    try:
        wishlist = WishlistService().clear(current_user.id)
        return {
            "status": "success",
            "message": "Wishlist cleared",
            "data": wishlist
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error clearing wishlist: {str(e)}")


@router.get("/summary")
async def get_wishlist_summary(current_user: TokenUser = Depends(get_current_user)):
    try:
        return {
            "status": "success",
            "data": WishlistService().summary(current_user.id)
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching wishlist summary: {str(e)}")


@router.get("/check/{product_id}")
async def check_wishlist(product_id: int, current_user: TokenUser = Depends(get_current_user)):
    try:
        return {
            "status": "success",
            "data": WishlistService().check(current_user.id, product_id)
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error checking wishlist: {str(e)}")


@router.get("/category/{category}")
async def get_wishlist_by_category(category: ProductCategory, current_user: TokenUser = Depends(get_current_user)):
    try:
        return {
            "status": "success",
            "category": category,
            "data": WishlistService().filter_by(current_user.id, "category", category)
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching wishlist: {str(e)}")


@router.get("/series/{series}")
async def get_wishlist_by_series(series: ProductSeries, current_user: TokenUser = Depends(get_current_user)):
    try:
        return {
            "status": "success",
            "series": series,
            "data": WishlistService().filter_by(current_user.id, "series", series)
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching wishlist: {str(e)}")


@router.get("/sorted")
async def get_sorted_wishlist(
    sort_by: WishlistSort = Query("newest"),
    current_user: TokenUser = Depends(get_current_user)
):
    try:
        return {
            "status": "success",
            "sort_by": sort_by,
            "data": WishlistService().sorted_items(current_user.id, sort_by)
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching wishlist: {str(e)}")


@router.get("/price-range")
async def get_wishlist_by_price(
    min_price: float = Query(...),
    max_price: float = Query(...),
    current_user: TokenUser = Depends(get_current_user)
):
    """Range checks live in the service so both bounds report the same way"""
    try:
        return {
            "status": "success",
            "data": WishlistService().in_price_range(current_user.id, min_price, max_price)
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching wishlist: {str(e)}")


@router.post("/move-to-cart")
async def move_to_cart(data: MoveToCart, current_user: TokenUser = Depends(get_current_user)):
    try:
        result = WishlistService().move_to_cart(current_user.id, data.product_id, data.quantity)
        return {
            "status": "success",
            "message": "Product moved to cart",
            "data": result
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error moving product to cart: {str(e)}")
