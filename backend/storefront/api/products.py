"""
Products API Endpoints
Handles product catalog queries, reviews and catalog management

Author: Taksha Engineering
Date: 2025-10-17
"""
import logging
from typing import Optional, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status

from storefront.core.auth import TokenUser, get_current_user, get_current_user_optional, require_admin
from storefront.core.exceptions import StoreError, NotFoundError, ValidationError, to_http_exception
from storefront.domain.constants import PRODUCT_CATEGORIES, ProductCategory, ProductSeries, pagination_block
from storefront.domain.product import Product, ProductCreate, ProductUpdate, ReviewCreate, StockUpdate
from storefront.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)

router = APIRouter()

ProductSort = Literal["price_asc", "price_desc", "name_asc", "name_desc", "rating_desc", "newest", "oldest"]


def _visible(product: Optional[Product], user: Optional[TokenUser]) -> Product:
    """Inactive products only exist for admins"""
    if not product or (not product.is_active and not (user and user.is_admin)):
        raise NotFoundError("Product")
    return product


@router.get("/")
async def get_products(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    category: Optional[ProductCategory] = Query(None, description="Filter by category"),
    series: Optional[ProductSeries] = Query(None, description="Filter by series"),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    search: Optional[str] = Query(None, description="Search name, description and tags"),
    is_new: Optional[bool] = Query(None),
    is_limited: Optional[bool] = Query(None),
    is_featured: Optional[bool] = Query(None),
    sort: ProductSort = Query("newest")
):
    """
    Get active products with optional filters

    Returns products plus a pagination block
    """
    try:
        repo = ProductRepository()

        products, total = repo.find_all(
            category=category,
            series=series,
            min_price=min_price,
            max_price=max_price,
            search=search,
            is_new=is_new,
            is_limited=is_limited,
            is_featured=is_featured,
            sort=sort,
            limit=limit,
            offset=(page - 1) * limit
        )

        return {
            "status": "success",
            "data": [product.to_dict() for product in products],
            "pagination": pagination_block(page, limit, total, label="total_products")
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.get("/featured")
async def get_featured_products(limit: int = Query(10, ge=1, le=50)):
    try:
        products = ProductRepository().find_featured(limit=limit)
        return {
            "status": "success",
            "data": [product.to_dict() for product in products]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching featured products: {str(e)}")


@router.get("/new")
async def get_new_products(limit: int = Query(10, ge=1, le=50)):
    try:
        products = ProductRepository().find_new(limit=limit)
        return {
            "status": "success",
            "data": [product.to_dict() for product in products]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching new products: {str(e)}")


@router.get("/category/{category}")
async def get_products_by_category(
    category: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort: ProductSort = Query("newest")
):
    try:
        if category not in PRODUCT_CATEGORIES:
            raise ValidationError("Invalid category")

        products, total = ProductRepository().find_all(
            category=category,
            sort=sort,
            limit=limit,
            offset=(page - 1) * limit
        )

        return {
            "status": "success",
            "category": category,
            "data": [product.to_dict() for product in products],
            "pagination": pagination_block(page, limit, total, label="total_products")
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.get("/search/{query}")
async def search_products(
    query: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    category: Optional[ProductCategory] = Query(None),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0)
):
    try:
        products, total = ProductRepository().find_all(
            search=query,
            category=category,
            min_price=min_price,
            max_price=max_price,
            limit=limit,
            offset=(page - 1) * limit
        )

        return {
            "status": "success",
            "query": query,
            "data": [product.to_dict() for product in products],
            "pagination": pagination_block(page, limit, total, label="total_products")
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error searching products: {str(e)}")


@router.get("/slug/{slug}")
async def get_product_by_slug(
    slug: str,
    current_user: Optional[TokenUser] = Depends(get_current_user_optional)
):
    try:
        repo = ProductRepository()
        product = _visible(repo.find_by_slug(slug), current_user)

        repo.increment_view_count(product.id)
        product.view_count += 1

        return {"status": "success", "data": product.to_dict()}

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching product: {str(e)}")


@router.get("/{product_id}")
async def get_product(
    product_id: int,
    current_user: Optional[TokenUser] = Depends(get_current_user_optional)
):
    """Product details with its latest reviews; counts a view"""
    try:
        repo = ProductRepository()
        product = _visible(repo.find_by_id(product_id), current_user)

        repo.increment_view_count(product.id)
        product.view_count += 1

        reviews, review_total = repo.find_reviews(product.id, limit=10)
        data = product.to_dict()
        data["reviews"] = [review.model_dump(mode="json") for review in reviews]
        data["review_count"] = review_total

        return {"status": "success", "data": data}

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching product: {str(e)}")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_product(data: ProductCreate, current_user: TokenUser = Depends(require_admin)):
    try:
        product = ProductRepository().create(data, created_by=current_user.id)
        logger.info(f"Product {product.id} ({product.sku}) created by {current_user.id}")

        return {
            "status": "success",
            "message": "Product created successfully",
            "data": product.to_dict()
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating product: {str(e)}")


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    data: ProductUpdate,
    current_user: TokenUser = Depends(require_admin)
):
    try:
        product = ProductRepository().update(product_id, data.model_dump(exclude_unset=True))
        if not product:
            raise NotFoundError("Product")

        return {
            "status": "success",
            "message": "Product updated successfully",
            "data": product.to_dict()
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating product: {str(e)}")


@router.delete("/{product_id}")
async def delete_product(product_id: int, current_user: TokenUser = Depends(require_admin)):
    """Soft delete: the product is deactivated, orders keep referencing it"""
    try:
        if not ProductRepository().soft_delete(product_id):
            raise NotFoundError("Product")

        logger.info(f"Product {product_id} deactivated by {current_user.id}")
        return {
            "status": "success",
            "message": "Product deleted successfully"
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting product: {str(e)}")


@router.get("/{product_id}/reviews")
async def get_reviews(
    product_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50)
):
    try:
        reviews, total = ProductRepository().find_reviews(product_id, limit=limit, offset=(page - 1) * limit)

        return {
            "status": "success",
            "data": [review.model_dump(mode="json") for review in reviews],
            "pagination": pagination_block(page, limit, total, label="total_reviews")
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching reviews: {str(e)}")


@router.post("/{product_id}/reviews", status_code=status.HTTP_201_CREATED)
async def add_review(
    product_id: int,
    data: ReviewCreate,
    current_user: TokenUser = Depends(get_current_user)
):
    try:
        repo = ProductRepository()
        product = repo.find_by_id(product_id)
        if not product:
            raise NotFoundError("Product")
        if not product.is_active:
            raise ValidationError("Cannot review inactive product")

        review = repo.add_review(
            product_id,
            current_user.id,
            current_user.name or current_user.email,
            data.rating,
            data.comment
        )

        return {
            "status": "success",
            "message": "Review added successfully",
            "data": review.model_dump(mode="json")
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error adding review: {str(e)}")


@router.patch("/{product_id}/stock")
async def update_stock(
    product_id: int,
    data: StockUpdate,
    current_user: TokenUser = Depends(require_admin)
):
    try:
        if data.reserved is not None and data.reserved > data.quantity:
            raise ValidationError("Reserved stock cannot exceed quantity")

        product = ProductRepository().set_stock(product_id, data.quantity, data.reserved)
        if not product:
            raise NotFoundError("Product")

        logger.info(f"Stock of product {product_id} set to {data.quantity} by {current_user.id}")
        return {
            "status": "success",
            "message": "Stock updated successfully",
            "data": {
                "id": product.id,
                "stock": product.stock.model_dump(),
                "stock_status": product.stock_status,
                "available_stock": product.available_stock
            }
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating stock: {str(e)}")
