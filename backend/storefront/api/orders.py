"""
Orders API Endpoints
Customer order history, cancellation and refunds, plus order administration

Author: Taksha Engineering
Date: 2025-10-17
"""
from datetime import datetime
from typing import Optional, Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.core.auth import TokenUser, get_current_user, require_admin
from storefront.core.exceptions import StoreError, to_http_exception
from storefront.domain.constants import OrderStatus, PaymentStatus, pagination_block
from storefront.domain.order import OrderCancel, RefundRequest, ShippingUpdate, StatusUpdate
from storefront.services.order_service import OrderService

router = APIRouter()

OrderSort = Literal["newest", "oldest", "amount_high", "amount_low"]
AnalyticsPeriod = Literal["7d", "30d", "90d", "1y"]


@router.get("/")
async def get_my_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    status: Optional[OrderStatus] = Query(None, description="Filter by order status"),
    current_user: TokenUser = Depends(get_current_user)
):
    """Orders of the authenticated customer, newest first"""
    try:
        orders, total = OrderService().list_user_orders(
            current_user.id,
            status=status,
            limit=limit,
            offset=(page - 1) * limit
        )

        return {
            "status": "success",
            "data": [order.to_dict() for order in orders],
            "pagination": pagination_block(page, limit, total, label="total_orders")
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


# =============================================================================
# Administration (admin only); declared before /{order_id}
# =============================================================================

@router.get("/admin/all")
async def get_all_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[OrderStatus] = Query(None),
    payment_status: Optional[PaymentStatus] = Query(None),
    search: Optional[str] = Query(None, description="Order number, customer or recipient"),
    sort: OrderSort = Query("newest"),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    current_user: TokenUser = Depends(require_admin)
):
    try:
        orders, total = OrderService().list_orders(
            status=status,
            payment_status=payment_status,
            search=search,
            date_from=date_from,
            date_to=date_to,
            sort=sort,
            limit=limit,
            offset=(page - 1) * limit
        )

        return {
            "status": "success",
            "data": [order.to_dict() for order in orders],
            "pagination": pagination_block(page, limit, total, label="total_orders")
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@router.get("/admin/analytics")
async def get_order_analytics(
    period: AnalyticsPeriod = Query("30d"),
    current_user: TokenUser = Depends(require_admin)
):
    try:
        return {
            "status": "success",
            "data": OrderService().get_analytics(period)
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching order analytics: {str(e)}")


@router.put("/admin/{order_id}/status")
async def update_order_status(
    order_id: int,
    data: StatusUpdate,
    current_user: TokenUser = Depends(require_admin)
):
    try:
        order = OrderService().update_status(
            order_id,
            data.status,
            message=data.message,
            location=data.location,
            updated_by=current_user.id
        )

        return {
            "status": "success",
            "message": "Order status updated successfully",
            "data": order.to_dict()
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating order status: {str(e)}")


@router.put("/admin/{order_id}/shipping")
async def update_order_shipping(
    order_id: int,
    data: ShippingUpdate,
    current_user: TokenUser = Depends(require_admin)
):
    try:
        order = OrderService().update_shipping(order_id, data.model_dump(exclude_unset=True))
        return {
            "status": "success",
            "message": "Shipping details updated successfully",
            "data": order.to_dict()
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating shipping: {str(e)}")


# =============================================================================
# Single order (owner or admin)
# =============================================================================

@router.get("/number/{order_number}")
async def get_order_by_number(order_number: str, current_user: TokenUser = Depends(get_current_user)):
    try:
        order = OrderService().get_order_by_number(order_number, current_user)
        return {"status": "success", "data": order.to_dict()}

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching order: {str(e)}")


@router.get("/{order_id}")
async def get_order(order_id: int, current_user: TokenUser = Depends(get_current_user)):
    try:
        order = OrderService().get_order(order_id, current_user)
        return {"status": "success", "data": order.to_dict()}

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching order: {str(e)}")


@router.put("/{order_id}/cancel")
async def cancel_order(
    order_id: int,
    data: OrderCancel,
    current_user: TokenUser = Depends(get_current_user)
):
    try:
        order = OrderService().cancel_order(order_id, current_user, data.reason)
        return {
            "status": "success",
            "message": "Order cancelled successfully",
            "data": order.to_dict()
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error cancelling order: {str(e)}")


@router.post("/{order_id}/refund")
async def request_refund(
    order_id: int,
    data: RefundRequest,
    current_user: TokenUser = Depends(get_current_user)
):
    try:
        order = OrderService().request_refund(order_id, current_user, data.reason, data.amount)
        return {
            "status": "success",
            "message": "Refund request submitted successfully",
            "data": order.to_dict()
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error requesting refund: {str(e)}")


@router.get("/{order_id}/tracking")
async def get_order_tracking(order_id: int, current_user: TokenUser = Depends(get_current_user)):
    try:
        return {
            "status": "success",
            "data": OrderService().get_tracking(order_id, current_user)
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching tracking: {str(e)}")
