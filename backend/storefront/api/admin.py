"""
Admin API Endpoints
Dashboard statistics, analytics, inventory alerts and system health

Author: Taksha Engineering
Date: 2025-10-17
"""
from datetime import datetime
from typing import Optional, Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.core.auth import require_admin
from storefront.core.exceptions import StoreError, to_http_exception
from storefront.services.analytics_service import AnalyticsService

# Every endpoint here is admin only
router = APIRouter(dependencies=[Depends(require_admin)])

SalesPeriod = Literal["7d", "30d", "90d", "1y", "custom"]
UserPeriod = Literal["7d", "30d", "90d", "1y"]


@router.get("/dashboard/stats")
async def get_dashboard_stats():
    """
    Dashboard overview

    Returns totals, revenue, recent orders, top products and the
    user, order and blog breakdowns
    """
    try:
        return {
            "status": "success",
            "data": AnalyticsService().dashboard()
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching dashboard stats: {str(e)}")


@router.get("/analytics/sales")
async def get_sales_analytics(
    period: SalesPeriod = Query("30d"),
    start_date: Optional[datetime] = Query(None, description="Required for period=custom"),
    end_date: Optional[datetime] = Query(None, description="Required for period=custom")
):
    try:
        return {
            "status": "success",
            "data": AnalyticsService().sales(period, start_date, end_date)
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching sales analytics: {str(e)}")


@router.get("/analytics/products")
async def get_product_analytics():
    try:
        return {
            "status": "success",
            "data": AnalyticsService().products()
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching product analytics: {str(e)}")


@router.get("/analytics/users")
async def get_user_analytics(period: UserPeriod = Query("30d")):
    try:
        return {
            "status": "success",
            "data": AnalyticsService().users(period)
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching user analytics: {str(e)}")


@router.get("/inventory/alerts")
async def get_inventory_alerts():
    try:
        return {
            "status": "success",
            "data": AnalyticsService().inventory_alerts()
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching inventory alerts: {str(e)}")


@router.get("/activities/recent")
async def get_recent_activities(limit: int = Query(20, ge=4, le=100)):
    try:
        return {
            "status": "success",
            "data": AnalyticsService().recent_activities(limit)
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching recent activities: {str(e)}")


@router.get("/system/health")
async def get_system_health():
    """Database reachability and latency, record counts and uptime"""
    try:
        return {
            "status": "success",
            "data": AnalyticsService().system_health()
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error checking system health: {str(e)}")
