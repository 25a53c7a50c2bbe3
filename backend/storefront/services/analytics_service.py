"""
Analytics Service
Period handling and assembly of the admin dashboard payloads

Author: Taksha Engineering
Date: 2025-10-17
"""
import time
from datetime import datetime, timezone
from typing import Dict, Optional

from dateutil.relativedelta import relativedelta

from storefront.core.database import check_database
from storefront.core.exceptions import ValidationError
from storefront.repositories.analytics_repository import AnalyticsRepository

PERIODS = {
    "7d": relativedelta(days=7),
    "30d": relativedelta(days=30),
    "90d": relativedelta(days=90),
    "1y": relativedelta(years=1),
}

# Process start, reported as uptime by the system health endpoint
STARTED_AT = time.time()


def period_start(period: str, now: Optional[datetime] = None) -> datetime:
    """
    Start of a reporting period ending at `now`

    Raises:
        ValidationError: Unknown period
    """
    if period not in PERIODS:
        raise ValidationError(f"Invalid period. Use one of: {', '.join(PERIODS)}")
    return (now or datetime.now(timezone.utc)) - PERIODS[period]


class AnalyticsService:

    def __init__(self, repo: Optional[AnalyticsRepository] = None):
        self.repo = repo or AnalyticsRepository()

    def dashboard(self) -> Dict:
        return self.repo.get_dashboard_stats()

    def sales(
        self,
        period: str = "30d",
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Dict:
        """Sales analytics for a named period, or a custom start/end range"""
        if period == "custom":
            if not start_date or not end_date:
                raise ValidationError("start_date and end_date are required for a custom period")
            if start_date > end_date:
                raise ValidationError("start_date must be before end_date")
        else:
            end_date = datetime.now(timezone.utc)
            start_date = period_start(period, end_date)

        data = self.repo.get_sales_analytics(start_date, end_date)
        data["period"] = period
        data["start_date"] = start_date.isoformat()
        data["end_date"] = end_date.isoformat()
        return data

    def products(self) -> Dict:
        return self.repo.get_product_analytics()

    def users(self, period: str = "30d") -> Dict:
        data = self.repo.get_user_analytics(period_start(period))
        data["period"] = period
        return data

    def inventory_alerts(self) -> Dict:
        return self.repo.get_inventory_alerts()

    def recent_activities(self, limit: int = 20) -> Dict:
        return {"activities": self.repo.get_recent_activities(limit)}

    def system_health(self) -> Dict:
        database = check_database()

        health = {
            "database": database,
            "uptime_seconds": round(time.time() - STARTED_AT, 1),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if database["status"] == "connected":
            health.update(self.repo.get_health_counts())
        return health
