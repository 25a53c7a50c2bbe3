"""
Analytics Repository - Read-only aggregates for the admin dashboard

All figures are computed in SQL over the live tables. Revenue only
counts orders that have left the warehouse (shipped, out for delivery,
delivered).

Author: Taksha Engineering
Date: 2025-10-17
"""
from typing import Dict, List, Optional
from datetime import date, datetime
from decimal import Decimal

from storefront.core.database import get_db_connection_dict
from storefront.domain.constants import REVENUE_STATUSES

LOW_STOCK_LIMIT = 5
OVERSTOCK_LIMIT = 100

REVENUE_FILTER = "status IN ({})".format(", ".join(f"'{s}'" for s in REVENUE_STATUSES))


def _plain(row: Dict) -> Dict:
    """Convert DB types (Decimal, date) into JSON friendly values"""
    result = {}
    for key, value in dict(row).items():
        if isinstance(value, Decimal):
            value = float(value)
        elif isinstance(value, (datetime, date)):
            value = value.isoformat()
        result[key] = value
    return result


class AnalyticsRepository:

    def _query(self, queries: Dict[str, tuple]) -> Dict[str, List[Dict]]:
        """
        Run several read queries on one connection

        Args:
            queries: name -> (sql, params)

        Returns:
            name -> list of plain dict rows
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            results = {}
            for name, (sql, params) in queries.items():
                cursor.execute(sql, params)
                results[name] = [_plain(row) for row in cursor.fetchall()]
            return results
        finally:
            cursor.close()
            conn.close()

    def get_dashboard_stats(self) -> Dict:
        results = self._query({
            "counts": ("""
                SELECT
                    (SELECT COUNT(*) FROM users) as total_users,
                    (SELECT COUNT(*) FROM products) as total_products,
                    (SELECT COUNT(*) FROM orders) as total_orders,
                    (SELECT COUNT(*) FROM blog_posts) as total_blogs
            """, ()),
            "revenue": (f"""
                SELECT COALESCE(SUM(total), 0) as total_revenue
                FROM orders
                WHERE {REVENUE_FILTER}
            """, ()),
            "recent_orders": ("""
                SELECT o.id, o.order_number, o.status, o.total, o.created_at,
                       u.name as customer_name, u.email as customer_email
                FROM orders o
                LEFT JOIN users u ON u.id = o.user_id
                ORDER BY o.created_at DESC
                LIMIT 5
            """, ()),
            "top_products": ("""
                SELECT id, name, price, sales_count, images->0->>'url' as image
                FROM products
                WHERE is_active = TRUE
                ORDER BY sales_count DESC, id
                LIMIT 5
            """, ()),
            "user_types": ("""
                SELECT user_type as type, COUNT(*) as count
                FROM users GROUP BY user_type ORDER BY count DESC
            """, ()),
            "order_statuses": ("""
                SELECT status, COUNT(*) as count
                FROM orders GROUP BY status ORDER BY count DESC
            """, ()),
            "blog_statuses": ("""
                SELECT status, COUNT(*) as count
                FROM blog_posts GROUP BY status ORDER BY count DESC
            """, ()),
        })

        overview = results["counts"][0]
        overview["total_revenue"] = results["revenue"][0]["total_revenue"]

        return {
            "overview": overview,
            "recent_orders": results["recent_orders"],
            "top_products": results["top_products"],
            "user_stats": results["user_types"],
            "order_stats": results["order_statuses"],
            "blog_stats": results["blog_statuses"],
        }

    def get_sales_analytics(self, start_date: datetime, end_date: Optional[datetime] = None) -> Dict:
        """
        Sales breakdowns between `start_date` and `end_date` (default now)

        Item level figures unnest the order items snapshot, so they reflect
        the price and category at purchase time.
        """
        end_date = end_date or datetime.now(start_date.tzinfo)
        window = (start_date, end_date)

        items_from = f"""
            FROM orders o, jsonb_array_elements(o.items) item
            WHERE o.created_at BETWEEN %s AND %s
              AND o.{REVENUE_FILTER}
        """

        results = self._query({
            "sales_by_day": (f"""
                SELECT DATE(created_at) as date,
                       COALESCE(SUM(total), 0) as revenue,
                       COUNT(*) as orders,
                       COALESCE(AVG(total), 0) as average_order_value
                FROM orders
                WHERE created_at BETWEEN %s AND %s
                  AND {REVENUE_FILTER}
                GROUP BY DATE(created_at)
                ORDER BY date
            """, window),
            "sales_by_category": (f"""
                SELECT item->>'category' as category,
                       SUM((item->>'price')::numeric * (item->>'quantity')::int) as revenue,
                       SUM((item->>'quantity')::int) as quantity,
                       COUNT(DISTINCT o.id) as orders
                {items_from}
                GROUP BY item->>'category'
                ORDER BY revenue DESC
            """, window),
            "sales_by_series": (f"""
                SELECT item->>'series' as series,
                       SUM((item->>'price')::numeric * (item->>'quantity')::int) as revenue,
                       SUM((item->>'quantity')::int) as quantity,
                       COUNT(DISTINCT o.id) as orders
                {items_from}
                GROUP BY item->>'series'
                ORDER BY revenue DESC
            """, window),
            "top_products": (f"""
                SELECT (item->>'product_id')::int as product_id,
                       MAX(item->>'name') as name,
                       MAX(item->>'category') as category,
                       SUM((item->>'price')::numeric * (item->>'quantity')::int) as revenue,
                       SUM((item->>'quantity')::int) as quantity
                {items_from}
                GROUP BY item->>'product_id'
                ORDER BY revenue DESC
                LIMIT 10
            """, window),
            "order_trends": ("""
                SELECT DATE(created_at) as date, status, COUNT(*) as count
                FROM orders
                WHERE created_at BETWEEN %s AND %s
                GROUP BY DATE(created_at), status
                ORDER BY date
            """, window),
        })

        trends: Dict[str, Dict] = {}
        for row in results.pop("order_trends"):
            day = trends.setdefault(row["date"], {"date": row["date"], "statuses": {}, "total": 0})
            day["statuses"][row["status"]] = row["count"]
            day["total"] += row["count"]
        results["order_trends"] = list(trends.values())

        for row in results["sales_by_day"]:
            row["average_order_value"] = round(row["average_order_value"], 2)

        return results

    def get_product_analytics(self) -> Dict:
        return self._query({
            "by_category": ("""
                SELECT category, COUNT(*) as count,
                       COALESCE(AVG(price), 0) as average_price,
                       COALESCE(SUM(stock_quantity), 0) as total_stock,
                       COALESCE(SUM(sales_count), 0) as total_sales
                FROM products
                GROUP BY category
                ORDER BY count DESC
            """, ()),
            "by_series": ("""
                SELECT series, COUNT(*) as count,
                       COALESCE(AVG(price), 0) as average_price,
                       COALESCE(SUM(sales_count), 0) as total_sales
                FROM products
                GROUP BY series
                ORDER BY count DESC
            """, ()),
            "stock_status": ("""
                SELECT
                    COUNT(*) FILTER (WHERE stock_quantity > stock_threshold) as in_stock,
                    COUNT(*) FILTER (WHERE stock_quantity > 0 AND stock_quantity <= stock_threshold) as low_stock,
                    COUNT(*) FILTER (WHERE stock_quantity = 0) as out_of_stock
                FROM products
                WHERE is_active = TRUE
            """, ()),
            "top_rated": ("""
                SELECT id, name, rating_average, rating_count
                FROM products
                WHERE is_active = TRUE AND rating_count > 0
                ORDER BY rating_average DESC, rating_count DESC
                LIMIT 10
            """, ()),
            "most_viewed": ("""
                SELECT id, name, view_count
                FROM products
                WHERE is_active = TRUE
                ORDER BY view_count DESC, id
                LIMIT 10
            """, ()),
            "most_wishlisted": ("""
                SELECT id, name, wishlist_count
                FROM products
                WHERE is_active = TRUE
                ORDER BY wishlist_count DESC, id
                LIMIT 10
            """, ()),
        })

    def get_user_analytics(self, start_date: datetime) -> Dict:
        results = self._query({
            "registrations": ("""
                SELECT DATE(created_at) as date, COUNT(*) as count
                FROM users
                WHERE created_at >= %s
                GROUP BY DATE(created_at)
                ORDER BY date
            """, (start_date,)),
            "by_type": ("""
                SELECT user_type as type, COUNT(*) as count
                FROM users GROUP BY user_type ORDER BY count DESC
            """, ()),
            "by_provider": ("""
                SELECT provider, COUNT(*) as count
                FROM users GROUP BY provider ORDER BY count DESC
            """, ()),
            "monthly_growth": ("""
                SELECT TO_CHAR(DATE_TRUNC('month', created_at), 'YYYY-MM') as month, COUNT(*) as count
                FROM users
                WHERE created_at >= DATE_TRUNC('month', NOW()) - INTERVAL '11 months'
                GROUP BY DATE_TRUNC('month', created_at)
                ORDER BY month
            """, ()),
            "activity": ("""
                SELECT
                    COUNT(*) FILTER (WHERE is_active) as active,
                    COUNT(*) FILTER (WHERE NOT is_active) as inactive
                FROM users
            """, ()),
            "top_customers": (f"""
                SELECT u.id, u.name, u.email,
                       COUNT(o.id) as order_count,
                       COALESCE(SUM(o.total), 0) as total_spent
                FROM users u
                JOIN orders o ON o.user_id = u.id AND o.{REVENUE_FILTER}
                GROUP BY u.id, u.name, u.email
                ORDER BY total_spent DESC
                LIMIT 10
            """, ()),
        })
        results["activity"] = results["activity"][0]
        return results

    def get_inventory_alerts(self) -> Dict:
        columns = "id, name, sku, category, series, stock_quantity as quantity, stock_reserved as reserved"
        results = self._query({
            "low_stock": (f"""
                SELECT {columns} FROM products
                WHERE is_active = TRUE AND stock_quantity > 0 AND stock_quantity <= %s
                ORDER BY stock_quantity, name
            """, (LOW_STOCK_LIMIT,)),
            "out_of_stock": (f"""
                SELECT {columns} FROM products
                WHERE is_active = TRUE AND stock_quantity = 0
                ORDER BY name
            """, ()),
            "overstocked": (f"""
                SELECT {columns} FROM products
                WHERE is_active = TRUE AND stock_quantity > %s
                ORDER BY stock_quantity DESC, name
            """, (OVERSTOCK_LIMIT,)),
        })
        results["counts"] = {name: len(rows) for name, rows in results.items()}
        return results

    def get_recent_activities(self, limit: int = 20) -> List[Dict]:
        """Latest orders, users, products and posts merged into one feed"""
        per_source = max(1, limit // 4)
        results = self._query({
            "orders": ("""
                SELECT o.order_number, o.total, o.status, o.created_at, u.name as user_name
                FROM orders o LEFT JOIN users u ON u.id = o.user_id
                ORDER BY o.created_at DESC LIMIT %s
            """, (per_source,)),
            "users": ("""
                SELECT name, user_type, created_at
                FROM users ORDER BY created_at DESC LIMIT %s
            """, (per_source,)),
            "products": ("""
                SELECT name, category, price, created_at
                FROM products ORDER BY created_at DESC LIMIT %s
            """, (per_source,)),
            "blogs": ("""
                SELECT b.title, b.status, b.created_at, u.name as author_name
                FROM blog_posts b LEFT JOIN users u ON u.id = b.author_id
                ORDER BY b.created_at DESC LIMIT %s
            """, (per_source,)),
        })

        activities = []
        for row in results["orders"]:
            activities.append({
                "type": "order",
                "title": f"New order #{row['order_number']}",
                "description": f"Order placed by {row['user_name']}",
                "amount": row["total"],
                "status": row["status"],
                "created_at": row["created_at"],
            })
        for row in results["users"]:
            activities.append({
                "type": "user",
                "title": "New user registered",
                "description": f"{row['name']} joined as {row['user_type']}",
                "created_at": row["created_at"],
            })
        for row in results["products"]:
            activities.append({
                "type": "product",
                "title": "New product added",
                "description": f"{row['name']} in {row['category']}",
                "amount": row["price"],
                "created_at": row["created_at"],
            })
        for row in results["blogs"]:
            activities.append({
                "type": "blog",
                "title": "New blog post",
                "description": f"{row['title']} by {row['author_name']}",
                "status": row["status"],
                "created_at": row["created_at"],
            })

        # ISO strings sort chronologically
        activities.sort(key=lambda a: a["created_at"] or "", reverse=True)
        return activities[:limit]

    def get_health_counts(self) -> Dict:
        row = self._query({
            "counts": ("""
                SELECT
                    (SELECT COUNT(*) FROM orders) as orders_total,
                    (SELECT COUNT(*) FROM orders WHERE status = 'pending') as orders_pending,
                    (SELECT COUNT(*) FROM orders WHERE status = 'processing') as orders_processing,
                    (SELECT COUNT(*) FROM users) as users_total,
                    (SELECT COUNT(*) FROM users WHERE is_active) as users_active,
                    (SELECT COUNT(*) FROM products) as products_total,
                    (SELECT COUNT(*) FROM products WHERE is_active) as products_active,
                    (SELECT COUNT(*) FROM products WHERE stock_quantity = 0) as products_out_of_stock
            """, ()),
        })["counts"][0]

        return {
            "orders": {
                "total": row["orders_total"],
                "pending": row["orders_pending"],
                "processing": row["orders_processing"],
            },
            "users": {"total": row["users_total"], "active": row["users_active"]},
            "products": {
                "total": row["products_total"],
                "active": row["products_active"],
                "out_of_stock": row["products_out_of_stock"],
            },
        }
