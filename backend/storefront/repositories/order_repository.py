"""
Order Repository - Data Access Layer for Orders

Orders are stored as one row with JSONB documents for the nested
records. `save()` writes the whole aggregate back, keeping the
denormalized filter columns (status, payment_status, total,
razorpay_order_id) in step with the documents.

Author: Taksha Engineering
Date: 2025-10-17
"""
from typing import List, Optional, Tuple, Dict
from datetime import datetime
from psycopg2.extras import Json

from storefront.domain.order import Order
from storefront.core.database import get_db_connection_dict

ORDER_COLUMNS = """
    o.id, o.order_number, o.user_id, o.items, o.shipping_address, o.billing_address,
    o.payment, o.pricing, o.status, o.tracking, o.shipping, o.notes, o.coupon,
    o.refund, o.cancellation, o.is_gift, o.gift_message, o.priority, o.source,
    o.delivered_at, o.created_at, o.updated_at
"""

SORT_OPTIONS = {
    "newest": "o.created_at DESC",
    "oldest": "o.created_at ASC",
    "amount_high": "o.total DESC",
    "amount_low": "o.total ASC",
}

DOCUMENT_FIELDS = (
    "items", "shipping_address", "billing_address", "payment", "pricing",
    "tracking", "shipping", "notes", "coupon", "refund", "cancellation",
)


class OrderRepository:
    """
    Repository for Order data access

    Returns Order domain models.
    """

    @staticmethod
    def _map_row_to_order(row: dict) -> Order:
        data = dict(row)
        for key in ("shipping", "notes", "coupon", "refund", "cancellation"):
            data[key] = data.get(key) or {}
        return Order(**data)

    @staticmethod
    def _documents(order: Order) -> Dict:
        dumped = order.model_dump(mode="json", include=set(DOCUMENT_FIELDS))
        return {key: Json(value) if value is not None else None for key, value in dumped.items()}

    def find_by_id(self, order_id: int) -> Optional[Order]:
        return self._find_one("o.id = %s", order_id)

    def find_by_number(self, order_number: str) -> Optional[Order]:
        return self._find_one("o.order_number = %s", order_number)

    def find_by_razorpay_order_id(self, razorpay_order_id: str) -> Optional[Order]:
        return self._find_one("o.razorpay_order_id = %s", razorpay_order_id)

    def find_by_payment_id(self, payment_id: str) -> Optional[Order]:
        return self._find_one("o.payment->>'razorpay_payment_id' = %s", payment_id)

    def find_by_refund_id(self, refund_id: str) -> Optional[Order]:
        return self._find_one("o.refund->>'refund_id' = %s", refund_id)

    def _find_one(self, condition: str, value) -> Optional[Order]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {ORDER_COLUMNS} FROM orders o WHERE {condition}", (value,))
            row = cursor.fetchone()
            return self._map_row_to_order(row) if row else None
        finally:
            cursor.close()
            conn.close()

    def create(self, order: Order) -> Order:
        """Insert a new order and return it with its id and timestamps"""
        docs = self._documents(order)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO orders AS o (
                    order_number, user_id, items, shipping_address, billing_address,
                    payment, payment_status, razorpay_order_id, pricing, total,
                    status, tracking, shipping, notes, coupon, refund, cancellation,
                    is_gift, gift_message, priority, source, created_at, updated_at
                ) VALUES (
                    %s, %s, %s, %s, %s,
                    %s, %s, %s, %s, %s,
                    %s, %s, %s, %s, %s, %s, %s,
                    %s, %s, %s, %s, NOW(), NOW()
                )
                RETURNING {ORDER_COLUMNS}
            """, (
                order.order_number, order.user_id, docs["items"], docs["shipping_address"],
                docs["billing_address"],
                docs["payment"], order.payment.status, order.payment.razorpay_order_id,
                docs["pricing"], order.pricing.total,
                order.status, docs["tracking"], docs["shipping"], docs["notes"], docs["coupon"],
                docs["refund"], docs["cancellation"],
                order.is_gift, order.gift_message, order.priority, order.source,
            ))
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_order(row)
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def save(self, order: Order) -> Order:
        """Write every mutable part of an existing order"""
        docs = self._documents(order)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE orders AS o SET
                    items = %s, shipping_address = %s, billing_address = %s,
                    payment = %s, payment_status = %s, razorpay_order_id = %s,
                    pricing = %s, total = %s, status = %s, tracking = %s,
                    shipping = %s, notes = %s, coupon = %s, refund = %s,
                    cancellation = %s, delivered_at = %s, updated_at = NOW()
                WHERE o.id = %s
                RETURNING {ORDER_COLUMNS}
            """, (
                docs["items"], docs["shipping_address"], docs["billing_address"],
                docs["payment"], order.payment.status, order.payment.razorpay_order_id,
                docs["pricing"], order.pricing.total, order.status, docs["tracking"],
                docs["shipping"], docs["notes"], docs["coupon"], docs["refund"],
                docs["cancellation"], order.delivered_at,
                order.id,
            ))
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_order(row)
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        user_id: Optional[int] = None,
        status: Optional[str] = None,
        payment_status: Optional[str] = None,
        search: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        sort: str = "newest",
        limit: int = 10,
        offset: int = 0
    ) -> Tuple[List[Order], int]:
        """
        Find orders with filters

        Args:
            user_id: Only orders of this customer
            status / payment_status: Exact match filters
            search: Order number, customer name/email or shipping name
            date_from / date_to: Creation date range (inclusive)
            sort: newest, oldest, amount_high, amount_low

        Returns:
            Tuple of (list of orders, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params = []

            if user_id is not None:
                conditions.append("o.user_id = %s")
                params.append(user_id)

            if status:
                conditions.append("o.status = %s")
                params.append(status)

            if payment_status:
                conditions.append("o.payment_status = %s")
                params.append(payment_status)

            if search:
                conditions.append("""(
                    o.order_number ILIKE %s
                    OR u.name ILIKE %s
                    OR u.email ILIKE %s
                    OR o.shipping_address->>'name' ILIKE %s
                )""")
                search_term = f"%{search}%"
                params.extend([search_term] * 4)

            if date_from:
                conditions.append("o.created_at >= %s")
                params.append(date_from)

            if date_to:
                conditions.append("o.created_at <= %s")
                params.append(date_to)

            where_clause = " AND ".join(conditions) if conditions else "1=1"
            order_by = SORT_OPTIONS.get(sort, SORT_OPTIONS["newest"])

            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM orders o
                LEFT JOIN users u ON u.id = o.user_id
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {ORDER_COLUMNS}
                FROM orders o
                LEFT JOIN users u ON u.id = o.user_id
                WHERE {where_clause}
                ORDER BY {order_by}, o.id DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            orders = [self._map_row_to_order(row) for row in cursor.fetchall()]
            return orders, total

        finally:
            cursor.close()
            conn.close()

    def get_analytics(self, start_date: datetime) -> Dict:
        """
        Order analytics since `start_date`

        Returns:
            Dict with totals over revenue statuses, status distribution and
            daily sales
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT
                    COUNT(*) as total_orders,
                    COALESCE(SUM(total), 0) as total_revenue,
                    COALESCE(AVG(total), 0) as average_order_value,
                    COALESCE(SUM((
                        SELECT SUM((item->>'quantity')::int)
                        FROM jsonb_array_elements(items) item
                    )), 0) as total_items
                FROM orders
                WHERE created_at >= %s
                  AND status IN ('delivered', 'shipped', 'out_for_delivery')
            """, (start_date,))
            summary = cursor.fetchone()

            cursor.execute("""
                SELECT status, COUNT(*) as count
                FROM orders
                WHERE created_at >= %s
                GROUP BY status
                ORDER BY count DESC
            """, (start_date,))
            status_distribution = [dict(row) for row in cursor.fetchall()]

            cursor.execute("""
                SELECT
                    DATE(created_at) as date,
                    COUNT(*) as orders,
                    COALESCE(SUM(total), 0) as revenue
                FROM orders
                WHERE created_at >= %s
                  AND status IN ('delivered', 'shipped', 'out_for_delivery')
                GROUP BY DATE(created_at)
                ORDER BY date
            """, (start_date,))
            daily_sales = [
                {
                    "date": row['date'].isoformat(),
                    "orders": row['orders'],
                    "revenue": float(row['revenue']),
                }
                for row in cursor.fetchall()
            ]

            return {
                "summary": {
                    "total_orders": summary['total_orders'],
                    "total_revenue": float(summary['total_revenue']),
                    "average_order_value": round(float(summary['average_order_value']), 2),
                    "total_items": int(summary['total_items']),
                },
                "status_distribution": status_distribution,
                "daily_sales": daily_sales,
            }

        finally:
            cursor.close()
            conn.close()
