"""
Order Service
Order lifecycle operations that touch both orders and product stock

Author: Taksha Engineering
Date: 2025-10-17
"""
import logging
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from storefront.core.exceptions import NotFoundError, PermissionDeniedError
from storefront.domain.order import Order
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.services.analytics_service import period_start

logger = logging.getLogger(__name__)


def stock_lines(order: Order) -> List[Tuple[int, int]]:
    return [(item.product_id, item.quantity) for item in order.items]


class OrderService:
    """
    Service for order business logic

    Every method that changes an order's status also settles its stock:
    unpaid orders hold reservations, paid orders hold sold units.
    """

    def __init__(
        self,
        order_repo: Optional[OrderRepository] = None,
        product_repo: Optional[ProductRepository] = None,
    ):
        self.order_repo = order_repo or OrderRepository()
        self.product_repo = product_repo or ProductRepository()

    def get_order(self, order_id: int, user) -> Order:
        """
        Load an order visible to `user` (owner or admin)

        Raises:
            NotFoundError: No such order
            PermissionDeniedError: Caller is neither owner nor admin
        """
        order = self.order_repo.find_by_id(order_id)
        return self._check_access(order, user)

    def get_order_by_number(self, order_number: str, user) -> Order:
        order = self.order_repo.find_by_number(order_number)
        return self._check_access(order, user)

    @staticmethod
    def _check_access(order: Optional[Order], user) -> Order:
        if not order:
            raise NotFoundError("Order")
        if not user.is_admin and order.user_id != user.id:
            raise PermissionDeniedError("Access denied. Insufficient permissions.")
        return order

    def list_user_orders(
        self,
        user_id: int,
        status: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Order], int]:
        return self.order_repo.find_all(user_id=user_id, status=status, limit=limit, offset=offset)

    def release_order_stock(self, order: Order, was_paid: bool, held_reservation: bool) -> None:
        """Give back what a cancelled order was holding"""
        lines = stock_lines(order)
        if was_paid:
            self.product_repo.restock(lines)
            logger.info(f"Restocked {len(lines)} line(s) of cancelled order {order.order_number}")
        elif held_reservation:
            self.product_repo.release_stock(lines)
            logger.info(f"Released reservation of order {order.order_number}")

    def cancel(self, order: Order, reason: str, cancelled_by: Optional[int] = None) -> Order:
        """
        Cancel an order and settle its stock

        Raises:
            ValidationError: "Order cannot be cancelled" for final statuses
        """
        was_paid = order.is_paid
        held_reservation = order.holds_reservation

        order.cancel(reason, cancelled_by)
        saved = self.order_repo.save(order)

        self.release_order_stock(order, was_paid, held_reservation)
        logger.info(f"Order {order.order_number} cancelled by {cancelled_by}: {reason}")
        return saved

    def cancel_order(self, order_id: int, user, reason: str) -> Order:
        order = self.get_order(order_id, user)
        return self.cancel(order, reason, user.id)

    def request_refund(self, order_id: int, user, reason: str, amount: Optional[Decimal] = None) -> Order:
        order = self.get_order(order_id, user)
        order.request_refund(reason, amount)
        saved = self.order_repo.save(order)
        logger.info(f"Refund requested for order {order.order_number}: {order.refund.amount}")
        return saved

    def get_tracking(self, order_id: int, user) -> Dict:
        order = self.get_order(order_id, user)
        current = order.current_tracking
        return {
            "order_number": order.order_number,
            "status": order.status,
            "tracking": [event.model_dump(mode="json") for event in order.tracking],
            "current_tracking": current.model_dump(mode="json") if current else None,
            "shipping": order.shipping.model_dump(mode="json"),
            "delivered_at": order.delivered_at.isoformat() if order.delivered_at else None,
        }

    def list_orders(self, **filters) -> Tuple[List[Order], int]:
        return self.order_repo.find_all(**filters)

    def update_status(
        self,
        order_id: int,
        status: str,
        message: Optional[str] = None,
        location: Optional[str] = None,
        updated_by: Optional[int] = None,
    ) -> Order:
        """Admin status change; cancelling goes through the cancel path"""
        order = self.order_repo.find_by_id(order_id)
        if not order:
            raise NotFoundError("Order")

        if status == "cancelled":
            return self.cancel(order, message or "Cancelled by admin", updated_by)

        order.update_status(status, message or f"Order status updated to {status}", location, updated_by)
        saved = self.order_repo.save(order)
        logger.info(f"Order {order.order_number} moved to {status}")
        return saved

    def update_shipping(self, order_id: int, changes: Dict) -> Order:
        order = self.order_repo.find_by_id(order_id)
        if not order:
            raise NotFoundError("Order")

        for key, value in changes.items():
            if value is not None:
                setattr(order.shipping, key, value)
        return self.order_repo.save(order)

    def get_analytics(self, period: str = "30d") -> Dict:
        analytics = self.order_repo.get_analytics(period_start(period))
        analytics["period"] = period
        return analytics
