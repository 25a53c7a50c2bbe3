"""
Wishlist Service

Author: Taksha Engineering
Date: 2025-10-17
"""
import logging
from typing import Dict, Optional

from storefront.core.exceptions import ConflictError, NotFoundError, ValidationError
from storefront.domain.wishlist import Wishlist, WishlistSort
from storefront.repositories.product_repository import ProductRepository
from storefront.repositories.wishlist_repository import WishlistRepository
from storefront.services.cart_service import CartService

logger = logging.getLogger(__name__)


class WishlistService:
    """Wishlist operations, keeping product wishlist counters in step"""

    def __init__(
        self,
        wishlist_repo: Optional[WishlistRepository] = None,
        product_repo: Optional[ProductRepository] = None,
        cart_service: Optional[CartService] = None,
    ):
        self.wishlist_repo = wishlist_repo or WishlistRepository()
        self.product_repo = product_repo or ProductRepository()
        self.cart_service = cart_service or CartService(product_repo=self.product_repo)

    def _load(self, user_id: int) -> Wishlist:
        """Wishlist with product summaries attached; inactive products are hidden"""
        wishlist = self.wishlist_repo.get(user_id)
        products = self.product_repo.find_by_ids([item.product_id for item in wishlist.items])

        visible = []
        for item in wishlist.items:
            product = products.get(item.product_id)
            if product and product.is_active:
                item.product = product.to_summary()
                visible.append(item)
        wishlist.items = visible
        return wishlist

    def get_wishlist(self, user_id: int) -> Dict:
        wishlist = self._load(user_id)
        return wishlist.to_dict()

    def add(self, user_id: int, product_id: int) -> Dict:
        product = self.product_repo.find_by_id(product_id)
        if not product or not product.is_active:
            raise NotFoundError("Product")

        if not self.wishlist_repo.add(user_id, product_id):
            raise ConflictError("Product already in wishlist")

        self.product_repo.adjust_wishlist_count([product_id], 1)
        return self.get_wishlist(user_id)

    def remove(self, user_id: int, product_id: int) -> Dict:
        if not self.wishlist_repo.remove(user_id, product_id):
            raise NotFoundError("Product", "Product not found in wishlist")

        self.product_repo.adjust_wishlist_count([product_id], -1)
        return self.get_wishlist(user_id)

    def toggle(self, user_id: int, product_id: int) -> Dict:
        if self.wishlist_repo.contains(user_id, product_id):
            wishlist = self.remove(user_id, product_id)
            action = "removed"
        else:
            wishlist = self.add(user_id, product_id)
            action = "added"

        return {
            "action": action,
            "in_wishlist": action == "added",
            "wishlist": wishlist,
        }

    def clear(self, user_id: int) -> Dict:
        removed = self.wishlist_repo.clear(user_id)
        if removed:
            self.product_repo.adjust_wishlist_count(removed, -1)
            logger.info(f"Cleared {len(removed)} item(s) from wishlist of user {user_id}")
        return Wishlist(user_id=user_id).to_dict()

    def summary(self, user_id: int) -> Dict:
        return self._load(user_id).summary()

    def check(self, user_id: int, product_id: int) -> Dict:
        return {
            "product_id": product_id,
            "in_wishlist": self.wishlist_repo.contains(user_id, product_id),
        }

    def filter_by(self, user_id: int, field: str, value: str) -> Dict:
        """Items whose product `field` (category or series) equals `value`"""
        wishlist = self._load(user_id)
        return wishlist.to_dict(wishlist.filter_by(field, value))

    def sorted_items(self, user_id: int, sort_by: WishlistSort) -> Dict:
        wishlist = self._load(user_id)
        return wishlist.to_dict(wishlist.sorted_items(sort_by))

    def in_price_range(self, user_id: int, min_price: float, max_price: float) -> Dict:
        if min_price < 0 or max_price < 0:
            raise ValidationError("Prices must be non-negative")
        if min_price > max_price:
            raise ValidationError("Minimum price cannot be greater than maximum price")

        wishlist = self._load(user_id)
        return wishlist.to_dict(wishlist.in_price_range(min_price, max_price))

    def move_to_cart(self, user_id: int, product_id: int, quantity: int = 1) -> Dict:
        """Add the product to the cart (stock checked) and drop it from the wishlist"""
        if not self.wishlist_repo.contains(user_id, product_id):
            raise NotFoundError("Product", "Product not found in wishlist")

        cart = self.cart_service.add_item(user_id, product_id, quantity)

        self.wishlist_repo.remove(user_id, product_id)
        self.product_repo.adjust_wishlist_count([product_id], -1)

        return {
            "cart": cart,
            "wishlist": self.get_wishlist(user_id),
        }
