"""
Cart Service
Cart operations that need both the cart and the product catalog

Author: Taksha Engineering
Date: 2025-10-17
"""
import logging
from typing import Dict, Optional, Any, Tuple

from storefront.core.exceptions import NotFoundError
from storefront.domain.cart import Cart
from storefront.domain.product import Product
from storefront.repositories.cart_repository import CartRepository
from storefront.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class CartService:
    """
    Service for shopping cart business logic

    Handles:
    - Dropping lines whose product disappeared or was deactivated
    - Stock checks when adding or changing quantities
    - Coupon application
    - Pre-checkout validation
    """

    def __init__(
        self,
        cart_repo: Optional[CartRepository] = None,
        product_repo: Optional[ProductRepository] = None,
    ):
        self.cart_repo = cart_repo or CartRepository()
        self.product_repo = product_repo or ProductRepository()

    def _load(self, user_id: int) -> Tuple[Cart, Dict[int, Product]]:
        """Cart with stale lines removed, plus the products it references"""
        cart = self.cart_repo.get_or_create(user_id)
        products = self.product_repo.find_by_ids([item.product_id for item in cart.items])
        active_ids = [pid for pid, product in products.items() if product.is_active]

        dropped = cart.retain_items(active_ids)
        if dropped:
            logger.info(f"Dropped {len(dropped)} unavailable item(s) from cart of user {user_id}")
            self.cart_repo.save(cart)

        return cart, products

    @staticmethod
    def _serialize(cart: Cart, products: Dict[int, Product]) -> Dict:
        summaries = {pid: product.to_summary() for pid, product in products.items()}
        return cart.to_dict(summaries)

    def _get_active_product(self, product_id: int) -> Product:
        product = self.product_repo.find_by_id(product_id)
        if not product or not product.is_active:
            raise NotFoundError("Product")
        return product

    def get_cart(self, user_id: int) -> Dict:
        cart, products = self._load(user_id)
        return self._serialize(cart, products)

    def add_item(
        self,
        user_id: int,
        product_id: int,
        quantity: int,
        customization: Optional[Dict[str, Any]] = None,
    ) -> Dict:
        """
        Add a product, merging with an existing line

        The merged quantity must fit in the available stock.
        """
        product = self._get_active_product(product_id)
        cart, products = self._load(user_id)

        existing = cart.find_item(product_id)
        product.ensure_available(quantity + (existing.quantity if existing else 0))

        cart.add_item(product_id, quantity, product.price, customization or None)
        self.cart_repo.save(cart)

        products[product_id] = product
        return self._serialize(cart, products)

    def update_quantity(self, user_id: int, product_id: int, quantity: int) -> Dict:
        """Set a line's quantity; 0 removes the line"""
        cart, products = self._load(user_id)

        if quantity > 0 and cart.find_item(product_id):
            product = products.get(product_id) or self._get_active_product(product_id)
            product.ensure_available(quantity)

        cart.update_quantity(product_id, quantity)
        self.cart_repo.save(cart)
        return self._serialize(cart, products)

    def remove_item(self, user_id: int, product_id: int) -> Dict:
        cart, products = self._load(user_id)
        cart.remove_item(product_id)
        self.cart_repo.save(cart)
        return self._serialize(cart, products)

    def clear(self, user_id: int) -> Dict:
        self.cart_repo.clear(user_id)
        return Cart(user_id=user_id).to_dict()

    def apply_coupon(self, user_id: int, code: str) -> Dict:
        cart, products = self._load(user_id)
        discount = cart.apply_coupon(code)
        self.cart_repo.save(cart)
        logger.info(f"Coupon {cart.coupon_code} applied to cart of user {user_id}: {discount}")
        return self._serialize(cart, products)

    def remove_coupon(self, user_id: int) -> Dict:
        cart, products = self._load(user_id)
        cart.remove_coupon()
        self.cart_repo.save(cart)
        return self._serialize(cart, products)

    def get_summary(self, user_id: int) -> Dict:
        cart, _ = self._load(user_id)
        return cart.summary()

    def validate(self, user_id: int) -> Dict:
        """
        Check every line against current availability without changing the cart

        Returns:
            Dict with per-item results and an overall is_valid flag
        """
        cart = self.cart_repo.get_or_create(user_id)
        products = self.product_repo.find_by_ids([item.product_id for item in cart.items])

        results = []
        for item in cart.items:
            product = products.get(item.product_id)
            result = {
                "product_id": item.product_id,
                "name": product.name if product else None,
                "requested_quantity": item.quantity,
                "is_valid": True,
                "error": None,
            }
            if not product or not product.is_active:
                result["is_valid"] = False
                result["error"] = "Product is no longer available"
            elif product.available_stock < item.quantity:
                result["is_valid"] = False
                result["error"] = f"Only {product.available_stock} items available"
            results.append(result)

        is_valid = all(result["is_valid"] for result in results)
        return {
            "is_valid": is_valid,
            "items": results,
            "message": "Cart is valid" if is_valid else "Some items in your cart need attention",
        }
