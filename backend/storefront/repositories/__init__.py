"""
Repository Layer - Data Access

This layer handles all database queries and returns domain models.
Repositories abstract away SQL details from business logic.

Author: Taksha Engineering
Date: 2025-10-17
"""
from storefront.repositories.user_repository import UserRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.repositories.cart_repository import CartRepository
from storefront.repositories.wishlist_repository import WishlistRepository
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.blog_repository import BlogRepository
from storefront.repositories.analytics_repository import AnalyticsRepository

__all__ = [
    'UserRepository',
    'ProductRepository',
    'CartRepository',
    'WishlistRepository',
    'OrderRepository',
    'BlogRepository',
    'AnalyticsRepository',
]
