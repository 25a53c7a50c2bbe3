"""
Domain Layer - Business Entities

Pydantic models for the storefront entities (users, products, carts,
wishlists, orders, blog posts) with their computed properties and the
business rules that only need the entity itself.

Author: Taksha Engineering
Date: 2025-10-17
"""
from storefront.domain.user import User, Address
from storefront.domain.product import Product, Review
from storefront.domain.cart import Cart, CartItem
from storefront.domain.wishlist import Wishlist, WishlistItem
from storefront.domain.order import Order, OrderItem
from storefront.domain.blog import BlogPost, Comment

__all__ = [
    'User', 'Address',
    'Product', 'Review',
    'Cart', 'CartItem',
    'Wishlist', 'WishlistItem',
    'Order', 'OrderItem',
    'BlogPost', 'Comment',
]
