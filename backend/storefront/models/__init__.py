"""
Database table models

Importing this package registers every table on `Base.metadata`.
"""
from .user import User
from .product import Product, ProductReview
from .cart import Cart, CartItem, WishlistItem
from .order import Order
from .blog import BlogPost, BlogComment

__all__ = [
    "User",
    "Product",
    "ProductReview",
    "Cart",
    "CartItem",
    "WishlistItem",
    "Order",
    "BlogPost",
    "BlogComment",
]
