"""
Cart Repository - Data Access Layer for shopping carts

Author: Taksha Engineering
Date: 2025-10-17
"""
from decimal import Decimal
from psycopg2.extras import Json

from storefront.domain.cart import Cart, CartItem
from storefront.core.database import get_db_connection_dict


class CartRepository:
    """
    Loads and stores the Cart aggregate (cart row + its item rows)
    """

    def get_or_create(self, user_id: int) -> Cart:
        """Return the user's cart, or an empty unsaved one"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT user_id, coupon_code, coupon_discount, updated_at
                FROM carts
                WHERE user_id = %s
            """, (user_id,))
            cart_row = cursor.fetchone()
            if not cart_row:
                return Cart(user_id=user_id)

            cursor.execute("""
                SELECT product_id, quantity, price, customization, added_at
                FROM cart_items
                WHERE user_id = %s
                ORDER BY added_at, id
            """, (user_id,))
            items = [
                CartItem(
                    product_id=row['product_id'],
                    quantity=row['quantity'],
                    price=row['price'],
                    customization=row.get('customization') or {},
                    added_at=row['added_at'],
                )
                for row in cursor.fetchall()
            ]

            return Cart(
                user_id=user_id,
                items=items,
                coupon_code=cart_row['coupon_code'],
                coupon_discount=cart_row['coupon_discount'] or Decimal("0"),
                updated_at=cart_row['updated_at'],
            )
        finally:
            cursor.close()
            conn.close()

    def save(self, cart: Cart) -> Cart:
        """Replace the stored cart with `cart` in one transaction"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO carts (user_id, coupon_code, coupon_discount, updated_at)
                VALUES (%s, %s, %s, NOW())
                ON CONFLICT (user_id) DO UPDATE
                SET coupon_code = EXCLUDED.coupon_code,
                    coupon_discount = EXCLUDED.coupon_discount,
                    updated_at = NOW()
            """, (cart.user_id, cart.coupon_code, cart.coupon_discount))

            cursor.execute("DELETE FROM cart_items WHERE user_id = %s", (cart.user_id,))

            for item in cart.items:
                cursor.execute("""
                    INSERT INTO cart_items (user_id, product_id, quantity, price, customization, added_at)
                    VALUES (%s, %s, %s, %s, %s, %s)
                """, (
                    cart.user_id,
                    item.product_id,
                    item.quantity,
                    item.price,
                    Json(item.customization),
                    item.added_at,
                ))

            conn.commit()
            return cart
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def clear(self, user_id: int) -> None:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM cart_items WHERE user_id = %s", (user_id,))
            cursor.execute("""
                UPDATE carts SET coupon_code = NULL, coupon_discount = 0, updated_at = NOW()
                WHERE user_id = %s
            """, (user_id,))
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()
