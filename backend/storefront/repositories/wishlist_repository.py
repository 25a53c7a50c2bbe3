"""
Wishlist Repository - Data Access Layer for wishlists

Author: Taksha Engineering
Date: 2025-10-17
"""
from typing import List

from storefront.domain.wishlist import Wishlist, WishlistItem
from storefront.core.database import get_db_connection_dict


class WishlistRepository:

    def get(self, user_id: int) -> Wishlist:
        """Wishlist with the saved product ids, newest first"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT product_id, added_at
                FROM wishlist_items
                WHERE user_id = %s
                ORDER BY added_at DESC, id DESC
            """, (user_id,))
            items = [WishlistItem(product_id=row['product_id'], added_at=row['added_at']) for row in cursor.fetchall()]
            return Wishlist(user_id=user_id, items=items)
        finally:
            cursor.close()
            conn.close()

    def contains(self, user_id: int, product_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                "SELECT 1 FROM wishlist_items WHERE user_id = %s AND product_id = %s",
                (user_id, product_id),
            )
            return cursor.fetchone() is not None
        finally:
            cursor.close()
            conn.close()

    def add(self, user_id: int, product_id: int) -> bool:
        """Insert the item; returns False if it was already there"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO wishlist_items (user_id, product_id, added_at)
                VALUES (%s, %s, NOW())
                ON CONFLICT (user_id, product_id) DO NOTHING
            """, (user_id, product_id))
            inserted = cursor.rowcount > 0
            conn.commit()
            return inserted
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def remove(self, user_id: int, product_id: int) -> bool:
        """Delete the item; returns False if it was not there"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                "DELETE FROM wishlist_items WHERE user_id = %s AND product_id = %s",
                (user_id, product_id),
            )
            removed = cursor.rowcount > 0
            conn.commit()
            return removed
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def clear(self, user_id: int) -> List[int]:
        """Delete every item; returns the product ids that were removed"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                "DELETE FROM wishlist_items WHERE user_id = %s RETURNING product_id",
                (user_id,),
            )
            removed = [row['product_id'] for row in cursor.fetchall()]
            conn.commit()
            return removed
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()
