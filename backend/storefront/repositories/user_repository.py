"""
User Repository - Data Access Layer for Users

Author: Taksha Engineering
Date: 2025-10-17
"""
from typing import List, Optional, Tuple, Dict
from psycopg2.extras import Json

from storefront.domain.user import User
from storefront.core.database import get_db_connection_dict

USER_COLUMNS = """
    id, name, email, password_hash, user_type, phone, profile_picture,
    provider, addresses, preferences, is_verified, is_active, last_login,
    created_at, updated_at
"""

# Columns a caller may change through update()
UPDATABLE_FIELDS = {"name", "phone", "profile_picture", "user_type", "is_active", "is_verified"}


class UserRepository:
    """
    Repository for User data access

    Returns User domain models, never raw rows.
    """

    @staticmethod
    def _map_row_to_user(row: dict) -> User:
        return User(
            id=row['id'],
            name=row['name'],
            email=row['email'],
            password_hash=row.get('password_hash'),
            user_type=row['user_type'],
            phone=row.get('phone'),
            profile_picture=row.get('profile_picture'),
            provider=row.get('provider') or 'email',
            addresses=row.get('addresses') or [],
            preferences=row.get('preferences') or {},
            is_verified=row.get('is_verified', False),
            is_active=row['is_active'],
            last_login=row.get('last_login'),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at'),
        )

    def find_by_id(self, user_id: int) -> Optional[User]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = %s", (user_id,))
            row = cursor.fetchone()
            return self._map_row_to_user(row) if row else None
        finally:
            cursor.close()
            conn.close()

    def find_by_email(self, email: str) -> Optional[User]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE email = %s", (email.lower(),))
            row = cursor.fetchone()
            return self._map_row_to_user(row) if row else None
        finally:
            cursor.close()
            conn.close()

    def create(
        self,
        name: str,
        email: str,
        password_hash: str,
        user_type: str = "individual",
        phone: Optional[str] = None,
    ) -> User:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO users (
                    name, email, password_hash, user_type, phone, provider,
                    addresses, preferences, is_verified, is_active, created_at, updated_at
                ) VALUES (%s, %s, %s, %s, %s, 'email', '[]'::jsonb, %s, FALSE, TRUE, NOW(), NOW())
                RETURNING {USER_COLUMNS}
            """, (
                name,
                email.lower(),
                password_hash,
                user_type,
                phone,
                Json({"notifications": {"email": True, "sms": False, "push": True},
                      "language": "en", "currency": "INR"}),
            ))
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_user(row)
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def update(self, user_id: int, fields: Dict) -> Optional[User]:
        """Update scalar columns; unknown keys are ignored"""
        update_fields = []
        values = []

        for key, value in fields.items():
            if key in UPDATABLE_FIELDS:
                update_fields.append(f"{key} = %s")
                values.append(value)

        if not update_fields:
            return self.find_by_id(user_id)

        update_fields.append("updated_at = NOW()")
        values.append(user_id)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE users
                SET {', '.join(update_fields)}
                WHERE id = %s
                RETURNING {USER_COLUMNS}
            """, values)
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_user(row) if row else None
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def save_profile_documents(self, user: User) -> User:
        """Persist the addresses and preferences documents of `user`"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE users
                SET addresses = %s, preferences = %s, updated_at = NOW()
                WHERE id = %s
                RETURNING {USER_COLUMNS}
            """, (
                Json([address.model_dump(mode="json") for address in user.addresses]),
                Json(user.preferences.model_dump(mode="json")),
                user.id,
            ))
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_user(row)
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def touch_last_login(self, user_id: int) -> None:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("UPDATE users SET last_login = NOW() WHERE id = %s", (user_id,))
            conn.commit()
        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        search: Optional[str] = None,
        user_type: Optional[str] = None,
        is_active: Optional[bool] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[User], int]:
        """
        Find users with filters, newest first

        Returns:
            Tuple of (list of users, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params = []

            if search:
                conditions.append("(name ILIKE %s OR email ILIKE %s)")
                search_term = f"%{search}%"
                params.extend([search_term, search_term])

            if user_type:
                conditions.append("user_type = %s")
                params.append(user_type)

            if is_active is not None:
                conditions.append("is_active = %s")
                params.append(is_active)

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            cursor.execute(f"SELECT COUNT(*) as total FROM users WHERE {where_clause}", params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {USER_COLUMNS}
                FROM users
                WHERE {where_clause}
                ORDER BY created_at DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            users = [self._map_row_to_user(row) for row in cursor.fetchall()]
            return users, total

        finally:
            cursor.close()
            conn.close()

    def get_order_stats(self, user_id: int) -> Dict:
        """Order count and lifetime spend of a user (paid orders only count as spend)"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT
                    COUNT(*) as order_count,
                    COALESCE(SUM(total) FILTER (WHERE payment_status = 'completed'), 0) as total_spent
                FROM orders
                WHERE user_id = %s
            """, (user_id,))
            row = cursor.fetchone()
            return {
                "order_count": row['order_count'],
                "total_spent": float(row['total_spent']),
            }
        finally:
            cursor.close()
            conn.close()

    def get_stats(self) -> Dict:
        """
        User statistics for the admin panel

        Returns:
            Dict with totals, active/inactive counts, breakdown by type and
            registrations in the last 30 days
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT
                    COUNT(*) as total_users,
                    COUNT(*) FILTER (WHERE is_active) as active_users,
                    COUNT(*) FILTER (WHERE NOT is_active) as inactive_users,
                    COUNT(*) FILTER (WHERE created_at >= NOW() - INTERVAL '30 days') as new_users_30d
                FROM users
            """)
            stats = dict(cursor.fetchone())

            cursor.execute("""
                SELECT user_type, COUNT(*) as count
                FROM users
                GROUP BY user_type
                ORDER BY count DESC
            """)
            stats['by_type'] = {row['user_type']: row['count'] for row in cursor.fetchall()}

            return stats

        finally:
            cursor.close()
            conn.close()
