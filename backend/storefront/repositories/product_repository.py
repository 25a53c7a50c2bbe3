"""
Product Repository - Data Access Layer for Products

Handles all database queries for products, their reviews and stock
counters, and returns Product domain models.

Author: Taksha Engineering
Date: 2025-10-17
"""
import logging
from typing import List, Optional, Tuple, Dict, Iterable
from psycopg2.extras import Json

from storefront.core.exceptions import ConflictError, InsufficientStockError, NotFoundError
from storefront.domain.product import Product, ProductCreate, Review, calculate_rating
from storefront.core.database import get_db_connection_dict

logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = """
    id, name, description, category, series, price, original_price, currency,
    images, features, specifications, dimensions, materials, colors, tags,
    sku, stock_quantity, stock_reserved, stock_threshold,
    is_new, is_limited, is_featured, is_active,
    rating_average, rating_count, sales_count, view_count, wishlist_count,
    shipping, slug, seo, created_by, created_at, updated_at
"""

SORT_OPTIONS = {
    "price_asc": "price ASC",
    "price_desc": "price DESC",
    "name_asc": "name ASC",
    "name_desc": "name DESC",
    "rating_desc": "rating_average DESC, rating_count DESC",
    "newest": "created_at DESC",
    "oldest": "created_at ASC",
}

# JSONB columns and the scalar columns that can be written from a ProductUpdate
JSON_FIELDS = {"images", "features", "specifications", "dimensions", "materials", "colors", "tags", "shipping"}
SCALAR_FIELDS = {
    "name", "description", "category", "series", "price", "original_price",
    "is_new", "is_limited", "is_featured", "is_active",
}


class ProductRepository:
    """
    Repository for Product data access

    All SQL queries for products are centralized here.
    Returns Product domain models, not raw dictionaries.
    """

    @staticmethod
    def _map_row_to_product(row: dict) -> Product:
        """Map a products row (flat stock/rating/slug columns) to the nested domain model"""
        seo = dict(row.get('seo') or {})
        seo['slug'] = row.get('slug')
        return Product(
            id=row['id'],
            name=row['name'],
            description=row.get('description') or "",
            category=row['category'],
            series=row['series'],
            price=row['price'],
            original_price=row.get('original_price'),
            currency=row.get('currency') or "INR",
            images=row.get('images') or [],
            features=row.get('features') or [],
            specifications=row.get('specifications') or {},
            dimensions=row.get('dimensions'),
            materials=row.get('materials') or [],
            colors=row.get('colors') or [],
            tags=row.get('tags') or [],
            sku=row['sku'],
            stock={
                "quantity": row['stock_quantity'],
                "reserved": row['stock_reserved'],
                "threshold": row['stock_threshold'],
            },
            is_new=row['is_new'],
            is_limited=row['is_limited'],
            is_featured=row['is_featured'],
            is_active=row['is_active'],
            rating={"average": row['rating_average'], "count": row['rating_count']},
            sales_count=row['sales_count'],
            view_count=row['view_count'],
            wishlist_count=row['wishlist_count'],
            shipping=row.get('shipping') or {},
            seo=seo,
            created_by=row.get('created_by'),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at'),
        )

    def _find_one(self, column: str, value) -> Optional[Product]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {PRODUCT_COLUMNS} FROM products WHERE {column} = %s", (value,))
            row = cursor.fetchone()
            if not row:
                return None
            return self._map_row_to_product(row)
        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, product_id: int) -> Optional[Product]:
        return self._find_one("id", product_id)

    def find_by_slug(self, slug: str) -> Optional[Product]:
        return self._find_one("slug", slug)

    def find_by_ids(self, product_ids: Iterable[int]) -> Dict[int, Product]:
        """Load several products at once, keyed by id (missing ids are absent)"""
        ids = list(set(product_ids))
        if not ids:
            return {}

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {PRODUCT_COLUMNS} FROM products WHERE id = ANY(%s)", (ids,))
            products = [self._map_row_to_product(row) for row in cursor.fetchall()]
            return {product.id: product for product in products}
        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        category: Optional[str] = None,
        series: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        search: Optional[str] = None,
        is_new: Optional[bool] = None,
        is_limited: Optional[bool] = None,
        is_featured: Optional[bool] = None,
        is_active: Optional[bool] = True,
        sort: str = "newest",
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Product], int]:
        """
        Find products with filters

        Args:
            category / series: Catalog classification filters
            min_price / max_price: Inclusive price range
            search: Matched against name, description and tags
            is_new / is_limited / is_featured: Only applied when True
            is_active: Active filter (None for every product)
            sort: One of SORT_OPTIONS
            limit / offset: Paging

        Returns:
            Tuple of (list of products, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params = []

            if is_active is not None:
                conditions.append("is_active = %s")
                params.append(is_active)

            if category:
                conditions.append("category = %s")
                params.append(category)

            if series:
                conditions.append("series = %s")
                params.append(series)

            if min_price is not None:
                conditions.append("price >= %s")
                params.append(min_price)

            if max_price is not None:
                conditions.append("price <= %s")
                params.append(max_price)

            for column, flag in (("is_new", is_new), ("is_limited", is_limited), ("is_featured", is_featured)):
                if flag:
                    conditions.append(f"{column} = TRUE")

            if search:
                conditions.append("(name ILIKE %s OR description ILIKE %s OR tags::text ILIKE %s)")
                search_term = f"%{search}%"
                params.extend([search_term, search_term, search_term])

            where_clause = " AND ".join(conditions) if conditions else "1=1"
            order_by = SORT_OPTIONS.get(sort, SORT_OPTIONS["newest"])

            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM products
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products
                WHERE {where_clause}
                ORDER BY {order_by}, id DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            products = [self._map_row_to_product(row) for row in cursor.fetchall()]
            return products, total

        finally:
            cursor.close()
            conn.close()

    def find_featured(self, limit: int = 10) -> List[Product]:
        products, _ = self.find_all(is_featured=True, limit=limit)
        return products

    def find_new(self, limit: int = 10) -> List[Product]:
        products, _ = self.find_all(is_new=True, limit=limit)
        return products

    def create(self, data: ProductCreate, created_by: Optional[int] = None) -> Product:
        """
        Insert a product. SKU, slug and main image are filled in first.

        Raises:
            ConflictError: SKU already exists
        """
        data.prepare()

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT id FROM products WHERE sku = %s", (data.sku,))
            if cursor.fetchone():
                raise ConflictError("Product with this SKU already exists")

            seo = data.seo.model_dump(mode="json")
            slug = seo.pop("slug")

            cursor.execute(f"""
                INSERT INTO products (
                    name, description, category, series, price, original_price, currency,
                    images, features, specifications, dimensions, materials, colors, tags,
                    sku, stock_quantity, stock_reserved, stock_threshold,
                    is_new, is_limited, is_featured, is_active,
                    rating_average, rating_count, sales_count, view_count, wishlist_count,
                    shipping, slug, seo, created_by, created_at, updated_at
                ) VALUES (
                    %s, %s, %s, %s, %s, %s, %s,
                    %s, %s, %s, %s, %s, %s, %s,
                    %s, %s, %s, %s,
                    %s, %s, %s, TRUE,
                    0, 0, 0, 0, 0,
                    %s, %s, %s, %s, NOW(), NOW()
                )
                RETURNING {PRODUCT_COLUMNS}
            """, (
                data.name, data.description, data.category, data.series,
                data.price, data.original_price, data.currency,
                Json([image.model_dump() for image in data.images]),
                Json(data.features),
                Json(data.specifications),
                Json(data.dimensions.model_dump()) if data.dimensions else None,
                Json(data.materials),
                Json(data.colors),
                Json(data.tags),
                data.sku, data.stock.quantity, data.stock.reserved, data.stock.threshold,
                data.is_new, data.is_limited, data.is_featured,
                Json(data.shipping.model_dump()),
                self._unique_slug(cursor, slug),
                Json(seo),
                created_by,
            ))
            row = cursor.fetchone()
            conn.commit()

            logger.info(f"Created product {data.sku} ({data.name})")
            return self._map_row_to_product(row)

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    @staticmethod
    def _unique_slug(cursor, slug: str, exclude_id: Optional[int] = None) -> str:
        """Append -2, -3... until the slug is free"""
        candidate = slug
        suffix = 2
        while True:
            cursor.execute(
                "SELECT id FROM products WHERE slug = %s AND id <> %s",
                (candidate, exclude_id or 0),
            )
            if not cursor.fetchone():
                return candidate
            candidate = f"{slug}-{suffix}"
            suffix += 1

    def update(self, product_id: int, fields: Dict) -> Optional[Product]:
        """
        Update a product from a dict of changed fields (as dumped from ProductUpdate)

        Returns:
            Updated Product or None if not found
        """
        update_fields = []
        values = []

        for key, value in fields.items():
            if key in SCALAR_FIELDS:
                update_fields.append(f"{key} = %s")
                values.append(value)
            elif key in JSON_FIELDS:
                update_fields.append(f"{key} = %s")
                values.append(Json(value) if value is not None else None)
            elif key == "stock" and value is not None:
                update_fields.extend(["stock_quantity = %s", "stock_reserved = %s", "stock_threshold = %s"])
                values.extend([value["quantity"], value["reserved"], value["threshold"]])
            elif key == "seo" and value is not None:
                seo = dict(value)
                slug = seo.pop("slug", None)
                update_fields.append("seo = %s")
                values.append(Json(seo))
                if slug:
                    update_fields.append("slug = %s")
                    values.append(slug)

        if not update_fields:
            return self.find_by_id(product_id)

        update_fields.append("updated_at = NOW()")
        values.append(product_id)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE products
                SET {', '.join(update_fields)}
                WHERE id = %s
                RETURNING {PRODUCT_COLUMNS}
            """, values)
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_product(row) if row else None
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def soft_delete(self, product_id: int) -> bool:
        return self._execute_update(
            "UPDATE products SET is_active = FALSE, updated_at = NOW() WHERE id = %s",
            (product_id,),
        ) > 0

    def increment_view_count(self, product_id: int) -> None:
        self._execute_update("UPDATE products SET view_count = view_count + 1 WHERE id = %s", (product_id,))

    def adjust_wishlist_count(self, product_ids: Iterable[int], delta: int) -> None:
        """Add `delta` to wishlist_count of each product, never below zero"""
        ids = list(product_ids)
        if not ids:
            return
        self._execute_update(
            "UPDATE products SET wishlist_count = GREATEST(0, wishlist_count + %s) WHERE id = ANY(%s)",
            (delta, ids),
        )

    def _execute_update(self, query: str, params: tuple) -> int:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(query, params)
            affected = cursor.rowcount
            conn.commit()
            return affected
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    # =========================================================================
    # Stock
    # =========================================================================

    def reserve_stock(self, items: List[Tuple[int, int]]) -> None:
        """
        Reserve stock for (product_id, quantity) pairs in one transaction.

        Each row is only updated when quantity - reserved still covers the
        request, so concurrent checkouts cannot oversell.

        Raises:
            InsufficientStockError: Nothing is reserved if any item fails
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            for product_id, quantity in items:
                cursor.execute("""
                    UPDATE products
                    SET stock_reserved = stock_reserved + %s, updated_at = NOW()
                    WHERE id = %s AND stock_quantity - stock_reserved >= %s
                    RETURNING id
                """, (quantity, product_id, quantity))

                if not cursor.fetchone():
                    cursor.execute("""
                        SELECT name, GREATEST(0, stock_quantity - stock_reserved) as available
                        FROM products WHERE id = %s
                    """, (product_id,))
                    row = cursor.fetchone()
                    conn.rollback()
                    if not row:
                        raise NotFoundError("Product")
                    raise InsufficientStockError(
                        available=row['available'],
                        requested=quantity,
                        product_name=row['name'],
                    )

            conn.commit()
            logger.info(f"Reserved stock for {len(items)} product(s)")

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def release_stock(self, items: List[Tuple[int, int]]) -> None:
        """Return reserved units to the available pool (reserved never drops below zero)"""
        self._apply_stock_changes("""
            UPDATE products
            SET stock_reserved = GREATEST(0, stock_reserved - %s), updated_at = NOW()
            WHERE id = %s
        """, items)
        logger.info(f"Released stock for {len(items)} product(s)")

    def commit_sale(self, items: List[Tuple[int, int]]) -> None:
        """Turn reservations into sales: quantity and reserved go down, sales_count up"""
        self._apply_stock_changes("""
            UPDATE products
            SET stock_quantity = GREATEST(0, stock_quantity - %(q)s),
                stock_reserved = GREATEST(0, stock_reserved - %(q)s),
                sales_count = sales_count + %(q)s,
                updated_at = NOW()
            WHERE id = %(id)s
        """, items, named=True)

    def restock(self, items: List[Tuple[int, int]]) -> None:
        """Put sold units back on the shelf (cancelled after payment)"""
        self._apply_stock_changes("""
            UPDATE products
            SET stock_quantity = stock_quantity + %(q)s,
                sales_count = GREATEST(0, sales_count - %(q)s),
                updated_at = NOW()
            WHERE id = %(id)s
        """, items, named=True)

    def _apply_stock_changes(self, query: str, items: List[Tuple[int, int]], named: bool = False) -> None:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            for product_id, quantity in items:
                params = {"q": quantity, "id": product_id} if named else (quantity, product_id)
                cursor.execute(query, params)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def set_stock(self, product_id: int, quantity: int, reserved: Optional[int] = None) -> Optional[Product]:
        fields = ["stock_quantity = %s"]
        values = [quantity]
        if reserved is not None:
            fields.append("stock_reserved = %s")
            values.append(reserved)
        values.append(product_id)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE products
                SET {', '.join(fields)}, updated_at = NOW()
                WHERE id = %s
                RETURNING {PRODUCT_COLUMNS}
            """, values)
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_product(row) if row else None
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    # =========================================================================
    # Reviews
    # =========================================================================

    def find_reviews(self, product_id: int, limit: int = 10, offset: int = 0) -> Tuple[List[Review], int]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                "SELECT COUNT(*) as total FROM product_reviews WHERE product_id = %s",
                (product_id,),
            )
            total = cursor.fetchone()['total']

            cursor.execute("""
                SELECT id, product_id, user_id, name, rating, comment, is_verified, created_at
                FROM product_reviews
                WHERE product_id = %s
                ORDER BY created_at DESC
                LIMIT %s OFFSET %s
            """, (product_id, limit, offset))

            reviews = [Review(**row) for row in cursor.fetchall()]
            return reviews, total
        finally:
            cursor.close()
            conn.close()

    def add_review(self, product_id: int, user_id: int, name: str, rating: int, comment: str) -> Review:
        """
        Store a review and refresh the product's rating aggregate.

        Raises:
            ConflictError: The user already reviewed this product
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                "SELECT id FROM product_reviews WHERE product_id = %s AND user_id = %s",
                (product_id, user_id),
            )
            if cursor.fetchone():
                raise ConflictError("User has already reviewed this product")

            # Verified when the user has a paid order containing the product
            cursor.execute("""
                SELECT EXISTS (
                    SELECT 1 FROM orders
                    WHERE user_id = %s AND payment_status = 'completed'
                      AND items @> %s
                ) as purchased
            """, (user_id, Json([{"product_id": product_id}])))
            is_verified = cursor.fetchone()['purchased']

            cursor.execute("""
                INSERT INTO product_reviews (product_id, user_id, name, rating, comment, is_verified, created_at)
                VALUES (%s, %s, %s, %s, %s, %s, NOW())
                RETURNING id, product_id, user_id, name, rating, comment, is_verified, created_at
            """, (product_id, user_id, name, rating, comment, is_verified))
            review = Review(**cursor.fetchone())

            cursor.execute("SELECT rating FROM product_reviews WHERE product_id = %s", (product_id,))
            rating_summary = calculate_rating([row['rating'] for row in cursor.fetchall()])

            cursor.execute("""
                UPDATE products
                SET rating_average = %s, rating_count = %s, updated_at = NOW()
                WHERE id = %s
            """, (rating_summary.average, rating_summary.count, product_id))

            conn.commit()
            return review

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()
