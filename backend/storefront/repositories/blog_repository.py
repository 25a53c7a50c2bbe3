"""
Blog Repository - Data Access Layer for blog posts and comments

Author: Taksha Engineering
Date: 2025-10-17
"""
from typing import List, Optional, Tuple, Dict
from datetime import datetime, timedelta, timezone
from psycopg2.extras import Json

from storefront.domain.blog import BlogPost, Comment
from storefront.core.database import get_db_connection_dict

POST_COLUMNS = """
    b.id, b.title, b.content, b.excerpt, b.author_id, u.name as author_name,
    b.category, b.tags, b.featured_image, b.status, b.is_featured,
    b.reading_time, b.views, b.likes, b.liked_by, b.slug, b.seo,
    b.related_products, b.published_at, b.created_at, b.updated_at
"""

POST_FROM = "blog_posts b LEFT JOIN users u ON u.id = b.author_id"

SORT_OPTIONS = {
    "newest": "b.published_at DESC NULLS LAST",
    "oldest": "b.published_at ASC NULLS LAST",
    "popular": "b.views DESC, b.likes DESC",
    "title": "b.title ASC",
    "created": "b.created_at DESC",
}

JSON_FIELDS = {"tags", "featured_image", "related_products"}
SCALAR_FIELDS = {"title", "content", "excerpt", "category", "status", "is_featured", "reading_time", "published_at"}


class BlogRepository:

    @staticmethod
    def _map_row_to_post(row: dict, comments: Optional[List[Comment]] = None) -> BlogPost:
        data = dict(row)
        seo = dict(data.pop('seo', None) or {})
        seo['slug'] = data.pop('slug', None)
        data['seo'] = seo
        data['tags'] = data.get('tags') or []
        data['liked_by'] = data.get('liked_by') or []
        data['related_products'] = data.get('related_products') or []
        data['comments'] = comments or []
        return BlogPost(**data)

    def _load_comments(self, cursor, post_id: int) -> List[Comment]:
        cursor.execute("""
            SELECT id, post_id, user_id, name, email, comment, is_approved, created_at
            FROM blog_comments
            WHERE post_id = %s
            ORDER BY created_at
        """, (post_id,))
        return [Comment(**row) for row in cursor.fetchall()]

    def _find_one(self, condition: str, value) -> Optional[BlogPost]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {POST_COLUMNS} FROM {POST_FROM} WHERE {condition}", (value,))
            row = cursor.fetchone()
            if not row:
                return None
            return self._map_row_to_post(row, self._load_comments(cursor, row['id']))
        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, post_id: int) -> Optional[BlogPost]:
        return self._find_one("b.id = %s", post_id)

    def find_by_slug(self, slug: str) -> Optional[BlogPost]:
        return self._find_one("b.slug = %s", slug)

    def find_all(
        self,
        status: Optional[str] = "published",
        category: Optional[str] = None,
        tags: Optional[List[str]] = None,
        search: Optional[str] = None,
        is_featured: Optional[bool] = None,
        published_since: Optional[datetime] = None,
        sort: str = "newest",
        limit: int = 10,
        offset: int = 0
    ) -> Tuple[List[BlogPost], int]:
        """
        Find posts with filters (comments are not loaded)

        Returns:
            Tuple of (list of posts, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params = []

            if status:
                conditions.append("b.status = %s")
                params.append(status)

            if category:
                conditions.append("b.category = %s")
                params.append(category)

            if tags:
                conditions.append("b.tags ?| %s")
                params.append(list(tags))

            if search:
                conditions.append("(b.title ILIKE %s OR b.content ILIKE %s OR b.excerpt ILIKE %s OR b.tags::text ILIKE %s)")
                search_term = f"%{search}%"
                params.extend([search_term] * 4)

            if is_featured is not None:
                conditions.append("b.is_featured = %s")
                params.append(is_featured)

            if published_since:
                conditions.append("b.published_at >= %s")
                params.append(published_since)

            where_clause = " AND ".join(conditions) if conditions else "1=1"
            order_by = SORT_OPTIONS.get(sort, SORT_OPTIONS["newest"])

            cursor.execute(f"SELECT COUNT(*) as total FROM blog_posts b WHERE {where_clause}", params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {POST_COLUMNS}
                FROM {POST_FROM}
                WHERE {where_clause}
                ORDER BY {order_by}, b.id DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            posts = [self._map_row_to_post(row) for row in cursor.fetchall()]
            return posts, total

        finally:
            cursor.close()
            conn.close()

    def find_featured(self, limit: int = 5) -> List[BlogPost]:
        posts, _ = self.find_all(is_featured=True, limit=limit)
        return posts

    def find_popular(self, limit: int = 10, timeframe_days: int = 30) -> List[BlogPost]:
        since = datetime.now(timezone.utc) - timedelta(days=timeframe_days)
        posts, _ = self.find_all(published_since=since, sort="popular", limit=limit)
        return posts

    def find_related(self, post: BlogPost, limit: int = 3) -> List[BlogPost]:
        """Published posts sharing the category or a tag, excluding `post`"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {POST_COLUMNS}
                FROM {POST_FROM}
                WHERE b.id <> %s
                  AND b.status = 'published'
                  AND (b.category = %s OR b.tags ?| %s)
                ORDER BY b.published_at DESC NULLS LAST
                LIMIT %s
            """, (post.id, post.category, list(post.tags), limit))
            return [self._map_row_to_post(row) for row in cursor.fetchall()]
        finally:
            cursor.close()
            conn.close()

    def create(self, post: BlogPost) -> BlogPost:
        post.prepare()
        seo = post.seo.model_dump(mode="json")
        slug = seo.pop("slug")

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            slug = self._unique_slug(cursor, slug)
            cursor.execute("""
                INSERT INTO blog_posts (
                    title, content, excerpt, author_id, category, tags, featured_image,
                    status, is_featured, reading_time, views, likes, liked_by,
                    slug, seo, related_products, published_at, created_at, updated_at
                ) VALUES (
                    %s, %s, %s, %s, %s, %s, %s,
                    %s, %s, %s, 0, 0, '[]'::jsonb,
                    %s, %s, %s, %s, NOW(), NOW()
                )
                RETURNING id
            """, (
                post.title, post.content, post.excerpt, post.author_id, post.category,
                Json(post.tags),
                Json(post.featured_image.model_dump()) if post.featured_image else None,
                post.status, post.is_featured, post.reading_time,
                slug, Json(seo), Json(post.related_products), post.published_at,
            ))
            post_id = cursor.fetchone()['id']
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

        return self.find_by_id(post_id)

    @staticmethod
    def _unique_slug(cursor, slug: str, exclude_id: Optional[int] = None) -> str:
        candidate = slug
        suffix = 2
        while True:
            cursor.execute(
                "SELECT id FROM blog_posts WHERE slug = %s AND id <> %s",
                (candidate, exclude_id or 0),
            )
            if not cursor.fetchone():
                return candidate
            candidate = f"{slug}-{suffix}"
            suffix += 1

    def update(self, post_id: int, fields: Dict) -> Optional[BlogPost]:
        update_fields = []
        values = []

        for key, value in fields.items():
            if key in SCALAR_FIELDS:
                update_fields.append(f"{key} = %s")
                values.append(value)
            elif key in JSON_FIELDS:
                update_fields.append(f"{key} = %s")
                values.append(Json(value) if value is not None else None)
            elif key == "seo" and value is not None:
                seo = dict(value)
                slug = seo.pop("slug", None)
                update_fields.append("seo = %s")
                values.append(Json(seo))
                if slug:
                    update_fields.append("slug = %s")
                    values.append(slug)

        if update_fields:
            update_fields.append("updated_at = NOW()")
            values.append(post_id)
            self._execute(f"UPDATE blog_posts SET {', '.join(update_fields)} WHERE id = %s", values)

        return self.find_by_id(post_id)

    def delete(self, post_id: int) -> bool:
        return self._execute("DELETE FROM blog_posts WHERE id = %s", (post_id,)) > 0

    def increment_views(self, post_id: int) -> None:
        self._execute("UPDATE blog_posts SET views = views + 1 WHERE id = %s", (post_id,))

    def save_likes(self, post: BlogPost) -> None:
        self._execute(
            "UPDATE blog_posts SET likes = %s, liked_by = %s WHERE id = %s",
            (post.likes, Json(post.liked_by), post.id),
        )

    def add_comment(self, post_id: int, user_id: int, name: str, email: str, comment: str) -> Comment:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO blog_comments (post_id, user_id, name, email, comment, is_approved, created_at)
                VALUES (%s, %s, %s, %s, %s, FALSE, NOW())
                RETURNING id, post_id, user_id, name, email, comment, is_approved, created_at
            """, (post_id, user_id, name, email, comment))
            row = cursor.fetchone()
            conn.commit()
            return Comment(**row)
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def approve_comment(self, post_id: int, comment_id: int) -> bool:
        return self._execute(
            "UPDATE blog_comments SET is_approved = TRUE WHERE id = %s AND post_id = %s",
            (comment_id, post_id),
        ) > 0

    def delete_comment(self, post_id: int, comment_id: int) -> bool:
        return self._execute(
            "DELETE FROM blog_comments WHERE id = %s AND post_id = %s",
            (comment_id, post_id),
        ) > 0

    def _execute(self, query: str, params) -> int:
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
