"""
Blog Service

Author: Taksha Engineering
Date: 2025-10-17
"""
import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from storefront.core.exceptions import NotFoundError, ValidationError
from storefront.domain.blog import BlogCreate, BlogPost, BlogUpdate, calculate_reading_time
from storefront.repositories.blog_repository import BlogRepository

logger = logging.getLogger(__name__)


class BlogService:
    """
    Publishing rules on top of BlogRepository

    Drafts and archived posts are only visible to admins; readers can like
    and comment on published posts, comments wait for approval.
    """

    def __init__(self, repo: Optional[BlogRepository] = None):
        self.repo = repo or BlogRepository()

    def _visible_post(self, post: Optional[BlogPost], user=None) -> BlogPost:
        is_admin = bool(user and user.is_admin)
        if not post or (not post.is_published and not is_admin):
            raise NotFoundError("Blog post")
        return post

    def _get_post(self, post_id: int) -> BlogPost:
        post = self.repo.find_by_id(post_id)
        if not post:
            raise NotFoundError("Blog post")
        return post

    def read_post(self, user=None, post_id: Optional[int] = None, slug: Optional[str] = None) -> Dict:
        """
        Load a post for display, count the view and attach related posts
        """
        post = self.repo.find_by_id(post_id) if post_id is not None else self.repo.find_by_slug(slug)
        post = self._visible_post(post, user)

        self.repo.increment_views(post.id)
        post.views += 1

        related = self.repo.find_related(post, limit=3)
        data = post.to_dict(
            include_all_comments=bool(user and user.is_admin),
            user_id=user.id if user else None,
        )
        data["related_posts"] = [item.to_summary() for item in related]
        return data

    def toggle_like(self, post_id: int, user_id: int) -> Dict:
        post = self._get_post(post_id)
        if not post.is_published:
            raise ValidationError("Cannot like unpublished post")

        liked = post.toggle_like(user_id)
        self.repo.save_likes(post)
        return {"likes": post.likes, "is_liked": liked}

    def add_comment(self, post_id: int, user, comment: str) -> Dict:
        post = self._get_post(post_id)
        if not post.is_published:
            raise ValidationError("Cannot comment on unpublished post")

        saved = self.repo.add_comment(post.id, user.id, user.name or user.email, user.email, comment)
        logger.info(f"Comment {saved.id} on post {post.id} awaiting approval")
        return saved.model_dump(mode="json")

    def create(self, data: BlogCreate, author_id: int) -> BlogPost:
        post = BlogPost(author_id=author_id, **data.model_dump())
        created = self.repo.create(post)
        logger.info(f"Blog post {created.id} created by {author_id} ({created.status})")
        return created

    def update(self, post_id: int, data: BlogUpdate) -> BlogPost:
        post = self.repo.find_by_id(post_id)
        if not post:
            raise NotFoundError("Blog post")

        fields = data.model_dump(exclude_unset=True)
        if "content" in fields and fields["content"]:
            fields["reading_time"] = calculate_reading_time(fields["content"])
        if fields.get("status") == "published" and not post.published_at:
            fields["published_at"] = datetime.now(timezone.utc)

        return self.repo.update(post_id, fields)

    def delete(self, post_id: int) -> None:
        if not self.repo.delete(post_id):
            raise NotFoundError("Blog post")
        logger.info(f"Blog post {post_id} deleted")

    def approve_comment(self, post_id: int, comment_id: int) -> None:
        if not self.repo.approve_comment(post_id, comment_id):
            raise NotFoundError("Comment")

    def delete_comment(self, post_id: int, comment_id: int) -> None:
        if not self.repo.delete_comment(post_id, comment_id):
            raise NotFoundError("Comment")
