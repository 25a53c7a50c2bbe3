"""
Blog Domain Models

Articles published by the Taksha team, with likes and moderated comments.

Author: Taksha Engineering
Date: 2025-10-17
"""
import math
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime, timezone

from storefront.domain.constants import BlogCategory, BlogStatus, slugify

WORDS_PER_MINUTE = 200


def calculate_reading_time(content: str) -> int:
    """Minutes to read `content` at 200 words per minute, at least one"""
    word_count = len(content.split())
    return max(1, math.ceil(word_count / WORDS_PER_MINUTE))


class FeaturedImage(BaseModel):
    url: str
    alt: Optional[str] = None


class BlogSeo(BaseModel):
    slug: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)


class Comment(BaseModel):
    id: Optional[int] = None
    post_id: Optional[int] = None
    user_id: int
    name: str
    email: str
    comment: str
    is_approved: bool = False
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BlogPost(BaseModel):
    """
    Blog post domain model

    Fields:
        title / content / excerpt: Article copy
        author_id: Admin who wrote the post
        category / tags: Classification used for related posts
        status: draft, published or archived
        reading_time: Minutes, derived from content
        views / likes / liked_by: Engagement
        comments: Loaded separately, only approved ones are public
        published_at: Set the first time the post is published
    """

    id: Optional[int] = None
    title: str
    content: str
    excerpt: str
    author_id: Optional[int] = None
    author_name: Optional[str] = None
    category: BlogCategory
    tags: List[str] = Field(default_factory=list)
    featured_image: Optional[FeaturedImage] = None
    status: BlogStatus = "draft"
    is_featured: bool = False
    reading_time: int = 1
    views: int = 0
    likes: int = 0
    liked_by: List[int] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)
    seo: BlogSeo = Field(default_factory=BlogSeo)
    related_products: List[int] = Field(default_factory=list)
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_published(self) -> bool:
        return self.status == "published"

    @property
    def approved_comments(self) -> List[Comment]:
        return [comment for comment in self.comments if comment.is_approved]

    def prepare(self) -> "BlogPost":
        """Derive slug, reading time and first publication date"""
        if not self.seo.slug:
            self.seo.slug = slugify(self.title)
        self.reading_time = calculate_reading_time(self.content)
        if self.status == "published" and not self.published_at:
            self.published_at = datetime.now(timezone.utc)
        return self

    def toggle_like(self, user_id: int) -> bool:
        """Like or unlike; returns True when the post is now liked by the user"""
        if user_id in self.liked_by:
            self.liked_by.remove(user_id)
            self.likes = max(0, self.likes - 1)
            return False
        self.liked_by.append(user_id)
        self.likes += 1
        return True

    def to_dict(self, include_all_comments: bool = False, user_id: Optional[int] = None) -> dict:
        data = self.model_dump(mode="json", exclude={"liked_by", "comments"})
        comments = self.comments if include_all_comments else self.approved_comments
        data["comments"] = [comment.model_dump(mode="json") for comment in comments]
        data["comment_count"] = len(self.comments)
        data["approved_comment_count"] = len(self.approved_comments)
        data["reading_time_text"] = f"{self.reading_time} min read"
        if user_id is not None:
            data["is_liked"] = user_id in self.liked_by
        return data

    def to_summary(self) -> dict:
        """List form without the article body"""
        data = self.model_dump(mode="json", exclude={"content", "liked_by", "comments"})
        data["reading_time_text"] = f"{self.reading_time} min read"
        return data


class BlogCreate(BaseModel):
    title: str = Field(..., min_length=5, max_length=200)
    content: str = Field(..., min_length=50)
    excerpt: str = Field(..., min_length=10, max_length=300)
    category: BlogCategory
    tags: List[str] = Field(default_factory=list)
    featured_image: Optional[FeaturedImage] = None
    status: BlogStatus = "draft"
    is_featured: bool = False
    seo: BlogSeo = Field(default_factory=BlogSeo)
    related_products: List[int] = Field(default_factory=list)


class BlogUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=5, max_length=200)
    content: Optional[str] = Field(None, min_length=50)
    excerpt: Optional[str] = Field(None, min_length=10, max_length=300)
    category: Optional[BlogCategory] = None
    tags: Optional[List[str]] = None
    featured_image: Optional[FeaturedImage] = None
    status: Optional[BlogStatus] = None
    is_featured: Optional[bool] = None
    seo: Optional[BlogSeo] = None
    related_products: Optional[List[int]] = None


class CommentCreate(BaseModel):
    comment: str = Field(..., min_length=5, max_length=500)
