"""
Blog tables
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from storefront.core.database import Base


class BlogPost(Base):
    __tablename__ = "blog_posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(String(300), nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), index=True)
    category = Column(String(30), nullable=False, index=True)
    tags = Column(JSONB, nullable=False, server_default="[]")
    featured_image = Column(JSONB)
    status = Column(String(20), nullable=False, default="draft", index=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    reading_time = Column(Integer, nullable=False, default=1)
    views = Column(Integer, nullable=False, default=0)
    likes = Column(Integer, nullable=False, default=0)
    liked_by = Column(JSONB, nullable=False, server_default="[]")
    slug = Column(String(220), unique=True, index=True)
    seo = Column(JSONB, nullable=False, server_default="{}")
    related_products = Column(JSONB, nullable=False, server_default="[]")
    published_at = Column(DateTime(timezone=True), index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class BlogComment(Base):
    __tablename__ = "blog_comments"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("blog_posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    comment = Column(String(500), nullable=False)
    is_approved = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
