"""
Blog API Endpoints
Published articles, likes and comments, plus blog administration

Author: Taksha Engineering
Date: 2025-10-17
"""
import logging
from typing import Optional, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status

from storefront.core.auth import TokenUser, get_current_user, get_current_user_optional, require_admin
from storefront.core.exceptions import StoreError, to_http_exception
from storefront.domain.blog import BlogCreate, BlogUpdate, CommentCreate
from storefront.domain.constants import BlogCategory, BlogStatus, pagination_block
from storefront.repositories.blog_repository import BlogRepository
from storefront.services.blog_service import BlogService

logger = logging.getLogger(__name__)

router = APIRouter()

BlogSort = Literal["newest", "oldest", "popular", "title"]


def _split_tags(tags: Optional[str]):
    if not tags:
        return None
    return [tag.strip() for tag in tags.split(",") if tag.strip()] or None


@router.get("/")
async def get_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    category: Optional[BlogCategory] = Query(None),
    tag: Optional[str] = Query(None, description="Comma separated tags, any match"),
    search: Optional[str] = Query(None),
    sort: BlogSort = Query("newest")
):
    """Published posts, without article bodies"""
    try:
        posts, total = BlogRepository().find_all(
            category=category,
            tags=_split_tags(tag),
            search=search,
            sort=sort,
            limit=limit,
            offset=(page - 1) * limit
        )

        return {
            "status": "success",
            "data": [post.to_summary() for post in posts],
            "pagination": pagination_block(page, limit, total, label="total_posts")
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching blog posts: {str(e)}")


@router.get("/featured")
async def get_featured_posts(limit: int = Query(5, ge=1, le=20)):
    try:
        posts = BlogRepository().find_featured(limit=limit)
        return {
            "status": "success",
            "data": [post.to_summary() for post in posts]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching featured posts: {str(e)}")


@router.get("/popular")
async def get_popular_posts(
    timeframe: int = Query(30, ge=1, le=365, description="Days to look back"),
    limit: int = Query(10, ge=1, le=50)
):
    try:
        posts = BlogRepository().find_popular(limit=limit, timeframe_days=timeframe)
        return {
            "status": "success",
            "timeframe": timeframe,
            "data": [post.to_summary() for post in posts]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching popular posts: {str(e)}")


@router.get("/search/{query}")
async def search_posts(
    query: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    category: Optional[BlogCategory] = Query(None)
):
    try:
        posts, total = BlogRepository().find_all(
            search=query,
            category=category,
            limit=limit,
            offset=(page - 1) * limit
        )

        return {
            "status": "success",
            "query": query,
            "data": [post.to_summary() for post in posts],
            "pagination": pagination_block(page, limit, total, label="total_posts")
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error searching blog posts: {str(e)}")


# =============================================================================
# Administration (admin only); declared before /{post_id}
# =============================================================================

@router.get("/admin/all")
async def get_all_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_filter: Optional[BlogStatus] = Query(None, alias="status"),
    category: Optional[BlogCategory] = Query(None),
    search: Optional[str] = Query(None),
    current_user: TokenUser = Depends(require_admin)
):
    try:
        posts, total = BlogRepository().find_all(
            status=status_filter,
            category=category,
            search=search,
            sort="created",
            limit=limit,
            offset=(page - 1) * limit
        )

        return {
            "status": "success",
            "data": [post.to_summary() for post in posts],
            "pagination": pagination_block(page, limit, total, label="total_posts")
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching blog posts: {str(e)}")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_post(data: BlogCreate, current_user: TokenUser = Depends(require_admin)):
    try:
        post = BlogService().create(data, current_user.id)
        return {
            "status": "success",
            "message": "Blog post created successfully",
            "data": post.to_dict(include_all_comments=True)
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating blog post: {str(e)}")


@router.put("/{post_id}")
async def update_post(post_id: int, data: BlogUpdate, current_user: TokenUser = Depends(require_admin)):
    try:
        post = BlogService().update(post_id, data)
        return {
            "status": "success",
            "message": "Blog post updated successfully",
            "data": post.to_dict(include_all_comments=True)
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating blog post: {str(e)}")


@router.delete("/{post_id}")
async def delete_post(post_id: int, current_user: TokenUser = Depends(require_admin)):
    try:
        BlogService().delete(post_id)
        return {
            "status": "success",
            "message": "Blog post deleted successfully"
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting blog post: {str(e)}")


@router.put("/{post_id}/comments/{comment_id}/approve")
async def approve_comment(post_id: int, comment_id: int, current_user: TokenUser = Depends(require_admin)):
    try:
        BlogService().approve_comment(post_id, comment_id)
        return {
            "status": "success",
            "message": "Comment approved successfully"
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error approving comment: {str(e)}")


@router.delete("/{post_id}/comments/{comment_id}")
async def delete_comment(post_id: int, comment_id: int, current_user: TokenUser = Depends(require_admin)):
    try:
        BlogService().delete_comment(post_id, comment_id)
        return {
            "status": "success",
            "message": "Comment deleted successfully"
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting comment: {str(e)}")


# =============================================================================
# Single post
# =============================================================================

@router.get("/slug/{slug}")
async def get_post_by_slug(
    slug: str,
    current_user: Optional[TokenUser] = Depends(get_current_user_optional)
):
    try:
        return {
            "status": "success",
            "data": BlogService().read_post(current_user, slug=slug)
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching blog post: {str(e)}")


@router.get("/{post_id}")
async def get_post(
    post_id: int,
    current_user: Optional[TokenUser] = Depends(get_current_user_optional)
):
    """Post with approved comments and related posts; counts a view"""
    try:
        return {
            "status": "success",
            "data": BlogService().read_post(current_user, post_id=post_id)
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching blog post: {str(e)}")


@router.post("/{post_id}/like")
async def toggle_like(post_id: int, current_user: TokenUser = Depends(get_current_user)):
    try:
        result = BlogService().toggle_like(post_id, current_user.id)
        return {
            "status": "success",
            "message": "Post liked" if result["is_liked"] else "Post unliked",
            "data": result
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating like: {str(e)}")


@router.post("/{post_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: int,
    data: CommentCreate,
    current_user: TokenUser = Depends(get_current_user)
):
    try:
        comment = BlogService().add_comment(post_id, current_user, data.comment)
        logger.info(f"User {current_user.id} commented on post {post_id}")
        return {
            "status": "success",
            "message": "Comment added successfully. It will be visible after approval.",
            "data": comment
        }

    except HTTPException:
        raise
    except StoreError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error adding comment: {str(e)}")
