"""
API tests for blog endpoints

Post reads go through the real BlogService with a mocked repository so the
visibility rules are exercised over HTTP.

Author: Taksha Engineering
Date: 2025-10-17
"""
import pytest
from datetime import datetime, timezone
from unittest.mock import patch

from storefront.domain.blog import BlogPost, Comment

CONTENT = "Brass has been cast in the Moradabad workshops for generations. " * 10


def make_post(**overrides):
    data = {
        "id": 5,
        "title": "The Story of Brass",
        "content": CONTENT,
        "excerpt": "How our diyas are cast",
        "category": "craftsmanship",
        "tags": ["brass"],
        "status": "published",
        "published_at": datetime(2025, 10, 1, tzinfo=timezone.utc),
        "comments": [
            Comment(id=1, user_id=8, name="Ravi", email="ravi@example.com", comment="Lovely read", is_approved=True),
            Comment(id=2, user_id=9, name="Spam", email="spam@example.com", comment="Buy now!!", is_approved=False),
        ],
    }
    data.update(overrides)
    return BlogPost(**data)


@pytest.fixture
def service_repo():
    with patch('storefront.services.blog_service.BlogRepository') as mock_repo_class:
        repo = mock_repo_class.return_value
        repo.find_related.return_value = []
        yield repo


class TestBlogListing:

    @patch('storefront.api.blog.BlogRepository')
    def test_lists_published_summaries(self, mock_repo_class, api_client):
        client, _ = api_client
        mock_repo_class.return_value.find_all.return_value = ([make_post()], 1)

        response = client.get("/api/blog/?tag=brass,%20diwali&page=2&limit=5")

        assert response.status_code == 200
        body = response.json()
        assert "content" not in body["data"][0]
        assert body["pagination"]["total_posts"] == 1
        mock_repo_class.return_value.find_all.assert_called_once_with(
            category=None, tags=["brass", "diwali"], search=None, sort="newest", limit=5, offset=5
        )

    def test_unknown_category_is_422(self, api_client):
        client, _ = api_client

        assert client.get("/api/blog/?category=gossip").status_code == 422

    @patch('storefront.api.blog.BlogRepository')
    def test_admin_listing_includes_drafts(self, mock_repo_class, api_client, admin_user):
        client, login_as = api_client
        login_as(admin_user)
        mock_repo_class.return_value.find_all.return_value = ([], 0)

        response = client.get("/api/blog/admin/all?status=draft")

        assert response.status_code == 200
        assert mock_repo_class.return_value.find_all.call_args.kwargs["status"] == "draft"


class TestBlogPostRead:

    def test_unpublished_post_hidden_from_anonymous(self, api_client, service_repo):
        client, _ = api_client
        service_repo.find_by_id.return_value = make_post(status="draft", published_at=None)

        response = client.get("/api/blog/5")

        assert response.status_code == 404
        assert response.json()["detail"] == "Blog post not found"
        service_repo.increment_views.assert_not_called()

    def test_unpublished_post_hidden_from_customer(self, api_client, customer, service_repo):
        client, login_as = api_client
        login_as(customer)
        service_repo.find_by_slug.return_value = make_post(status="archived")

        response = client.get("/api/blog/slug/the-story-of-brass")

        assert response.status_code == 404

    def test_admin_reads_draft_with_all_comments(self, api_client, admin_user, service_repo):
        client, login_as = api_client
        login_as(admin_user)
        service_repo.find_by_id.return_value = make_post(status="draft", published_at=None)

        response = client.get("/api/blog/5")

        assert response.status_code == 200
        assert len(response.json()["data"]["comments"]) == 2

    def test_published_post_shows_approved_comments_and_counts_view(self, api_client, service_repo):
        # Arrange
        client, _ = api_client
        service_repo.find_by_id.return_value = make_post(views=10)
        service_repo.find_related.return_value = [make_post(id=6, title="Casting a Bell")]

        # Act
        response = client.get("/api/blog/5")

        # Assert
        data = response.json()["data"]
        assert response.status_code == 200
        assert [c["id"] for c in data["comments"]] == [1]
        assert data["views"] == 11
        assert data["related_posts"][0]["id"] == 6
        service_repo.increment_views.assert_called_once_with(5)


class TestBlogInteraction:

    def test_like_requires_token(self, api_client):
        client, _ = api_client

        assert client.post("/api/blog/5/like").status_code == 401

    def test_like_unpublished_is_400(self, api_client, customer, service_repo):
        client, login_as = api_client
        login_as(customer)
        service_repo.find_by_id.return_value = make_post(status="draft")

        response = client.post("/api/blog/5/like")

        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot like unpublished post"

    def test_comment_awaits_approval(self, api_client, customer, service_repo):
        client, login_as = api_client
        login_as(customer)
        service_repo.find_by_id.return_value = make_post()
        service_repo.add_comment.return_value = Comment(
            id=3, post_id=5, user_id=7, name="Asha", email="asha@example.com", comment="Beautiful work",
        )

        response = client.post("/api/blog/5/comments", json={"comment": "Beautiful work"})

        assert response.status_code == 201
        assert response.json()["data"]["is_approved"] is False


class TestCommentModeration:

    def test_customer_cannot_approve(self, api_client, customer):
        client, login_as = api_client
        login_as(customer)

        assert client.put("/api/blog/5/comments/2/approve").status_code == 403

    def test_approve_comment(self, api_client, admin_user, service_repo):
        client, login_as = api_client
        login_as(admin_user)
        service_repo.approve_comment.return_value = True

        response = client.put("/api/blog/5/comments/2/approve")

        assert response.status_code == 200
        service_repo.approve_comment.assert_called_once_with(5, 2)

    def test_approve_missing_comment_is_404(self, api_client, admin_user, service_repo):
        client, login_as = api_client
        login_as(admin_user)
        service_repo.approve_comment.return_value = False

        response = client.put("/api/blog/5/comments/99/approve")

        assert response.status_code == 404
        assert response.json()["detail"] == "Comment not found"

    def test_delete_missing_comment_is_404(self, api_client, admin_user, service_repo):
        client, login_as = api_client
        login_as(admin_user)
        service_repo.delete_comment.return_value = False

        response = client.delete("/api/blog/5/comments/99")

        assert response.status_code == 404
        assert response.json()["detail"] == "Comment not found"
