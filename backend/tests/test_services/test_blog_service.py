"""
Unit tests for BlogService

Author: Taksha Engineering
Date: 2025-10-17
"""
import pytest
from unittest.mock import MagicMock

from storefront.core.exceptions import NotFoundError, ValidationError
from storefront.domain.blog import BlogPost, BlogUpdate, Comment
from storefront.services.blog_service import BlogService


def _post(**extra):
    data = {
        "id": 3,
        "title": "The craft of brass casting",
        "content": "word " * 450,
        "excerpt": "How our lamps are made",
        "category": "craftsmanship",
        "status": "published",
    }
    data.update(extra)
    return BlogPost(**data)


@pytest.fixture
def repo():
    repo = MagicMock()
    repo.find_related.return_value = []
    return repo


class TestReadPost:

    def test_counts_view(self, repo, customer):
        repo.find_by_slug.return_value = _post(views=4)

        data = BlogService(repo=repo).read_post(customer, slug="the-craft-of-brass-casting")

        assert data["views"] == 5
        assert data["is_liked"] is False
        assert data["related_posts"] == []
        repo.increment_views.assert_called_once_with(3)

    def test_draft_hidden_from_readers(self, repo, customer):
        repo.find_by_id.return_value = _post(status="draft")

        with pytest.raises(NotFoundError) as exc_info:
            BlogService(repo=repo).read_post(customer, post_id=3)

        assert exc_info.value.message == "Blog post not found"
        repo.increment_views.assert_not_called()

    def test_draft_visible_to_admin_with_pending_comments(self, repo, admin_user):
        post = _post(status="draft", comments=[
            Comment(id=1, user_id=7, name="Asha", email="asha@example.com", comment="Lovely work", is_approved=False),
        ])
        repo.find_by_id.return_value = post

        data = BlogService(repo=repo).read_post(admin_user, post_id=3)

        assert len(data["comments"]) == 1

    def test_anonymous_reader(self, repo):
        repo.find_by_id.return_value = _post()

        data = BlogService(repo=repo).read_post(None, post_id=3)

        assert "is_liked" not in data


class TestInteractions:

    def test_like_toggles(self, repo):
        post = _post()
        repo.find_by_id.return_value = post
        service = BlogService(repo=repo)

        assert service.toggle_like(3, 7) == {"likes": 1, "is_liked": True}
        assert service.toggle_like(3, 7) == {"likes": 0, "is_liked": False}
        assert repo.save_likes.call_count == 2

    def test_cannot_like_unpublished(self, repo):
        repo.find_by_id.return_value = _post(status="draft")

        with pytest.raises(ValidationError) as exc_info:
            BlogService(repo=repo).toggle_like(3, 7)
        assert exc_info.value.message == "Cannot like unpublished post"

    def test_cannot_comment_on_unpublished(self, repo, customer):
        repo.find_by_id.return_value = _post(status="archived")

        with pytest.raises(ValidationError) as exc_info:
            BlogService(repo=repo).add_comment(3, customer, "Lovely work")
        assert exc_info.value.message == "Cannot comment on unpublished post"

    def test_comment_awaits_approval(self, repo, customer):
        repo.find_by_id.return_value = _post()
        repo.add_comment.return_value = Comment(
            id=9, post_id=3, user_id=7, name="Asha", email="asha@example.com", comment="Lovely work",
        )

        data = BlogService(repo=repo).add_comment(3, customer, "Lovely work")

        assert data["is_approved"] is False
        repo.add_comment.assert_called_once_with(3, 7, "Asha", "asha@example.com", "Lovely work")


class TestAdmin:

    def test_first_publish_sets_published_at(self, repo):
        repo.find_by_id.return_value = _post(status="draft")

        BlogService(repo=repo).update(3, BlogUpdate(status="published", content="word " * 250))

        fields = repo.update.call_args.args[1]
        assert fields["published_at"] is not None
        assert fields["reading_time"] == 2

    def test_republish_keeps_date(self, repo):
        post = _post()
        post.prepare()
        repo.find_by_id.return_value = post

        BlogService(repo=repo).update(3, BlogUpdate(status="published"))

        assert "published_at" not in repo.update.call_args.args[1]

    def test_missing_comment(self, repo):
        repo.approve_comment.return_value = False

        with pytest.raises(NotFoundError) as exc_info:
            BlogService(repo=repo).approve_comment(3, 99)
        assert exc_info.value.message == "Comment not found"

    def test_delete_missing_post(self, repo):
        repo.delete.return_value = False

        with pytest.raises(NotFoundError):
            BlogService(repo=repo).delete(3)
