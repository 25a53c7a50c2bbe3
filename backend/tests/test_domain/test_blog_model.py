"""
Unit tests for the BlogPost domain model

Author: Taksha Engineering
Date: 2025-10-17
"""
import pytest

from storefront.domain.blog import BlogPost, Comment, calculate_reading_time


def _post(**extra):
    data = {
        "id": 3,
        "title": "The craft of brass casting",
        "content": "word " * 450,
        "excerpt": "How our lamps are made",
        "category": "craftsmanship",
    }
    data.update(extra)
    return BlogPost(**data)


class TestReadingTime:

    @pytest.mark.parametrize("words,minutes", [(0, 1), (199, 1), (200, 1), (201, 2), (450, 3)])
    def test_rounds_up(self, words, minutes):
        assert calculate_reading_time("word " * words) == minutes


class TestBlogPost:

    def test_prepare_sets_slug_reading_time_and_publish_date(self):
        post = _post(status="published").prepare()

        assert post.seo.slug == "the-craft-of-brass-casting"
        assert post.reading_time == 3
        assert post.published_at is not None

    def test_prepare_leaves_drafts_unpublished(self):
        assert _post().prepare().published_at is None

    def test_toggle_like(self):
        post = _post()

        assert post.toggle_like(7) is True
        assert post.likes == 1
        assert post.toggle_like(7) is False
        assert post.likes == 0
        assert post.liked_by == []

    def test_public_dict_hides_unapproved_comments(self):
        post = _post(comments=[
            Comment(id=1, user_id=7, name="Asha", email="a@example.com", comment="Lovely read", is_approved=True),
            Comment(id=2, user_id=8, name="Ravi", email="r@example.com", comment="Buy my stuff"),
        ])

        public = post.to_dict(user_id=7)
        admin = post.to_dict(include_all_comments=True)

        assert [comment["id"] for comment in public["comments"]] == [1]
        assert public["comment_count"] == 2
        assert public["approved_comment_count"] == 1
        assert public["is_liked"] is False
        assert len(admin["comments"]) == 2
        assert "liked_by" not in public

    def test_summary_has_no_body(self):
        summary = _post().to_summary()
        assert "content" not in summary
        assert summary["reading_time_text"] == "1 min read"
