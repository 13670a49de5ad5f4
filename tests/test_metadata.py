"""Tests for per-blog metadata and the default blog."""

import pytest

from tev import metadata
from tev.errors import InvalidMetadataError, NoMetadataFoundError, ResourceNotFoundError, UnableToDeleteMetadataError


class TestDefaults:
    def test_new_default_metadata(self):
        md = metadata.new_default_metadata("b")
        assert md["blog"] == "b"
        assert md["sort_order"] == "Descending"
        assert md["sort_column"] == "ID"
        assert md["filter"] == metadata.FILTER_NONE
        assert md["fav_filter"] == metadata.FAV_FILTER_ALL
        assert md["page_length"] == 10
        assert md["conversation_display_style"] == "cards"
        assert md["conversation_sort_column"] == "participantName"
        assert md["theme"] == metadata.DEFAULT_THEME
        assert md["show_hashtags_for_all_blogs"] is True

    def test_static_list_data(self):
        data = metadata.static_list_data()
        assert data["page_lengths"] == [10, 25, 50, 100, -1]
        assert "base" in data["themes"]
        assert data["sort_orders"] == ["Ascending", "Descending"]

    def test_is_valid_type(self):
        assert metadata.is_valid_type("photo")
        assert not metadata.is_valid_type("quote")
        assert not metadata.is_valid_type(None)

    def test_all_metadata_without_blogs(self, repo):
        rows = metadata.all_metadata(repo)
        assert len(rows) == 1
        assert rows[0]["id"] is None


class TestDefaultBlog:
    def test_first_blog_becomes_default(self, repo):
        first = metadata.metadata_for_blog_or_default(repo, "one")
        second = metadata.metadata_for_blog_or_default(repo, "two")
        assert first["is_default"] is True
        assert second["is_default"] is False
        assert metadata.default_blog_name(repo) == "one"

    def test_existing_record_is_returned(self, repo):
        first = metadata.metadata_for_blog_or_default(repo, "one")
        again = metadata.metadata_for_blog_or_default(repo, "one")
        assert again["id"] == first["id"]
        assert repo.count_metadata() == 1

    def test_no_default_blog(self, repo):
        with pytest.raises(NoMetadataFoundError):
            metadata.default_blog_name(repo)

    def test_mark_as_default_moves_the_flag(self, repo):
        metadata.metadata_for_blog_or_default(repo, "one")
        two = metadata.metadata_for_blog_or_default(repo, "two")
        metadata.mark_as_default(repo, two["id"])
        assert metadata.default_blog_name(repo) == "two"
        assert [m["is_default"] for m in metadata.all_metadata(repo)] == [0, 1]

    def test_mark_missing_as_default(self, repo):
        with pytest.raises(ResourceNotFoundError):
            metadata.mark_as_default(repo, 99)


class TestUpdate:
    def test_update_fields(self, repo, blog_md):
        md = metadata.update_metadata(repo, blog_md["id"], {"page_length": 50, "theme": "vader", "base_media_path": "/m"})
        assert md["page_length"] == 50
        assert md["theme"] == "vader"
        assert md["base_media_path"] == "/m"

    def test_theme_is_kept_when_not_sent(self, repo, blog_md):
        metadata.update_metadata(repo, blog_md["id"], {"theme": "vader"})
        md = metadata.update_metadata(repo, blog_md["id"], {"page_length": 25})
        assert md["theme"] == "vader"

    def test_invalid_theme(self, repo, blog_md):
        with pytest.raises(InvalidMetadataError):
            metadata.update_metadata(repo, blog_md["id"], {"theme": "neon"})

    def test_blog_name_cannot_change(self, repo, blog_md):
        md = metadata.update_metadata(repo, blog_md["id"], {"blog": "renamed"})
        assert md["blog"] == blog_md["blog"]

    def test_default_blog_stays_default(self, repo, blog_md):
        md = metadata.update_metadata(repo, blog_md["id"], {"is_default": False})
        assert md["is_default"]

    def test_update_can_make_default(self, repo, blog_md):
        other = metadata.metadata_for_blog_or_default(repo, "other")
        metadata.update_metadata(repo, other["id"], {"is_default": True})
        assert metadata.default_blog_name(repo) == "other"
        assert not metadata.metadata_by_id(repo, blog_md["id"])["is_default"]

    def test_unknown_stored_theme_reads_as_base(self, repo, blog_md):
        with repo.conn():
            repo.conn().execute("UPDATE metadata SET theme='gone' WHERE id=?", (blog_md["id"],))
        assert metadata.metadata_by_id(repo, blog_md["id"])["theme"] == "base"


class TestDelete:
    def test_only_blog_cannot_be_deleted(self, repo, blog_md):
        with pytest.raises(UnableToDeleteMetadataError):
            metadata.delete_metadata(repo, blog_md["id"])

    def test_delete_missing(self, repo):
        with pytest.raises(ResourceNotFoundError):
            metadata.delete_metadata(repo, 42)

    def test_delete_removes_blog_data_and_moves_default(self, repo, blog_md, imported):
        other = metadata.metadata_for_blog_or_default(repo, "other")
        with repo.conn():
            repo.stage_post(180254465582, blog_md["blog"])

        metadata.delete_metadata(repo, blog_md["id"])

        assert repo.list_posts(blog_md["blog"]) == []
        assert repo.list_hashtags(blog_md["blog"]) == []
        assert repo.list_staged_ids(blog_md["blog"]) == []
        assert repo.list_type_rows("regular", blog_md["blog"]) == []
        assert metadata.default_blog_name(repo) == other["blog"]
