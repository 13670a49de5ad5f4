"""Tests for the SQLite layer: URLs, schema, migrations, cascades."""

import sqlite3
from pathlib import Path

import pytest

from tev.db.conn import sqlite_path_from_url
from tev.db.repo import Repo


class TestSqliteUrl:
    def test_relative(self):
        assert sqlite_path_from_url("sqlite:///data/tev.db") == Path("data/tev.db")

    def test_absolute(self):
        assert sqlite_path_from_url("sqlite:////var/tev.db") == Path("/var/tev.db")

    def test_memory(self):
        assert sqlite_path_from_url("sqlite:///:memory:") == ":memory:"

    def test_other_databases_are_rejected(self):
        with pytest.raises(ValueError):
            sqlite_path_from_url("postgresql://localhost/tev")


class TestSchema:
    def test_ensure_schema_is_idempotent(self, repo):
        repo.ensure_schema()
        assert repo.count_metadata() == 0

    def test_old_metadata_table_is_migrated(self, settings, tmp_path):
        db = Path(settings.db_url[len("sqlite:///"):])
        db.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(db))
        conn.execute("CREATE TABLE metadata (id INTEGER PRIMARY KEY AUTOINCREMENT, blog TEXT NOT NULL UNIQUE)")
        conn.execute("INSERT INTO metadata (blog) VALUES ('old')")
        conn.commit()
        conn.close()

        repo = Repo(settings=settings)
        try:
            repo.ensure_schema()
            md = repo.get_metadata_by_blog("old")
            assert md["is_default"] == 0
            assert md["show_hashtags_for_all_blogs"] == 1
            assert "export_images_file_path" in md
        finally:
            repo.close()


class TestCascades:
    def test_post_delete_removes_type_rows_and_photos(self, repo):
        with repo.conn():
            repo.upsert_post({"id": 1, "type": "photo", "state": "published", "tumblelog": "b"})
            repo.insert_photo({"post_id": 1, "offset": "o1"})
            repo.upsert_post({"id": 2, "type": "answer", "state": "published", "tumblelog": "b"})
            repo.upsert_type_row("answer", {"post_id": 2, "question": "q", "answer": "a"})

        with repo.conn():
            repo.delete_posts_for_blog("b")

        assert repo.list_photos(1) == []
        assert repo.get_type_row("answer", 2) is None

    def test_type_table_names_are_checked(self, repo):
        with pytest.raises(ValueError):
            repo.list_type_rows("post; DROP TABLE post", "b")

    def test_unknown_post_flag(self, repo):
        with pytest.raises(ValueError):
            repo.set_post_flag(1, "tags", True)

    def test_failed_write_rolls_back(self, repo):
        with pytest.raises(sqlite3.IntegrityError):
            with repo.conn():
                repo.upsert_post({"id": 1, "type": "regular", "state": "published", "tumblelog": "b"})
                repo.upsert_type_row("answer", {"post_id": 99, "question": "q"})
        assert repo.get_post(1) is None
