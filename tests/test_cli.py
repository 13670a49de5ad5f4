"""Tests for the tev command line."""

import json

import pytest

from conftest import BLOG, MESSAGES_XML, POSTS_XML
from tev.cli import build_parser, main
from tev.db.repo import Repo
from tev.settings import Settings


@pytest.fixture
def run(tmp_path, monkeypatch, capsys):
    db_url = f"sqlite:///{tmp_path / 'cli.db'}"
    monkeypatch.chdir(tmp_path)

    def _run(*args):
        main(["--db-url", db_url, "--data-dir", str(tmp_path / "data"), *args])
        return capsys.readouterr().out

    _run.db_url = db_url
    return _run


def _repo(db_url, tmp_path):
    settings = Settings(
        db_url=db_url,
        data_dir=tmp_path,
        default_locale="en",
        photo_fetch_attempts=1,
        photo_fetch_timeout=5,
        photo_fetch_concurrency=1,
        cors_origins="",
    )
    return Repo(settings=settings)


class TestParser:
    def test_subcommand_is_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_import_posts_needs_blog(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["import-posts", "--file", "x.xml"])


class TestCommands:
    def test_init_db(self, run, tmp_path):
        assert "ready" in run("init-db")
        assert (tmp_path / "cli.db").exists()

    def test_import_posts_and_mark_all(self, run, tmp_path):
        out = run("import-posts", "--blog", BLOG, "--file", str(POSTS_XML))
        assert json.loads(out)["written"] == 6

        assert "Marked 6 posts" in run("mark-all", "--blog", BLOG)
        repo = _repo(run.db_url, tmp_path)
        try:
            assert all(p["is_read"] for p in repo.list_posts(BLOG))
        finally:
            repo.close()

    def test_import_conversations(self, run):
        out = run("import-conversations", "--blog", BLOG, "--file", str(MESSAGES_XML))
        assert json.loads(out)["created"] == 3

    def test_export_staged(self, run, tmp_path):
        run("import-posts", "--blog", BLOG, "--file", str(POSTS_XML))
        repo = _repo(run.db_url, tmp_path)
        try:
            with repo.conn():
                repo.stage_post(180254465582, BLOG)
        finally:
            repo.close()

        out_file = tmp_path / "staged.xml"
        run("export-staged", "--blog", BLOG, "--out", str(out_file))
        assert 'id="180254465582"' in out_file.read_text(encoding="utf-8")

    def test_errors_exit_with_a_message(self, run):
        run("import-posts", "--blog", BLOG, "--file", str(POSTS_XML))
        with pytest.raises(SystemExit) as exc:
            run("export-staged", "--blog", BLOG)
        assert "No staged posts" in str(exc.value)

    def test_media_commands(self, run, tmp_path):
        run("import-posts", "--blog", BLOG, "--file", str(POSTS_XML))
        media = tmp_path / "media"
        src = tmp_path / "incoming"
        media.mkdir()
        src.mkdir()
        (src / "180894436690_0.gif").write_bytes(b"x")
        (src / "junk.txt").write_bytes(b"x")

        run("set-media-path", "--blog", BLOG, "--path", str(media))
        res = json.loads(run("import-images", "--blog", BLOG, "--source", str(src)))
        assert res["copied"] == 2
        assert res["removed"] == ["junk.txt"]

        assert json.loads(run("clean-images", "--blog", BLOG))["removed"] == []
