"""Tests for the photo fetcher (network calls are replaced)."""

import asyncio

import pytest

from conftest import BLOG
from tev.jobs import fetch_photos
from tev.metadata import update_metadata

PHOTOSET_ID = 180894436671


class TestNaming:
    @pytest.mark.parametrize(
        "url,content_type,expected",
        [
            ("https://x/a.png", None, ".png"),
            ("https://x/a.JPEG", None, ".jpg"),
            ("https://x/a", "image/gif; charset=binary", ".gif"),
            ("https://x/a", None, ".jpg"),
        ],
    )
    def test_guess_ext(self, url, content_type, expected):
        assert fetch_photos._guess_ext(url, content_type) == expected

    def test_photo_file_stem(self):
        assert fetch_photos.photo_file_stem(123, 0) == "123_0"


class TestFixPhotos:
    def test_no_media_dir(self, settings, repo, imported):
        assert asyncio.run(fetch_photos.fix_photos(settings=settings, blog=BLOG, post_id=PHOTOSET_ID)) is False

    def test_downloads_every_photo(self, settings, repo, blog_md, imported, tmp_path, monkeypatch):
        media = tmp_path / "media"
        update_metadata(repo, blog_md["id"], {"base_media_path": str(media)})
        calls = []

        async def fake_download(session, url, dst_path, *, attempts, timeout_total):
            calls.append((url, dst_path.name, attempts))
            return True, str(dst_path)

        monkeypatch.setattr(fetch_photos, "_download_to_file", fake_download)
        ok = asyncio.run(fetch_photos.fix_photos(settings=settings, blog=BLOG, post_id=PHOTOSET_ID))

        assert ok is True
        assert calls == [
            ("https://media.tumblr.com/aaa/tumblr_1_1280.jpg", f"{PHOTOSET_ID}_0.jpg", 1),
            ("https://media.tumblr.com/bbb/tumblr_2_1280.png", f"{PHOTOSET_ID}_1.png", 1),
        ]

    def test_failed_download(self, settings, repo, blog_md, imported, tmp_path, monkeypatch):
        update_metadata(repo, blog_md["id"], {"base_media_path": str(tmp_path / "media")})

        async def fake_download(session, url, dst_path, *, attempts, timeout_total):
            return False, "ClientError()"

        monkeypatch.setattr(fetch_photos, "_download_to_file", fake_download)
        assert asyncio.run(fetch_photos.fix_photos(settings=settings, blog=BLOG, post_id=PHOTOSET_ID)) is False


class TestFetchBlogPhotos:
    def test_reports_failed_posts(self, settings, repo, blog_md, imported, tmp_path, monkeypatch):
        update_metadata(repo, blog_md["id"], {"base_media_path": str(tmp_path / "media")})

        async def fake_download(session, url, dst_path, *, attempts, timeout_total):
            return (".gif" not in url), str(dst_path)

        monkeypatch.setattr(fetch_photos, "_download_to_file", fake_download)
        res = asyncio.run(fetch_photos.fetch_blog_photos(settings=settings, blog=BLOG))
        assert res == {"ok": False, "posts": 2, "failed": [180894436690]}

    def test_no_media_dir(self, settings, repo, imported):
        res = asyncio.run(fetch_photos.fetch_blog_photos(settings=settings, blog=BLOG))
        assert res == {"ok": False, "posts": 0, "failed": []}
