"""Tests for the application factory: metadata routes, locale handling, jobs."""

from fastapi.testclient import TestClient

from conftest import BLOG
from tev.api.main import _parse_cors_origins, create_app
from tev.i18n import LOCALE_COOKIE, message, normalize_locale


class TestI18n:
    def test_normalize_locale(self):
        assert normalize_locale("fr_FR") == "fr"
        assert normalize_locale("EN-us") == "en"
        assert normalize_locale("de") is None
        assert normalize_locale(None) is None

    def test_message_falls_back_to_english(self):
        assert message("admintools.success", "fr") == "succès"
        assert message("admintools.success", "de") == "success"
        assert message("no.such.key", "fr") == "no.such.key"


class TestLocale:
    def test_default_locale(self, client):
        assert client.get("/locale").json() == {"locale": "en"}

    def test_lang_parameter_sets_cookie(self, client):
        resp = client.get("/locale?lang=fr")
        assert resp.json() == {"locale": "fr"}
        assert resp.cookies.get(LOCALE_COOKIE) == "fr"
        # the cookie sticks for later requests
        assert client.get("/locale").json() == {"locale": "fr"}

    def test_unsupported_lang_is_ignored(self, client):
        assert client.get("/locale?lang=xx").json() == {"locale": "en"}

    def test_localized_success_message(self, client_with_posts):
        resp = client_with_posts.get(f"/admintools/posts/{BLOG}/markAllRead?lang=fr")
        assert resp.json() == {"message": "succès"}

    def test_localized_error(self, client_with_posts):
        resp = client_with_posts.get(f"/admintools/posts/{BLOG}/cleanImagesOnHD?lang=fr")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Aucun répertoire média configuré pour ce blog"

    def test_default_locale_from_settings(self, settings):
        fr_settings = settings.__class__(**{**settings.__dict__, "default_locale": "fr"})
        with TestClient(create_app(fr_settings)) as c:
            assert c.get("/locale").json() == {"locale": "fr"}


class TestMetadataApi:
    def test_no_blogs_yet(self, client):
        rows = client.get("/api/metadata").json()
        assert len(rows) == 1
        assert rows[0]["id"] is None
        assert client.get("/api/metadata/default").status_code == 404
        assert client.get("/api/metadata/default/blogName").status_code == 404

    def test_default_blog_name_is_plain_text(self, client_with_posts):
        resp = client_with_posts.get("/api/metadata/default/blogName")
        assert resp.status_code == 200
        assert resp.text == BLOG

    def test_by_blog(self, client_with_posts):
        c = client_with_posts
        assert c.get(f"/api/metadata/byBlog/{BLOG}").json()["is_default"] is True
        assert c.get("/api/metadata/byBlog/nobody").status_code == 404

    def test_by_blog_or_default_creates(self, client_with_posts):
        c = client_with_posts
        md = c.get("/api/metadata/byBlog/second/orDefault").json()
        assert md["blog"] == "second"
        assert md["is_default"] is False
        assert len(c.get("/api/metadata").json()) == 2

    def test_mark_as_default_and_delete(self, client_with_posts):
        c = client_with_posts
        first = c.get(f"/api/metadata/byBlog/{BLOG}").json()
        second = c.get("/api/metadata/byBlog/second/orDefault").json()

        assert c.put(f"/api/metadata/{second['id']}/markAsDefault").json()["is_default"] is True
        assert c.get("/api/metadata/default/blogName").text == "second"

        assert c.delete(f"/api/metadata/{first['id']}").status_code == 200
        assert c.get(f"/api/posts/{BLOG}").json() == []
        assert c.delete(f"/api/metadata/{second['id']}").status_code == 400

    def test_update_with_invalid_theme(self, client_with_posts):
        md = client_with_posts.get(f"/api/metadata/byBlog/{BLOG}").json()
        resp = client_with_posts.put(f"/api/metadata/{md['id']}", json={"theme": "neon"})
        assert resp.status_code == 400

    def test_static_list_data(self, client):
        data = client.get("/api/metadata/staticListData").json()
        assert data["conversation_styles"] == ["cards", "table"]
        assert data["filter_types"] == ["Filter Read Posts", "Filter Unread Posts", "Do not Filter"]

    def test_settings_endpoint(self, client, settings):
        data = client.get("/api/settings").json()
        assert data["db_url"] == settings.db_url
        assert data["photo_fetcher"]["attempts"] == 1


class TestJobsApi:
    def test_fetch_photos_job(self, client_with_posts):
        c = client_with_posts
        resp = c.post(f"/api/jobs/fetch-photos/{BLOG}")
        assert resp.status_code == 200
        job = resp.json()
        assert job["job_type"] == "fetch_photos"
        assert job["blog"] == BLOG

        assert c.get(f"/api/jobs/{job['job_id']}").json()["job_id"] == job["job_id"]
        assert [j["job_id"] for j in c.get(f"/api/jobs?blog={BLOG}").json()] == [job["job_id"]]
        assert c.get("/api/jobs?blog=nobody").json() == []

    def test_unknown_job(self, client):
        assert client.get("/api/jobs/nope").status_code == 404


class TestStaticUi:
    def test_index_is_served(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert "Tumblr Export Viewer" in resp.text


class TestCorsOrigins:
    def test_json_list(self):
        assert _parse_cors_origins('["http://a", "http://b"]') == ["http://a", "http://b"]

    def test_comma_separated(self):
        assert _parse_cors_origins("http://a, http://b") == ["http://a", "http://b"]

    def test_empty(self):
        assert _parse_cors_origins("") == []
