"""Tests for the post routes of the JSON API."""

import pytest

from conftest import BLOG

REGULAR_ID = 180254465582
ANSWER_ID = 180371366195
PHOTOSET_ID = 180894436671


@pytest.fixture
def c(client_with_posts):
    return client_with_posts


class TestPostList:
    def test_list_posts(self, c):
        resp = c.get(f"/api/posts/{BLOG}")
        assert resp.status_code == 200
        posts = resp.json()
        assert len(posts) == 6
        assert posts[0]["is_read"] is False
        assert posts[0]["tags"] == "intro, hello"

    def test_unknown_blog_is_empty(self, c):
        assert c.get("/api/posts/nobody").json() == []

    def test_get_post(self, c):
        resp = c.get(f"/api/posts/{BLOG}/{REGULAR_ID}")
        assert resp.status_code == 200
        assert resp.json()["slug"] == "first-post"

    def test_missing_post(self, c):
        resp = c.get(f"/api/posts/{BLOG}/1")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Post not found with id : '1'"

    def test_post_of_another_blog(self, c):
        resp = c.get(f"/api/posts/otherblog/{REGULAR_ID}")
        assert resp.status_code == 400


class TestTypeRoutes:
    @pytest.mark.parametrize(
        "plural,count",
        [("answers", 1), ("links", 1), ("regulars", 1), ("videos", 1), ("photos", 3)],
    )
    def test_list_routes_are_not_taken_for_ids(self, c, plural, count):
        resp = c.get(f"/api/posts/{BLOG}/{plural}")
        assert resp.status_code == 200
        assert len(resp.json()) == count

    def test_get_type_row(self, c):
        resp = c.get(f"/api/posts/{BLOG}/{ANSWER_ID}/answer")
        assert resp.status_code == 200
        assert resp.json() == {"post_id": ANSWER_ID, "question": "Why?", "answer": "<p>Because.</p>"}

    def test_missing_type_row(self, c):
        resp = c.get(f"/api/posts/{BLOG}/{REGULAR_ID}/answer")
        assert resp.status_code == 404

    def test_update_type_row(self, c):
        resp = c.put(f"/api/posts/{BLOG}/{REGULAR_ID}/regular", json={"title": "Renamed"})
        assert resp.status_code == 200
        assert resp.json()["title"] == "Renamed"
        assert resp.json()["body"] == "<p>Hello <b>world</b></p>"

    def test_create_type_row_needs_parent(self, c):
        resp = c.post(f"/api/posts/{BLOG}/12345/link", json={"text": "x"})
        assert resp.status_code == 400
        assert "No parent post" in resp.json()["detail"]

    def test_delete_type_row(self, c):
        assert c.delete(f"/api/posts/{BLOG}/{ANSWER_ID}/answer").status_code == 200
        assert c.get(f"/api/posts/{BLOG}/{ANSWER_ID}/answer").status_code == 404

    def test_delete_all_rows_of_a_type(self, c):
        resp = c.delete(f"/api/posts/{BLOG}/photos")
        assert resp.json() == {"ok": True, "deleted": 3}
        assert c.get(f"/api/posts/{BLOG}/photos").json() == []


class TestPhotos:
    def test_photos_of_a_post(self, c):
        photos = c.get(f"/api/posts/{BLOG}/{PHOTOSET_ID}/photo").json()
        assert [ph["offset"] for ph in photos] == ["o1", "o2"]

    def test_create_update_delete_photo(self, c):
        resp = c.post(f"/api/posts/{BLOG}/photo", json={"post_id": PHOTOSET_ID, "offset": "o3"})
        assert resp.status_code == 200
        photo_id = resp.json()["id"]

        resp = c.put(f"/api/posts/{BLOG}/photo/{photo_id}", json={"post_id": PHOTOSET_ID, "caption": "third"})
        assert resp.json()["caption"] == "third"
        assert resp.json()["offset"] == "o3"

        assert c.delete(f"/api/posts/{BLOG}/photo/{photo_id}").status_code == 200
        assert len(c.get(f"/api/posts/{BLOG}/{PHOTOSET_ID}/photo").json()) == 2

    def test_photo_without_parent(self, c):
        resp = c.post(f"/api/posts/{BLOG}/photo", json={"post_id": 1})
        assert resp.status_code == 400


class TestFlags:
    @pytest.mark.parametrize(
        "verb,field,value",
        [
            ("markRead", "is_read", True),
            ("markFavourite", "is_favourite", True),
        ],
    )
    def test_mark(self, c, verb, field, value):
        resp = c.put(f"/api/posts/{BLOG}/{REGULAR_ID}/{verb}")
        assert resp.status_code == 200
        assert resp.json()[field] is value
        assert c.get(f"/api/posts/{BLOG}/{REGULAR_ID}").json()[field] is value

    def test_unmark(self, c):
        c.put(f"/api/posts/{BLOG}/{REGULAR_ID}/markRead")
        c.put(f"/api/posts/{BLOG}/{REGULAR_ID}/markFavourite")
        assert c.put(f"/api/posts/{BLOG}/{REGULAR_ID}/markUnread").json()["is_read"] is False
        assert c.put(f"/api/posts/{BLOG}/{REGULAR_ID}/markNonFavourite").json()["is_favourite"] is False

    def test_mark_missing_post(self, c):
        assert c.put(f"/api/posts/{BLOG}/1/markRead").status_code == 404


class TestPostCrud:
    def test_create_post(self, c):
        body = {"id": 1, "type": "regular", "state": "published", "slug": "new"}
        resp = c.post(f"/api/posts/{BLOG}", json=body)
        assert resp.status_code == 200
        assert resp.json()["tumblelog"] == BLOG

    def test_create_post_invalid_type(self, c):
        resp = c.post(f"/api/posts/{BLOG}", json={"id": 1, "type": "quote"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid post type 'quote'"

    def test_create_post_for_another_blog(self, c):
        resp = c.post(f"/api/posts/{BLOG}", json={"id": 1, "type": "regular", "tumblelog": "other"})
        assert resp.status_code == 400

    def test_create_post_cannot_take_an_id_of_another_blog(self, c):
        resp = c.post("/api/posts/other", json={"id": REGULAR_ID, "type": "regular"})
        assert resp.status_code == 400
        assert c.get(f"/api/posts/{BLOG}/{REGULAR_ID}").json()["tumblelog"] == BLOG

    def test_update_post_invalid_type(self, c):
        resp = c.put(f"/api/posts/{BLOG}/{REGULAR_ID}", json={"type": "quote"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid post type 'quote'"
        assert c.get(f"/api/posts/{BLOG}/{REGULAR_ID}").json()["type"] == "regular"

    def test_update_post_keeps_unsent_fields(self, c):
        resp = c.put(f"/api/posts/{BLOG}/{REGULAR_ID}", json={"slug": "renamed"})
        assert resp.json()["slug"] == "renamed"
        assert resp.json()["type"] == "regular"

    def test_delete_post_cascades(self, c):
        assert c.delete(f"/api/posts/{BLOG}/{PHOTOSET_ID}").status_code == 200
        assert c.get(f"/api/posts/{BLOG}/{PHOTOSET_ID}").status_code == 404
        assert len(c.get(f"/api/posts/{BLOG}/photos").json()) == 1

    def test_delete_all_posts(self, c):
        assert c.delete(f"/api/posts/{BLOG}").json() == {"ok": True, "deleted": 6}
        assert c.get(f"/api/posts/{BLOG}/regulars").json() == []


class TestBundle:
    def test_bundle_moves_posts_between_databases(self, c, tmp_path):
        bundle = c.get(f"/api/bundle/{BLOG}").json()
        assert len(bundle["posts"]) == 6
        assert len(bundle["photos"]) == 3

        c.delete(f"/api/posts/{BLOG}")
        resp = c.post(f"/api/bundle/{BLOG}", json=bundle)
        assert resp.status_code == 200
        assert resp.json()["posts"] == 6
        assert len(c.get(f"/api/posts/{BLOG}/photos").json()) == 3
        assert c.get(f"/api/posts/{BLOG}/{ANSWER_ID}/answer").json()["question"] == "Why?"

    def test_bundle_of_another_blog(self, c):
        bundle = c.get(f"/api/bundle/{BLOG}").json()
        resp = c.post("/api/bundle/other", json=bundle)
        assert resp.status_code == 400

    def test_bundle_does_not_move_posts_of_another_blog(self, c):
        c.put(f"/api/posts/{BLOG}/{REGULAR_ID}/markRead")
        bundle = {"posts": [{"id": REGULAR_ID, "type": "regular", "tumblelog": "other"}]}
        assert c.post("/api/bundle/other", json=bundle).status_code == 400

        post = c.get(f"/api/posts/{BLOG}/{REGULAR_ID}").json()
        assert post["tumblelog"] == BLOG
        assert post["is_read"] is True

    def test_bundle_does_not_replace_photos_of_another_blog(self, c):
        bundle = {"photos": [{"post_id": PHOTOSET_ID, "url1280": "https://elsewhere/x.jpg"}]}
        resp = c.post("/api/bundle/other", json=bundle)
        assert resp.status_code == 400
        photos = c.get(f"/api/posts/{BLOG}/{PHOTOSET_ID}/photo").json()
        assert [ph["offset"] for ph in photos] == ["o1", "o2"]

    def test_bundle_type_row_of_another_blog(self, c):
        bundle = {"answers": [{"post_id": ANSWER_ID, "question": "q", "answer": "a"}]}
        assert c.post("/api/bundle/other", json=bundle).status_code == 400
        assert c.get(f"/api/posts/{BLOG}/{ANSWER_ID}/answer").json()["question"] == "Why?"

    def test_bundle_type_row_without_parent(self, c):
        bundle = {"answers": [{"post_id": 1, "question": "q", "answer": "a"}]}
        resp = c.post(f"/api/bundle/{BLOG}", json=bundle)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "No parent post found with id 1"


class TestMisc:
    def test_types(self, client):
        assert client.get("/api/types").json() == ["answer", "link", "photo", "regular", "video"]

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_fix_photos_without_media_dir(self, c):
        resp = c.get(f"/api/posts/{BLOG}/{PHOTOSET_ID}/fixPhotos")
        assert resp.status_code == 200
        assert resp.json() is False

    def test_api_key_guard(self, client, monkeypatch):
        monkeypatch.setenv("API_KEY", "secret")
        assert client.get(f"/api/posts/{BLOG}").status_code == 401
        assert client.get(f"/api/posts/{BLOG}", headers={"X-API-Key": "secret"}).status_code == 200
        assert client.get(f"/api/posts/{BLOG}", headers={"Authorization": "Bearer secret"}).status_code == 200
