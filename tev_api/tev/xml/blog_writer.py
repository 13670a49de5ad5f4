"""Writes posts back out in the Tumblr posts.xml format."""

from __future__ import annotations

import io
import logging
from typing import Any, Dict, List, Optional

from tev.db.repo import Repo
from tev.errors import NoStagedPostsError
from tev.xml.common import PHOTO_SIZES
from tev.xml.pretty_print import PrettyPrintWriter, XmlStreamWriter

log = logging.getLogger(__name__)


def _bool_attr(v: Any) -> str:
    return "true" if v else "false"


def _text_element(w: PrettyPrintWriter, name: str, text: Optional[Any]) -> None:
    w.write_start_element(name)
    w.write_characters("" if text is None else str(text))
    w.write_end_element()


def _photo_urls(w: PrettyPrintWriter, photo: Dict[str, Any]) -> None:
    for size, col in PHOTO_SIZES.items():
        w.write_start_element("photo-url")
        w.write_attribute("max-width", size)
        w.write_characters(photo.get(col) or "")
        w.write_end_element()


def _write_photo_body(w: PrettyPrintWriter, photos: List[Dict[str, Any]]) -> None:
    if not photos:
        _text_element(w, "photo-caption", "")
        return

    first = photos[0]
    _text_element(w, "photo-caption", first.get("caption"))
    if first.get("photo_link_url"):
        _text_element(w, "photo-link-url", first.get("photo_link_url"))
    _photo_urls(w, first)

    if len(photos) > 1:
        w.write_start_element("photoset")
        for ph in photos:
            w.write_start_element("photo")
            w.write_attribute("offset", ph.get("offset"))
            w.write_attribute("caption", "")
            w.write_attribute("width", ph.get("width"))
            w.write_attribute("height", ph.get("height"))
            _photo_urls(w, ph)
            w.write_end_element()
        w.write_end_element()


def _write_body(w: PrettyPrintWriter, repo: Repo, post: Dict[str, Any]) -> None:
    post_type = post.get("type")
    post_id = int(post["id"])

    if post_type == "photo":
        _write_photo_body(w, repo.list_photos(post_id))
        return

    row = repo.get_type_row(post_type, post_id) if post_type in ("answer", "link", "regular", "video") else None
    row = row or {}

    if post_type == "answer":
        _text_element(w, "question", row.get("question"))
        _text_element(w, "answer", row.get("answer"))
    elif post_type == "link":
        _text_element(w, "link-text", row.get("text"))
        _text_element(w, "link-url", row.get("url"))
        _text_element(w, "link-description", row.get("description"))
    elif post_type == "regular":
        if row.get("title"):
            _text_element(w, "regular-title", row.get("title"))
        _text_element(w, "regular-body", row.get("body"))
    elif post_type == "video":
        w.write_start_element("video-source")
        _text_element(w, "content-type", row.get("content_type"))
        _text_element(w, "extension", row.get("extension"))
        _text_element(w, "width", row.get("width"))
        _text_element(w, "height", row.get("height"))
        _text_element(w, "duration", row.get("duration"))
        _text_element(w, "revision", row.get("revision"))
        w.write_end_element()
        _text_element(w, "video-caption", row.get("video_caption"))
    else:
        log.warning("Post id=%s has unsupported type %r; writing without body", post_id, post_type)


def write_post(w: PrettyPrintWriter, repo: Repo, post: Dict[str, Any]) -> None:
    w.write_start_element("post")
    w.write_attribute("id", post.get("id"))
    w.write_attribute("url", post.get("url"))
    w.write_attribute("url-with-slug", post.get("url_with_slug"))
    w.write_attribute("type", post.get("type"))
    w.write_attribute("date-gmt", post.get("date_gmt"))
    w.write_attribute("date", post.get("date"))
    w.write_attribute("unix-timestamp", post.get("unix_timestamp"))
    w.write_attribute("format", "html")
    w.write_attribute("reblog-key", post.get("reblog_key"))
    w.write_attribute("slug", post.get("slug"))
    w.write_attribute("state", post.get("state"))
    w.write_attribute("is_reblog", _bool_attr(post.get("is_reblog")))
    w.write_attribute("tumblelog", post.get("tumblelog"))
    if post.get("type") == "photo":
        w.write_attribute("width", post.get("width"))
        w.write_attribute("height", post.get("height"))

    _write_body(w, repo, post)

    for tag in (post.get("tags") or "").split(","):
        tag = tag.strip()
        if tag:
            _text_element(w, "tag", tag)

    w.write_end_element()


def write_posts_xml(repo: Repo, posts: List[Dict[str, Any]]) -> str:
    out = io.StringIO()
    w = PrettyPrintWriter(XmlStreamWriter(out))
    w.write_start_document()
    w.write_start_element("tumblr")
    w.write_attribute("version", "1.0")
    w.write_start_element("posts")
    for post in posts:
        write_post(w, repo, post)
    w.write_end_element()
    w.write_end_element()
    w.write_end_document()
    return out.getvalue()


def staged_post_xml(repo: Repo, blog: str) -> str:
    """Tumblr-format XML of every staged post of the blog, in staging order."""
    ids = repo.list_staged_ids(blog)
    if not ids:
        raise NoStagedPostsError(blog)

    posts = []
    for post_id in ids:
        post = repo.get_post(post_id)
        if post is None:
            log.warning("Staged post id=%s of blog=%s no longer exists; skipped", post_id, blog)
            continue
        posts.append(post)

    log.info("Exporting %s staged posts for blog=%s", len(posts), blog)
    return write_posts_xml(repo, posts)
