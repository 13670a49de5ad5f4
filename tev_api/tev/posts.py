from __future__ import annotations

import logging
from typing import Any, Dict, List

from tev.db.repo import TYPE_TABLE_COLUMNS, Repo
from tev.errors import BlogPostMismatchError, InvalidTypeError, NoParentPostError, ResourceNotFoundError
from tev.metadata import is_valid_type

log = logging.getLogger(__name__)

TYPE_LABELS = {
    "answer": "Answer",
    "link": "Link",
    "photo": "Photo",
    "regular": "Regular",
    "video": "Video",
}

FLAGS = {
    "read": ("is_read", True),
    "unread": ("is_read", False),
    "favourite": ("is_favourite", True),
    "nonfavourite": ("is_favourite", False),
}


def check_type(post_type: str) -> str:
    if not is_valid_type(post_type):
        raise InvalidTypeError(post_type)
    return post_type


# -------- posts --------

def get_post_or_404(repo: Repo, post_id: int) -> Dict[str, Any]:
    post = repo.get_post(post_id)
    if post is None:
        raise ResourceNotFoundError("Post", "id", post_id)
    return post


def get_blog_post(repo: Repo, blog: str, post_id: int) -> Dict[str, Any]:
    post = get_post_or_404(repo, post_id)
    if post["tumblelog"] != blog:
        raise BlogPostMismatchError(blog, post_id)
    return post


def _parent_of_blog(repo: Repo, blog: str, post_id: Any) -> Dict[str, Any]:
    parent = repo.get_post(post_id) if post_id is not None else None
    if parent is None:
        raise NoParentPostError(post_id)
    if parent["tumblelog"] != blog:
        raise BlogPostMismatchError(blog, post_id)
    return parent


def _check_not_foreign(repo: Repo, blog: str, post_id: Any) -> None:
    # an id already taken by another blog's post is not re-homed
    existing = repo.get_post(post_id) if post_id is not None else None
    if existing is not None and existing["tumblelog"] != blog:
        raise BlogPostMismatchError(blog, post_id)


def list_posts(repo: Repo, blog: str) -> List[Dict[str, Any]]:
    return repo.list_posts(blog)


def posts_by_type(repo: Repo, blog: str, post_type: str) -> List[Dict[str, Any]]:
    return repo.list_posts(blog, check_type(post_type))


def create_post(repo: Repo, blog: str, data: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(data)
    data["tumblelog"] = data.get("tumblelog") or blog
    if data["tumblelog"] != blog:
        raise BlogPostMismatchError(blog, data.get("id"))
    check_type(data.get("type") or "")
    _check_not_foreign(repo, blog, data["id"])
    with repo.conn():
        repo.upsert_post(data, keep_flags=False)
    return get_post_or_404(repo, data["id"])


def update_post(repo: Repo, blog: str, post_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
    current = get_blog_post(repo, blog, post_id)
    merged = dict(current)
    merged.update({k: v for k, v in data.items() if v is not None})
    merged["id"] = current["id"]
    merged["tumblelog"] = blog
    check_type(merged.get("type") or "")
    with repo.conn():
        repo.upsert_post(merged, keep_flags=False)
    return get_post_or_404(repo, post_id)


def delete_post(repo: Repo, blog: str, post_id: int) -> None:
    get_blog_post(repo, blog, post_id)
    with repo.conn():
        repo.delete_post(post_id)


def delete_all_posts(repo: Repo, blog: str) -> int:
    with repo.conn():
        n = repo.delete_posts_for_blog(blog)
    log.info("Deleted %s posts of blog=%s", n, blog)
    return n


def set_flag(repo: Repo, blog: str, post_id: int, which: str) -> Dict[str, Any]:
    """which: read | unread | favourite | nonfavourite"""
    column, value = FLAGS[which]
    get_blog_post(repo, blog, post_id)
    with repo.conn():
        repo.set_post_flag(post_id, column, value)
    return get_post_or_404(repo, post_id)


def mark_all(repo: Repo, blog: str, is_read: bool) -> int:
    with repo.conn():
        n = repo.set_blog_read(blog, is_read)
    log.info("Marked %s posts of blog=%s as %s", n, blog, "read" if is_read else "unread")
    return n


# -------- answer / link / regular / video --------

def list_type_rows(repo: Repo, blog: str, post_type: str) -> List[Dict[str, Any]]:
    if post_type == "photo":
        return repo.list_photos_for_blog(blog)
    return repo.list_type_rows(post_type, blog)


def get_type_row(repo: Repo, blog: str, post_type: str, post_id: int) -> Dict[str, Any]:
    get_blog_post(repo, blog, post_id)
    row = repo.get_type_row(post_type, post_id)
    if row is None:
        raise ResourceNotFoundError(TYPE_LABELS[post_type], "id", post_id)
    return row


def create_type_row(repo: Repo, blog: str, post_type: str, post_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
    _parent_of_blog(repo, blog, post_id)
    row = {c: data.get(c) for c in TYPE_TABLE_COLUMNS[post_type]}
    row["post_id"] = int(post_id)
    with repo.conn():
        repo.upsert_type_row(post_type, row)
    return repo.get_type_row(post_type, post_id)


def update_type_row(repo: Repo, blog: str, post_type: str, post_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
    current = get_type_row(repo, blog, post_type, post_id)
    current.update({c: data[c] for c in TYPE_TABLE_COLUMNS[post_type] if c in data})
    with repo.conn():
        repo.upsert_type_row(post_type, current)
    return repo.get_type_row(post_type, post_id)


def delete_type_row(repo: Repo, blog: str, post_type: str, post_id: int) -> None:
    get_type_row(repo, blog, post_type, post_id)
    with repo.conn():
        repo.delete_type_row(post_type, post_id)


def delete_type_rows_for_blog(repo: Repo, blog: str, post_type: str) -> int:
    with repo.conn():
        return repo.delete_type_rows_for_blog(post_type, blog)


# -------- photos --------

def list_photos(repo: Repo, blog: str, post_id: int) -> List[Dict[str, Any]]:
    get_blog_post(repo, blog, post_id)
    return repo.list_photos(post_id)


def _photo_of_blog(repo: Repo, blog: str, photo_id: int) -> Dict[str, Any]:
    photo = repo.get_photo(photo_id)
    if photo is None:
        raise ResourceNotFoundError("Photo", "id", photo_id)
    get_blog_post(repo, blog, photo["post_id"])
    return photo


def create_photo(repo: Repo, blog: str, data: Dict[str, Any]) -> Dict[str, Any]:
    _parent_of_blog(repo, blog, data.get("post_id"))
    with repo.conn():
        photo_id = repo.insert_photo(data)
    return repo.get_photo(photo_id)


def update_photo(repo: Repo, blog: str, photo_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
    current = _photo_of_blog(repo, blog, photo_id)
    current.update({k: v for k, v in data.items() if k not in ("id", "post_id")})
    with repo.conn():
        repo.update_photo(photo_id, current)
    return repo.get_photo(photo_id)


def delete_photo(repo: Repo, blog: str, photo_id: int) -> None:
    _photo_of_blog(repo, blog, photo_id)
    with repo.conn():
        repo.delete_photo(photo_id)


def delete_photos_for_post(repo: Repo, blog: str, post_id: int) -> int:
    get_blog_post(repo, blog, post_id)
    with repo.conn():
        return repo.delete_photos(post_id)


# -------- bundle (bulk transfer) --------

_BUNDLE_TYPE_KEYS = (("answers", "answer"), ("links", "link"), ("regulars", "regular"), ("videos", "video"))


def export_bundle(repo: Repo, blog: str) -> Dict[str, List[Dict[str, Any]]]:
    return {
        "posts": repo.list_posts(blog),
        "answers": repo.list_type_rows("answer", blog),
        "links": repo.list_type_rows("link", blog),
        "photos": repo.list_photos_for_blog(blog),
        "regulars": repo.list_type_rows("regular", blog),
        "videos": repo.list_type_rows("video", blog),
    }


def import_bundle(repo: Repo, blog: str, bundle: Dict[str, List[Dict[str, Any]]]) -> Dict[str, int]:
    """Load a bundle: posts upserted, type rows and photos replaced.

    Every post id, type row and photo is checked against the blog before
    anything is written.
    """
    posts = bundle.get("posts") or []
    incoming = set()
    for p in posts:
        if (p.get("tumblelog") or blog) != blog:
            raise BlogPostMismatchError(blog, p.get("id"))
        _check_not_foreign(repo, blog, p.get("id"))
        incoming.add(int(p["id"]))

    children = [(key, table, bundle.get(key) or []) for key, table in _BUNDLE_TYPE_KEYS]
    photos = bundle.get("photos") or []
    parent_ids = [row.get("post_id") for _, _, rows in children for row in rows]
    parent_ids.extend(ph.get("post_id") for ph in photos)
    for post_id in parent_ids:
        if post_id is None or int(post_id) not in incoming:
            _parent_of_blog(repo, blog, post_id)

    counts = {"posts": len(posts)}
    with repo.conn():
        for p in posts:
            repo.upsert_post(dict(p, tumblelog=blog), keep_flags=False)

        for key, table, rows in children:
            for row in rows:
                repo.upsert_type_row(table, row)
            counts[key] = len(rows)

        for post_id in {int(ph["post_id"]) for ph in photos}:
            repo.delete_photos(post_id)
        for ph in photos:
            repo.insert_photo(ph)
        counts["photos"] = len(photos)

    log.info("Loaded bundle for blog=%s: %s", blog, counts)
    return counts
