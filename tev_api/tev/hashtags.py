from __future__ import annotations

from typing import Any, Dict, List

from tev.db.repo import Repo
from tev.errors import ExistingTagError, InvalidTagError, ResourceNotFoundError


def _clean(tag: str) -> str:
    tag = (tag or "").strip().lower()
    if not tag:
        raise InvalidTagError("Hashtag must not be empty")
    return tag


def all_hashtags(repo: Repo) -> List[Dict[str, Any]]:
    """Hashtags of every blog merged by tag: counts summed, blogs joined."""
    merged: Dict[str, Dict[str, Any]] = {}
    for row in repo.list_hashtags():
        cur = merged.get(row["tag"])
        if cur is None:
            merged[row["tag"]] = {"id": row["id"], "tag": row["tag"], "blog": row["blog"], "count": row["count"]}
            continue
        cur["count"] += row["count"]
        if row["blog"]:
            cur["blog"] = f"{cur['blog']}, {row['blog']}" if cur["blog"] else row["blog"]
    return list(merged.values())


def hashtags_for_blog(repo: Repo, blog: str) -> List[Dict[str, Any]]:
    return repo.list_hashtags(blog)


def create_hashtag_for_blog(repo: Repo, blog: str, tag: str) -> Dict[str, Any]:
    tag = _clean(tag)
    with repo.conn():
        repo.increment_hashtag(tag, blog)
    return repo.get_hashtag(tag, blog)


def create_hashtag_for_no_blog(repo: Repo, tag: str) -> Dict[str, Any]:
    tag = _clean(tag)
    if repo.find_hashtags(tag):
        raise ExistingTagError(tag)
    with repo.conn():
        repo.increment_hashtag(tag, "")
    return repo.get_hashtag(tag, "")


def delete_hashtag(repo: Repo, blog: str, tag: str) -> None:
    tag = _clean(tag)
    with repo.conn():
        n = repo.delete_hashtag(tag, blog)
    if n == 0:
        raise ResourceNotFoundError("Hashtag", "tag", tag)


def delete_hashtags_for_blog(repo: Repo, blog: str) -> int:
    with repo.conn():
        return repo.delete_hashtags_for_blog(blog)
