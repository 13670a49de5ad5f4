from __future__ import annotations

from typing import List

from tev.db.repo import Repo
from tev.errors import BlogPostMismatchError, ResourceNotFoundError
from tev.posts import get_blog_post


def staged_ids(repo: Repo, blog: str) -> List[int]:
    return repo.list_staged_ids(blog)


def stage_post(repo: Repo, blog: str, post_id: int) -> int:
    get_blog_post(repo, blog, post_id)
    with repo.conn():
        repo.stage_post(post_id, blog)
    return int(post_id)


def unstage_post(repo: Repo, blog: str, post_id: int) -> None:
    staged = repo.get_staged(post_id)
    if not staged:
        raise ResourceNotFoundError("StagingPost", "id", post_id)
    if all(s["blog"] != blog for s in staged):
        raise BlogPostMismatchError(blog, post_id)
    with repo.conn():
        repo.unstage_post(post_id, blog)


def unstage_all(repo: Repo, blog: str) -> int:
    with repo.conn():
        return repo.unstage_all(blog)
