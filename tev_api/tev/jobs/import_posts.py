from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List

from tev.db.repo import Repo
from tev.errors import BlogMismatchParsingError
from tev.metadata import is_valid_type, metadata_for_blog_or_default
from tev.xml.common import XmlSource
from tev.xml.post_reader import ParsedPost, read_posts

log = logging.getLogger(__name__)

PUBLISHED = "published"


@dataclass
class ImportPostsResult:
    blog: str
    total: int = 0
    written: int = 0
    unchanged: int = 0
    not_published: int = 0
    unsupported_type: int = 0
    overwritten: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _unchanged(existing: Dict[str, Any], post: Dict[str, Any]) -> bool:
    return (
        existing.get("state") == post.get("state")
        and existing.get("date") == post.get("date")
        and existing.get("date_gmt") == post.get("date_gmt")
        and existing.get("unix_timestamp") == post.get("unix_timestamp")
    )


def _write_post(repo: Repo, parsed: ParsedPost) -> None:
    repo.upsert_post(parsed.post, keep_flags=True)
    if parsed.type == "photo":
        repo.delete_photos(parsed.id)
        for photo in parsed.photos:
            repo.insert_photo(photo)
    elif parsed.type_row is not None:
        repo.upsert_type_row(parsed.type, parsed.type_row)
    for tag in parsed.tags:
        repo.increment_hashtag(tag, parsed.post["tumblelog"])


def import_posts(repo: Repo, blog: str, source: XmlSource) -> ImportPostsResult:
    """Import a Tumblr posts export into a blog.

    The whole document is parsed and checked against the blog before anything
    is written; the writes then happen in one transaction.
    """
    parsed: List[ParsedPost] = list(read_posts(source))
    for p in parsed:
        if p.post.get("tumblelog") != blog:
            raise BlogMismatchParsingError(blog, p.post.get("tumblelog") or "")

    md = metadata_for_blog_or_default(repo, blog)
    res = ImportPostsResult(blog=blog, total=len(parsed), overwritten=bool(md["overwrite_post_data"]))

    with repo.conn():
        if res.overwritten:
            repo.delete_posts_for_blog(blog)
            repo.delete_hashtags_for_blog(blog)
            log.info("Overwriting post data for blog=%s", blog)

        for p in parsed:
            if p.post.get("state") != PUBLISHED:
                res.not_published += 1
                continue
            if not is_valid_type(p.type):
                log.warning("Skipping post id=%s with unsupported type %r", p.id, p.type)
                res.unsupported_type += 1
                continue

            if not res.overwritten:
                existing = repo.get_post(p.id)
                if existing is not None and _unchanged(existing, p.post):
                    res.unchanged += 1
                    continue

            _write_post(repo, p)
            res.written += 1

    log.info(
        "Imported posts for blog=%s: total=%s written=%s unchanged=%s not_published=%s unsupported=%s",
        blog,
        res.total,
        res.written,
        res.unchanged,
        res.not_published,
        res.unsupported_type,
    )
    return res
