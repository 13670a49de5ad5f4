"""Housekeeping for a blog's media directory (base_media_path).

Media files are named after the post they belong to: photos as
``<postid>_<n><ext>``, videos as ``<postid>.<ext>``.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, Dict, List

from tev.db.repo import Repo
from tev.errors import MediaError, ResourceNotFoundError
from tev.jobs.fetch_photos import fix_photos
from tev.settings import Settings

log = logging.getLogger(__name__)


def media_dir_for_blog(repo: Repo, blog: str) -> Path:
    md = repo.get_metadata_by_blog(blog)
    if not md or not md.get("base_media_path"):
        raise MediaError("admintools.noMediaPath", f"No media directory configured for blog '{blog}'")
    return Path(md["base_media_path"])


def _belongs_to(name: str, post_id: int) -> bool:
    return name.startswith(f"{post_id}_") or name.startswith(f"{post_id}.")


def _photo_order(name: str, post_id: int) -> tuple:
    # 123_10.jpg comes after 123_2.jpg
    stem = name[len(str(post_id)) + 1:].split(".", 1)[0]
    if stem.isdigit():
        return (0, int(stem), name)
    return (1, 0, name)


def _files(media_dir: Path) -> List[Path]:
    if not media_dir.is_dir():
        return []
    return sorted(p for p in media_dir.iterdir() if p.is_file())


def clean_images(repo: Repo, blog: str) -> Dict[str, Any]:
    """Remove duplicate photo downloads and files of no known post.

    A photo post with exactly twice as many files as photos was downloaded
    twice under different names; the second half (by photo index) goes.
    """
    media_dir = media_dir_for_blog(repo, blog)
    files = _files(media_dir)
    keep: set[Path] = set()
    duplicates: List[Path] = []

    for post in repo.list_posts(blog, "photo"):
        n_photos = len(repo.list_photos(post["id"]))
        mine = sorted(
            (f for f in files if _belongs_to(f.name, post["id"])),
            key=lambda f: _photo_order(f.name, post["id"]),
        )
        if n_photos and len(mine) == 2 * n_photos:
            keep.update(mine[:n_photos])
            duplicates.extend(mine[n_photos:])
        else:
            keep.update(mine)

    for post in repo.list_posts(blog, "video"):
        keep.update(f for f in files if _belongs_to(f.name, post["id"]))

    removed: List[str] = []
    for f in files:
        if f in keep:
            continue
        f.unlink()
        removed.append(f.name)

    log.info(
        "Cleaned media dir %s for blog=%s: removed=%s (duplicates=%s) kept=%s",
        media_dir,
        blog,
        len(removed),
        len(duplicates),
        len(keep),
    )
    return {"removed": removed, "kept": len(keep)}


def import_images(repo: Repo, blog: str, source_dir: str) -> Dict[str, Any]:
    """Copy every file of source_dir into the blog's media directory, then clean it."""
    src = Path(source_dir)
    if not src.is_dir():
        raise MediaError("admintools.invalidSourceDir", f"Source directory does not exist: {source_dir}")
    media_dir = media_dir_for_blog(repo, blog)
    media_dir.mkdir(parents=True, exist_ok=True)

    copied = skipped = 0
    try:
        for f in sorted(src.iterdir()):
            if not f.is_file():
                continue
            dst = media_dir / f.name
            if dst.exists():
                skipped += 1
                continue
            shutil.copy2(f, dst)
            copied += 1
    except OSError as e:
        log.error("Failed copying images from %s to %s: %r", src, media_dir, e)
        raise MediaError("admintools.copyError", f"Error copying files: {e}", status_code=500) from e

    log.info("Imported images for blog=%s: copied=%s skipped=%s", blog, copied, skipped)
    res = clean_images(repo, blog)
    res.update({"copied": copied, "skipped": skipped})
    return res


async def export_images(*, settings: Settings, repo: Repo, blog: str, post_id: int, destination: str) -> Dict[str, Any]:
    """Copy a post's media files into destination (photos are fetched first)."""
    dest = Path(destination)
    if not dest.is_dir():
        raise MediaError("staging.invalidTargetDir", f"Target directory does not exist: {destination}")

    post = repo.get_post(post_id)
    if post is None:
        raise ResourceNotFoundError("Post", "id", post_id)
    media_dir = media_dir_for_blog(repo, blog)

    if post["type"] == "photo":
        ok = await fix_photos(settings=settings, blog=blog, post_id=post_id)
        if not ok:
            raise MediaError("staging.fetchError", f"Unable to fetch photos of post {post_id}", status_code=424)

    copied: List[str] = []
    try:
        for f in _files(media_dir):
            if not _belongs_to(f.name, post_id):
                continue
            target = dest / f.name
            if target.exists():
                continue
            shutil.copy2(f, target)
            copied.append(f.name)
    except OSError as e:
        log.error("Failed exporting media of post id=%s to %s: %r", post_id, dest, e)
        raise MediaError("staging.copyError", f"Error copying files: {e}", status_code=500) from e

    with repo.conn():
        repo.set_export_images_path(blog, str(dest))
    log.info("Exported %s media files of post id=%s to %s", len(copied), post_id, dest)
    return {"copied": copied}


def resolve_media_file(media_dir: Path, name: str) -> Path:
    """A file directly inside media_dir; anything else is not found."""
    if not name or "/" in name or "\\" in name or name in {".", ".."}:
        raise ResourceNotFoundError("Media", "name", name)
    path = media_dir / name
    if not path.is_file():
        raise ResourceNotFoundError("Media", "name", name)
    return path
