from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

import aiohttp

from tev.db.repo import Repo
from tev.settings import Settings

log = logging.getLogger(__name__)

USER_AGENT = "tumblr-export-viewer/0.3"

_CT_EXT = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
}

def _guess_ext(url: str, content_type: Optional[str]) -> str:
    suffix = Path(urlparse(url).path).suffix.lower()
    if suffix in {".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp"}:
        return ".jpg" if suffix == ".jpeg" else suffix

    if content_type:
        ct = content_type.split(";")[0].strip().lower()
        if ct in _CT_EXT:
            return _CT_EXT[ct]
    return ".jpg"

def photo_file_stem(post_id: int, index: int) -> str:
    """Media files of a post are named <postid>_<n><ext>, n starting at 0."""
    return f"{post_id}_{index}"

async def _download_to_file(
    session: aiohttp.ClientSession,
    url: str,
    dst_path: Path,
    *,
    attempts: int = 3,
    timeout_total: int = 45,
) -> Tuple[bool, str]:
    dst_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = dst_path.with_suffix(dst_path.suffix + ".part")

    last_err = ""
    for i in range(1, attempts + 1):
        try:
            timeout = aiohttp.ClientTimeout(total=timeout_total)
            async with session.get(url, timeout=timeout) as resp:
                if resp.status >= 400:
                    raise aiohttp.ClientResponseError(
                        resp.request_info, resp.history, status=resp.status, message=await resp.text()
                    )
                ext = _guess_ext(url, resp.headers.get("Content-Type"))
                if dst_path.suffix != ext:
                    dst_path = dst_path.with_suffix(ext)
                    tmp_path = dst_path.with_suffix(dst_path.suffix + ".part")

                with open(tmp_path, "wb") as f:
                    async for chunk in resp.content.iter_chunked(64 * 1024):
                        f.write(chunk)
                os.replace(tmp_path, dst_path)
                return True, str(dst_path)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            last_err = repr(e)
            if tmp_path.exists():
                tmp_path.unlink()
            if i < attempts:
                await asyncio.sleep(min(2 ** (i - 1), 8) + (0.1 * i))
    return False, last_err

async def fix_photos_for_post(
    *,
    settings: Settings,
    session: aiohttp.ClientSession,
    media_dir: Path,
    post_id: int,
    photos: List[Dict[str, Any]],
) -> bool:
    """Download the 1280px version of every photo of a post into media_dir."""
    ok_all = True
    for i, photo in enumerate(photos):
        url = photo.get("url1280")
        if not url:
            log.warning("Photo id=%s of post id=%s has no 1280px url", photo.get("id"), post_id)
            ok_all = False
            continue
        dst_path = media_dir / (photo_file_stem(post_id, i) + _guess_ext(url, None))
        ok, info = await _download_to_file(
            session,
            url,
            dst_path,
            attempts=settings.photo_fetch_attempts,
            timeout_total=settings.photo_fetch_timeout,
        )
        if ok:
            log.info("Fetched photo post id=%s #%s -> %s", post_id, i, info)
        else:
            ok_all = False
            log.warning("Failed fetching photo post id=%s url=%s err=%s", post_id, url, info)
    return ok_all

async def fix_photos(*, settings: Settings, blog: str, post_id: int) -> bool:
    """Re-download the photos of one post. False when nothing could be fetched."""
    repo = Repo(settings=settings)
    try:
        md = repo.get_metadata_by_blog(blog)
        photos = repo.list_photos(post_id)
    finally:
        repo.close()

    if not md or not md.get("base_media_path"):
        log.warning("No media directory configured for blog=%s", blog)
        return False
    if not photos:
        log.warning("Post id=%s has no photos to fetch", post_id)
        return False

    async with aiohttp.ClientSession(headers={"User-Agent": USER_AGENT}) as session:
        return await fix_photos_for_post(
            settings=settings,
            session=session,
            media_dir=Path(md["base_media_path"]),
            post_id=post_id,
            photos=photos,
        )

async def fetch_blog_photos(*, settings: Settings, blog: str, concurrency: Optional[int] = None) -> Dict[str, Any]:
    """Fetch the photos of every photo post of a blog (background job)."""
    repo = Repo(settings=settings)
    try:
        md = repo.get_metadata_by_blog(blog)
        by_post: Dict[int, List[Dict[str, Any]]] = {}
        for photo in repo.list_photos_for_blog(blog):
            by_post.setdefault(int(photo["post_id"]), []).append(photo)
    finally:
        repo.close()

    if not md or not md.get("base_media_path"):
        log.warning("No media directory configured for blog=%s", blog)
        return {"ok": False, "posts": 0, "failed": []}

    media_dir = Path(md["base_media_path"])
    sem = asyncio.Semaphore(concurrency or settings.photo_fetch_concurrency)
    failed: List[int] = []

    async with aiohttp.ClientSession(headers={"User-Agent": USER_AGENT}) as session:

        async def worker(post_id: int, photos: List[Dict[str, Any]]) -> None:
            async with sem:
                ok = await fix_photos_for_post(
                    settings=settings,
                    session=session,
                    media_dir=media_dir,
                    post_id=post_id,
                    photos=photos,
                )
                if not ok:
                    failed.append(post_id)

        await asyncio.gather(*(worker(pid, phs) for pid, phs in by_post.items()))

    log.info("Fetched photos for blog=%s: posts=%s failed=%s", blog, len(by_post), len(failed))
    return {"ok": not failed, "posts": len(by_post), "failed": sorted(failed)}
