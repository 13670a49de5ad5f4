from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from tev import staging
from tev.api.auth import require_api_key
from tev.api.deps import get_repo, get_settings
from tev.api.schemas import PathRequest
from tev.db.repo import Repo
from tev.jobs.media_tools import export_images
from tev.posts import get_blog_post
from tev.settings import Settings

router = APIRouter(prefix="/staging-api", dependencies=[Depends(require_api_key)], tags=["staging"])


@router.get("/posts/{blog}", response_model=List[int])
def list_staged_posts(blog: str, repo: Repo = Depends(get_repo)) -> List[int]:
    return staging.staged_ids(repo, blog)


@router.delete("/posts/{blog}")
def unstage_all_posts(blog: str, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return {"ok": True, "deleted": staging.unstage_all(repo, blog)}


@router.post("/posts/{blog}/{post_id}")
def stage_post(blog: str, post_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return {"ok": True, "id": staging.stage_post(repo, blog, post_id)}


@router.delete("/posts/{blog}/{post_id}")
def unstage_post(blog: str, post_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    staging.unstage_post(repo, blog, post_id)
    return {"ok": True, "id": post_id}


@router.post("/posts/{blog}/{post_id}/exportImages")
async def export_post_images(
    blog: str,
    post_id: int,
    payload: PathRequest,
    repo: Repo = Depends(get_repo),
    s: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    get_blog_post(repo, blog, post_id)
    res = await export_images(settings=s, repo=repo, blog=blog, post_id=post_id, destination=payload.path)
    return {"ok": True, **res}
