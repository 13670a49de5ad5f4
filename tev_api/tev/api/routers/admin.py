from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from tev import posts as post_service
from tev.api.auth import require_api_key
from tev.api.deps import get_locale, get_repo
from tev.api.schemas import MessageResponse, PathRequest, Post
from tev.db.repo import Repo
from tev.i18n import message
from tev.jobs import media_tools

router = APIRouter(prefix="/admintools", dependencies=[Depends(require_api_key)], tags=["admintools"])


@router.get("/posts/{blog}/type/{post_type}", response_model=List[Post])
def posts_by_type(blog: str, post_type: str, repo: Repo = Depends(get_repo)) -> List[Dict[str, Any]]:
    return post_service.posts_by_type(repo, blog, post_type)


@router.get("/posts/{blog}/markAllRead", response_model=MessageResponse)
def mark_all_read(blog: str, repo: Repo = Depends(get_repo), locale: str = Depends(get_locale)) -> Dict[str, str]:
    post_service.mark_all(repo, blog, True)
    return {"message": message("admintools.success", locale)}


@router.get("/posts/{blog}/markAllUnread", response_model=MessageResponse)
def mark_all_unread(blog: str, repo: Repo = Depends(get_repo), locale: str = Depends(get_locale)) -> Dict[str, str]:
    post_service.mark_all(repo, blog, False)
    return {"message": message("admintools.success", locale)}


@router.get("/posts/{blog}/cleanImagesOnHD")
def clean_images_on_hd(
    blog: str,
    repo: Repo = Depends(get_repo),
    locale: str = Depends(get_locale),
) -> Dict[str, Any]:
    res = media_tools.clean_images(repo, blog)
    return {"message": message("admintools.success", locale), **res}


@router.post("/posts/{blog}/importImages")
def import_images(
    blog: str,
    payload: PathRequest,
    repo: Repo = Depends(get_repo),
    locale: str = Depends(get_locale),
) -> Dict[str, Any]:
    res = media_tools.import_images(repo, blog, payload.path)
    return {"message": message("admintools.success", locale), **res}

