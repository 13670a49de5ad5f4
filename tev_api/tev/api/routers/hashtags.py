from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from tev import hashtags
from tev.api.auth import require_api_key
from tev.api.deps import get_repo
from tev.api.schemas import Hashtag, HashtagCreate
from tev.db.repo import Repo

router = APIRouter(prefix="/api", dependencies=[Depends(require_api_key)], tags=["hashtags"])


@router.get("/hashtags", response_model=List[Hashtag])
def list_all_hashtags(repo: Repo = Depends(get_repo)) -> List[Dict[str, Any]]:
    return hashtags.all_hashtags(repo)


@router.post("/hashtags", response_model=Hashtag)
def create_hashtag_for_no_blog(payload: HashtagCreate, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return hashtags.create_hashtag_for_no_blog(repo, payload.tag)


@router.get("/hashtags/{blog}", response_model=List[Hashtag])
def list_blog_hashtags(blog: str, repo: Repo = Depends(get_repo)) -> List[Dict[str, Any]]:
    return hashtags.hashtags_for_blog(repo, blog)


@router.post("/hashtags/{blog}", response_model=Hashtag)
def create_hashtag_for_blog(blog: str, payload: HashtagCreate, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return hashtags.create_hashtag_for_blog(repo, blog, payload.tag)


@router.delete("/hashtags/{blog}")
def delete_blog_hashtags(blog: str, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return {"ok": True, "deleted": hashtags.delete_hashtags_for_blog(repo, blog)}


@router.delete("/hashtags/{blog}/{tag}")
def delete_hashtag(blog: str, tag: str, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    hashtags.delete_hashtag(repo, blog, tag)
    return {"ok": True, "tag": tag, "blog": blog}
