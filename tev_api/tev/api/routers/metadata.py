from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from tev import metadata
from tev.api.auth import require_api_key
from tev.api.deps import get_repo, get_settings
from tev.api.schemas import Metadata, StaticListData
from tev.db.repo import Repo
from tev.errors import NoMetadataFoundError, ResourceNotFoundError
from tev.settings import Settings

router = APIRouter(prefix="/api", dependencies=[Depends(require_api_key)], tags=["metadata"])


@router.get("/settings")
def get_settings_endpoint(s: Settings = Depends(get_settings)) -> Dict[str, Any]:
    return {
        "db_url": s.db_url,
        "data_dir": str(s.data_dir),
        "default_locale": s.default_locale,
        "photo_fetcher": {
            "attempts": s.photo_fetch_attempts,
            "timeout": s.photo_fetch_timeout,
            "concurrency": s.photo_fetch_concurrency,
        },
    }


@router.get("/types", response_model=List[str])
def list_types() -> List[str]:
    return list(metadata.POST_TYPES)


@router.get("/metadata", response_model=List[Metadata])
def list_metadata(repo: Repo = Depends(get_repo)) -> List[Dict[str, Any]]:
    return metadata.all_metadata(repo)


@router.get("/metadata/default", response_model=Metadata)
def get_default_metadata(repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    md = metadata.default_metadata(repo)
    if md is None:
        raise NoMetadataFoundError()
    return md


@router.get("/metadata/default/blogName", response_class=PlainTextResponse)
def get_default_blog_name(repo: Repo = Depends(get_repo)) -> str:
    return metadata.default_blog_name(repo)


@router.get("/metadata/staticListData", response_model=StaticListData)
def get_static_list_data() -> Dict[str, List[Any]]:
    return metadata.static_list_data()


@router.get("/metadata/byBlog/{blog}", response_model=Metadata)
def get_metadata_by_blog(blog: str, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    md = metadata.metadata_for_blog(repo, blog)
    if md is None:
        raise ResourceNotFoundError("Metadata", "blog", blog)
    return md


@router.get("/metadata/byBlog/{blog}/orDefault", response_model=Metadata)
def get_metadata_by_blog_or_default(blog: str, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return metadata.metadata_for_blog_or_default(repo, blog)


@router.get("/metadata/{metadata_id}", response_model=Metadata)
def get_metadata(metadata_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return metadata.get_metadata_or_404(repo, metadata_id)


@router.put("/metadata/{metadata_id}/markAsDefault", response_model=Metadata)
def mark_metadata_as_default(metadata_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return metadata.mark_as_default(repo, metadata_id)


@router.put("/metadata/{metadata_id}", response_model=Metadata)
def update_metadata(metadata_id: int, payload: Metadata, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return metadata.update_metadata(repo, metadata_id, payload.model_dump(exclude_unset=True))


@router.delete("/metadata/{metadata_id}")
def delete_metadata(metadata_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    metadata.delete_metadata(repo, metadata_id)
    return {"ok": True, "id": metadata_id}
