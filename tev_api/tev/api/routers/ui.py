"""Routes the front end calls outside the JSON API: uploads, downloads, media."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import FileResponse, Response

from tev import metadata
from tev.api.auth import require_api_key
from tev.api.deps import get_repo
from tev.api.schemas import ImportConversationsResponse, ImportPostsResponse
from tev.db.repo import Repo
from tev.jobs.import_conversations import import_conversations
from tev.jobs.import_posts import import_posts
from tev.jobs.media_tools import media_dir_for_blog, resolve_media_file
from tev.xml.blog_writer import staged_post_xml

router = APIRouter(tags=["ui"])


@router.post(
    "/postDataUpload/{blog}",
    response_model=ImportPostsResponse,
    dependencies=[Depends(require_api_key)],
)
def upload_post_data(blog: str, file: UploadFile = File(...), repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return import_posts(repo, blog, file.file).to_dict()


@router.post(
    "/conversationDataUpload/{blog}",
    response_model=ImportConversationsResponse,
    dependencies=[Depends(require_api_key)],
)
def upload_conversation_data(blog: str, file: UploadFile = File(...), repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return import_conversations(repo, blog, file.file).to_dict()


@router.get("/stagedPostsDownload/{blog}", dependencies=[Depends(require_api_key)])
def download_staged_posts(blog: str, repo: Repo = Depends(get_repo)) -> Response:
    xml = staged_post_xml(repo, blog)
    return Response(
        content=xml.encode("utf-8"),
        media_type="application/xml",
        headers={"Content-Disposition": f'attachment; filename="{blog}-staged-posts.xml"'},
    )


def _media_dir(repo: Repo, blog: Optional[str]) -> Path:
    return media_dir_for_blog(repo, blog or metadata.default_blog_name(repo))


@router.get("/viewerMedia/{name}")
def viewer_media(
    name: str,
    blog: Optional[str] = Query(default=None, description="Defaults to the default blog"),
    repo: Repo = Depends(get_repo),
) -> FileResponse:
    return FileResponse(resolve_media_file(_media_dir(repo, blog), name))


@router.get("/viewerVideo/{name}")
def viewer_video(
    name: str,
    blog: Optional[str] = Query(default=None, description="Defaults to the default blog"),
    repo: Repo = Depends(get_repo),
) -> FileResponse:
    path = resolve_media_file(_media_dir(repo, blog), name)
    return FileResponse(path, media_type="video/mp4" if path.suffix.lower() == ".mp4" else None)
