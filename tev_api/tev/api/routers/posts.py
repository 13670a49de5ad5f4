from typing import Any, Dict, List, Tuple, Type

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from tev import posts as post_service
from tev.api.auth import require_api_key
from tev.api.deps import get_repo, get_settings
from tev.api.schemas import Answer, ExportBundle, Link, Photo, Post, PostUpdate, Regular, Video
from tev.db.repo import Repo
from tev.jobs.fetch_photos import fix_photos
from tev.settings import Settings

router = APIRouter(prefix="/api", dependencies=[Depends(require_api_key)], tags=["posts"])

# type -> (plural used in list routes, body model)
SINGLE_ROW_TYPES: Dict[str, Tuple[str, Type[BaseModel]]] = {
    "answer": ("answers", Answer),
    "link": ("links", Link),
    "regular": ("regulars", Regular),
    "video": ("videos", Video),
}


# ---- routes without a post id come first so "answers" is never read as an id ----

@router.get("/posts/{blog}", response_model=List[Post])
def list_posts(blog: str, repo: Repo = Depends(get_repo)) -> List[Dict[str, Any]]:
    return post_service.list_posts(repo, blog)


@router.post("/posts/{blog}", response_model=Post)
def create_post(blog: str, payload: Post, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return post_service.create_post(repo, blog, payload.model_dump())


@router.delete("/posts/{blog}")
def delete_all_posts(blog: str, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return {"ok": True, "deleted": post_service.delete_all_posts(repo, blog)}


def _register_type_list_routes(post_type: str, plural: str, model: Type[BaseModel]) -> None:
    @router.get(f"/posts/{{blog}}/{plural}", response_model=List[model], name=f"list_{plural}")
    def list_rows(blog: str, repo: Repo = Depends(get_repo)) -> List[Dict[str, Any]]:
        return post_service.list_type_rows(repo, blog, post_type)

    @router.delete(f"/posts/{{blog}}/{plural}", name=f"delete_all_{plural}")
    def delete_rows(blog: str, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
        return {"ok": True, "deleted": post_service.delete_type_rows_for_blog(repo, blog, post_type)}


for _type, (_plural, _model) in SINGLE_ROW_TYPES.items():
    _register_type_list_routes(_type, _plural, _model)
_register_type_list_routes("photo", "photos", Photo)


@router.post("/posts/{blog}/photo", response_model=Photo)
def create_photo(blog: str, payload: Photo, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return post_service.create_photo(repo, blog, payload.model_dump(exclude={"id"}))


@router.put("/posts/{blog}/photo/{photo_id}", response_model=Photo)
def update_photo(blog: str, photo_id: int, payload: Photo, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return post_service.update_photo(repo, blog, photo_id, payload.model_dump(exclude_unset=True))


@router.delete("/posts/{blog}/photo/{photo_id}")
def delete_photo(blog: str, photo_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    post_service.delete_photo(repo, blog, photo_id)
    return {"ok": True, "id": photo_id}


# ---- single post ----

@router.get("/posts/{blog}/{post_id}", response_model=Post)
def get_post(blog: str, post_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return post_service.get_blog_post(repo, blog, post_id)


@router.put("/posts/{blog}/{post_id}", response_model=Post)
def update_post(blog: str, post_id: int, payload: PostUpdate, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return post_service.update_post(repo, blog, post_id, payload.model_dump(exclude_unset=True))


@router.delete("/posts/{blog}/{post_id}")
def delete_post(blog: str, post_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    post_service.delete_post(repo, blog, post_id)
    return {"ok": True, "id": post_id}


@router.put("/posts/{blog}/{post_id}/markRead", response_model=Post)
def mark_read(blog: str, post_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return post_service.set_flag(repo, blog, post_id, "read")


@router.put("/posts/{blog}/{post_id}/markUnread", response_model=Post)
def mark_unread(blog: str, post_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return post_service.set_flag(repo, blog, post_id, "unread")


@router.put("/posts/{blog}/{post_id}/markFavourite", response_model=Post)
def mark_favourite(blog: str, post_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return post_service.set_flag(repo, blog, post_id, "favourite")


@router.put("/posts/{blog}/{post_id}/markNonFavourite", response_model=Post)
def mark_non_favourite(blog: str, post_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return post_service.set_flag(repo, blog, post_id, "nonfavourite")


@router.get("/posts/{blog}/{post_id}/fixPhotos", response_model=bool)
async def fix_post_photos(
    blog: str,
    post_id: int,
    repo: Repo = Depends(get_repo),
    s: Settings = Depends(get_settings),
) -> bool:
    post_service.get_blog_post(repo, blog, post_id)
    return await fix_photos(settings=s, blog=blog, post_id=post_id)


# ---- type rows of a post ----

@router.get("/posts/{blog}/{post_id}/photo", response_model=List[Photo])
def list_post_photos(blog: str, post_id: int, repo: Repo = Depends(get_repo)) -> List[Dict[str, Any]]:
    return post_service.list_photos(repo, blog, post_id)


@router.delete("/posts/{blog}/{post_id}/photo")
def delete_post_photos(blog: str, post_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return {"ok": True, "deleted": post_service.delete_photos_for_post(repo, blog, post_id)}


def _register_type_row_routes(post_type: str, model: Type[BaseModel]) -> None:
    path = f"/posts/{{blog}}/{{post_id}}/{post_type}"

    @router.get(path, response_model=model, name=f"get_{post_type}")
    def get_row(blog: str, post_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
        return post_service.get_type_row(repo, blog, post_type, post_id)

    @router.post(path, response_model=model, name=f"create_{post_type}")
    def create_row(blog: str, post_id: int, payload: model, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
        return post_service.create_type_row(repo, blog, post_type, post_id, payload.model_dump())

    @router.put(path, response_model=model, name=f"update_{post_type}")
    def update_row(blog: str, post_id: int, payload: model, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
        data = payload.model_dump(exclude_unset=True)
        return post_service.update_type_row(repo, blog, post_type, post_id, data)

    @router.delete(path, name=f"delete_{post_type}")
    def delete_row(blog: str, post_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
        post_service.delete_type_row(repo, blog, post_type, post_id)
        return {"ok": True, "post_id": post_id}


for _type, (_plural, _model) in SINGLE_ROW_TYPES.items():
    _register_type_row_routes(_type, _model)


# ---- bundle ----

@router.get("/bundle/{blog}", response_model=ExportBundle)
def get_bundle(blog: str, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return post_service.export_bundle(repo, blog)


@router.post("/bundle/{blog}")
def load_bundle(blog: str, payload: ExportBundle, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    counts = post_service.import_bundle(repo, blog, payload.model_dump())
    return {"ok": True, **counts}
