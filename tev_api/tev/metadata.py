from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from tev.db.repo import Repo
from tev.errors import (
    InvalidMetadataError,
    NoMetadataFoundError,
    ResourceNotFoundError,
    UnableToDeleteMetadataError,
)

log = logging.getLogger(__name__)

POST_TYPES = ["answer", "link", "photo", "regular", "video"]

FILTER_READ = "Filter Read Posts"
FILTER_UNREAD = "Filter Unread Posts"
FILTER_NONE = "Do not Filter"
FILTER_TYPES = [FILTER_READ, FILTER_UNREAD, FILTER_NONE]

SORT_COLUMNS = ["ID", "Type", "State", "Slug", "Hashtags", "Date", "Is Favourite", "Is Read"]
SORT_ORDERS = ["Ascending", "Descending"]

FAV_FILTER_FAVS = "Show Favourites"
FAV_FILTER_NON_FAVS = "Show Non Favourites"
FAV_FILTER_ALL = "Show Everything"
FAV_FILTERS = [FAV_FILTER_FAVS, FAV_FILTER_NON_FAVS, FAV_FILTER_ALL]

# -1 means "all"
PAGE_LENGTHS = [10, 25, 50, 100, -1]

CONVERSATION_DISPLAY_STYLES = ["cards", "table"]
CONVERSATION_SORT_COLUMNS = ["participantName", "numMessages"]

# jQuery UI themes understood by the front end
THEMES = [
    "base",
    "black-tie",
    "blitzer",
    "cupertino",
    "dark-hive",
    "dot-luv",
    "eggplant",
    "excite-bike",
    "flick",
    "hot-sneaks",
    "humanity",
    "le-frog",
    "mint-choc",
    "overcast",
    "pepper-grinder",
    "redmond",
    "smoothness",
    "south-street",
    "start",
    "sunny",
    "swanky-purse",
    "trontastic",
    "ui-darkness",
    "ui-lightness",
    "vader",
]
DEFAULT_THEME = "base"


def is_valid_type(type_name: Optional[str]) -> bool:
    return type_name in POST_TYPES


def new_default_metadata(blog: Optional[str] = None) -> Dict[str, Any]:
    return {
        "id": None,
        "blog": blog,
        "base_media_path": None,
        "sort_order": "Descending",
        "sort_column": "ID",
        "filter": FILTER_NONE,
        "fav_filter": FAV_FILTER_ALL,
        "page_length": 10,
        "show_reading_pane": False,
        "overwrite_post_data": False,
        "overwrite_convo_data": False,
        "main_tumblr_user": None,
        "main_tumblr_user_avatar_url": None,
        "conversation_display_style": CONVERSATION_DISPLAY_STYLES[0],
        "conversation_sort_column": CONVERSATION_SORT_COLUMNS[0],
        "conversation_sort_order": "Ascending",
        "theme": DEFAULT_THEME,
        "is_default": False,
        "show_hashtags_for_all_blogs": True,
        "export_images_file_path": None,
    }


def static_list_data() -> Dict[str, List[Any]]:
    return {
        "filter_types": list(FILTER_TYPES),
        "sort_columns": list(SORT_COLUMNS),
        "sort_orders": list(SORT_ORDERS),
        "fav_filters": list(FAV_FILTERS),
        "page_lengths": list(PAGE_LENGTHS),
        "conversation_styles": list(CONVERSATION_DISPLAY_STYLES),
        "conversation_sort_columns": list(CONVERSATION_SORT_COLUMNS),
        "themes": list(THEMES),
    }


def _normalize(md: Dict[str, Any]) -> Dict[str, Any]:
    if md.get("theme") not in THEMES:
        md["theme"] = DEFAULT_THEME
    return md


def all_metadata(repo: Repo) -> List[Dict[str, Any]]:
    """Every blog's metadata; an unsaved default record when there is none."""
    rows = repo.list_metadata()
    if not rows:
        return [new_default_metadata()]
    return [_normalize(r) for r in rows]


def metadata_by_id(repo: Repo, metadata_id: int) -> Optional[Dict[str, Any]]:
    md = repo.get_metadata(metadata_id)
    return _normalize(md) if md else None


def get_metadata_or_404(repo: Repo, metadata_id: int) -> Dict[str, Any]:
    md = metadata_by_id(repo, metadata_id)
    if md is None:
        raise ResourceNotFoundError("Metadata", "id", metadata_id)
    return md


def mark_as_default(repo: Repo, metadata_id: int) -> Dict[str, Any]:
    get_metadata_or_404(repo, metadata_id)
    with repo.conn():
        repo.set_default_metadata(metadata_id)
    return get_metadata_or_404(repo, metadata_id)


def default_metadata(repo: Repo) -> Optional[Dict[str, Any]]:
    md = repo.get_default_metadata()
    return _normalize(md) if md else None


def default_blog_name(repo: Repo) -> str:
    md = repo.get_default_metadata()
    if md is None:
        raise NoMetadataFoundError()
    return md["blog"]


def metadata_for_blog(repo: Repo, blog: str) -> Optional[Dict[str, Any]]:
    md = repo.get_metadata_by_blog(blog)
    return _normalize(md) if md else None


def metadata_for_blog_or_default(repo: Repo, blog: str) -> Dict[str, Any]:
    """Existing metadata for the blog, else a new persisted default record.

    The first blog ever registered becomes the default blog.
    """
    md = metadata_for_blog(repo, blog)
    if md is not None:
        return md

    md = new_default_metadata(blog)
    with repo.conn():
        md["is_default"] = repo.count_metadata() == 0
        md["id"] = repo.insert_metadata(md)
    log.info("Created metadata for blog=%s (default=%s)", blog, md["is_default"])
    return md


def update_metadata(repo: Repo, metadata_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
    current = get_metadata_or_404(repo, metadata_id)
    theme = data.get("theme", current["theme"])
    if theme not in THEMES:
        raise InvalidMetadataError(f"Invalid theme '{theme}'")

    merged = dict(current)
    # the blog name keys every post / conversation; it is not editable
    merged.update({k: v for k, v in data.items() if k not in ("id", "blog")})
    merged["theme"] = theme
    if current.get("is_default"):
        # the default blog only changes through mark_as_default
        merged["is_default"] = True
    with repo.conn():
        repo.update_metadata(metadata_id, merged)
        if merged.get("is_default") and not current.get("is_default"):
            repo.set_default_metadata(metadata_id)
    return get_metadata_or_404(repo, metadata_id)


def delete_metadata(repo: Repo, metadata_id: int) -> None:
    """Delete a blog: its metadata and every post / hashtag / conversation of it."""
    md = get_metadata_or_404(repo, metadata_id)
    if repo.count_metadata() < 2:
        raise UnableToDeleteMetadataError()

    with repo.conn():
        repo.delete_blog_data(md["blog"])
        repo.delete_metadata(metadata_id)
        if repo.get_default_metadata() is None:
            remaining = repo.list_metadata()
            repo.set_default_metadata(remaining[0]["id"])
    log.info("Deleted blog=%s (metadata id=%s)", md["blog"], metadata_id)
