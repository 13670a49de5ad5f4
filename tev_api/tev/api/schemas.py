from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class JobResponse(BaseModel):
    job_id: str
    job_type: str
    status: str
    created_at: float
    blog: Optional[str] = None
    started_at: Optional[float] = None
    finished_at: Optional[float] = None
    error: Optional[str] = None
    result: Optional[Any] = None


class MessageResponse(BaseModel):
    message: str


class PathRequest(BaseModel):
    path: str = Field(..., description="Directory on the server's filesystem")


# ---- posts ----

class Post(BaseModel):
    id: int
    url: Optional[str] = None
    url_with_slug: Optional[str] = None
    type: str
    date_gmt: Optional[str] = None
    date: Optional[str] = None
    unix_timestamp: Optional[int] = None
    reblog_key: Optional[str] = None
    slug: Optional[str] = None
    state: Optional[str] = "published"
    is_reblog: bool = False
    tumblelog: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    is_read: bool = False
    is_favourite: bool = False
    tags: str = ""


class PostUpdate(BaseModel):
    url: Optional[str] = None
    url_with_slug: Optional[str] = None
    type: Optional[str] = None
    date_gmt: Optional[str] = None
    date: Optional[str] = None
    unix_timestamp: Optional[int] = None
    reblog_key: Optional[str] = None
    slug: Optional[str] = None
    state: Optional[str] = None
    is_reblog: Optional[bool] = None
    width: Optional[int] = None
    height: Optional[int] = None
    is_read: Optional[bool] = None
    is_favourite: Optional[bool] = None
    tags: Optional[str] = None


class Answer(BaseModel):
    post_id: Optional[int] = None
    question: Optional[str] = None
    answer: Optional[str] = None


class Link(BaseModel):
    post_id: Optional[int] = None
    text: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None


class Regular(BaseModel):
    post_id: Optional[int] = None
    title: Optional[str] = None
    body: Optional[str] = None


class Video(BaseModel):
    post_id: Optional[int] = None
    content_type: Optional[str] = None
    extension: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[int] = None
    revision: Optional[str] = None
    video_caption: Optional[str] = None


class Photo(BaseModel):
    id: Optional[int] = None
    post_id: int
    caption: Optional[str] = None
    photo_link_url: Optional[str] = None
    offset: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    url1280: Optional[str] = None
    url500: Optional[str] = None
    url400: Optional[str] = None
    url250: Optional[str] = None
    url100: Optional[str] = None
    url75: Optional[str] = None


class ExportBundle(BaseModel):
    """All posts of a blog plus their type rows, for bulk transfer."""

    posts: List[Post] = Field(default_factory=list)
    answers: List[Answer] = Field(default_factory=list)
    links: List[Link] = Field(default_factory=list)
    photos: List[Photo] = Field(default_factory=list)
    regulars: List[Regular] = Field(default_factory=list)
    videos: List[Video] = Field(default_factory=list)


# ---- hashtags ----

class Hashtag(BaseModel):
    id: Optional[int] = None
    tag: str
    blog: Optional[str] = None
    count: int = 1


class HashtagCreate(BaseModel):
    tag: str


# ---- conversations ----

class Conversation(BaseModel):
    id: Optional[int] = None
    blog: Optional[str] = None
    participant: Optional[str] = None
    participant_avatar_url: Optional[str] = None
    participant_id: Optional[str] = None
    num_messages: int = 0
    hide_conversation: bool = False


class ConversationMessage(BaseModel):
    id: Optional[int] = None
    conversation_id: int
    timestamp: Optional[int] = None
    received: bool = False
    type: str = Field("TEXT", description="TEXT | IMAGE | POSTREF")
    message: Optional[str] = None


# ---- metadata ----

class Metadata(BaseModel):
    id: Optional[int] = None
    blog: Optional[str] = None
    base_media_path: Optional[str] = None
    sort_order: str = "Descending"
    sort_column: str = "ID"
    filter: str = "Do not Filter"
    fav_filter: str = "Show Everything"
    page_length: int = 10
    show_reading_pane: bool = False
    overwrite_post_data: bool = False
    overwrite_convo_data: bool = False
    main_tumblr_user: Optional[str] = None
    main_tumblr_user_avatar_url: Optional[str] = None
    conversation_display_style: str = "cards"
    conversation_sort_column: str = "participantName"
    conversation_sort_order: str = "Ascending"
    theme: str = "base"
    is_default: bool = False
    show_hashtags_for_all_blogs: bool = True
    export_images_file_path: Optional[str] = None


class StaticListData(BaseModel):
    """Values for the drop-downs of the metadata page."""

    filter_types: List[str]
    sort_columns: List[str]
    sort_orders: List[str]
    fav_filters: List[str]
    page_lengths: List[int]
    conversation_styles: List[str]
    conversation_sort_columns: List[str]
    themes: List[str]


# ---- imports ----

class ImportPostsResponse(BaseModel):
    blog: str
    total: int
    written: int
    unchanged: int
    not_published: int
    unsupported_type: int
    overwritten: bool


class ImportConversationsResponse(BaseModel):
    blog: str
    main_participant: Optional[str] = None
    conversations: int
    created: int
    merged: int
    messages_added: int
    overwritten: bool
