"""Reader for the posts.xml file of a Tumblr blog export.

Each <post> element becomes a ``ParsedPost``: the post row, the row of its
type table (answer, link, regular, video) and its photos. Posts are streamed
with ``iterparse`` so large exports never sit in memory as one tree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional
from xml.etree import ElementTree as ET

from tev.errors import XmlParsingError
from tev.xml.common import PHOTO_SIZES, XmlSource, open_source, text_of, to_bool, to_int

log = logging.getLogger(__name__)


@dataclass
class ParsedPost:
    post: Dict[str, Any]
    type_row: Optional[Dict[str, Any]] = None
    photos: List[Dict[str, Any]] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)

    @property
    def id(self) -> int:
        return int(self.post["id"])

    @property
    def type(self) -> str:
        return self.post.get("type") or ""


def _photo_urls(elem: ET.Element) -> Dict[str, Optional[str]]:
    urls: Dict[str, Optional[str]] = {col: None for col in PHOTO_SIZES.values()}
    for u in elem.findall("photo-url"):
        col = PHOTO_SIZES.get((u.get("max-width") or "").strip())
        if col:
            urls[col] = (u.text or "").strip()
    return urls


def _parse_photos(elem: ET.Element, post: Dict[str, Any]) -> List[Dict[str, Any]]:
    caption = text_of(elem, "photo-caption")
    link_url = text_of(elem, "photo-link-url")

    photoset = elem.find("photoset")
    if photoset is not None and photoset.findall("photo"):
        photos = []
        for ph in photoset.findall("photo"):
            row = {
                "post_id": post["id"],
                "caption": caption,
                "photo_link_url": link_url,
                "offset": ph.get("offset"),
                "width": to_int(ph.get("width")),
                "height": to_int(ph.get("height")),
            }
            row.update(_photo_urls(ph))
            photos.append(row)
        return photos

    row = {
        "post_id": post["id"],
        "caption": caption,
        "photo_link_url": link_url,
        "offset": None,
        "width": post.get("width"),
        "height": post.get("height"),
    }
    row.update(_photo_urls(elem))
    return [row]


def _parse_type_row(elem: ET.Element, post: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    post_type = post.get("type")
    if post_type == "regular":
        return {
            "post_id": post["id"],
            "title": text_of(elem, "regular-title"),
            "body": text_of(elem, "regular-body"),
        }
    if post_type == "answer":
        return {
            "post_id": post["id"],
            "question": text_of(elem, "question"),
            "answer": text_of(elem, "answer"),
        }
    if post_type == "link":
        return {
            "post_id": post["id"],
            "text": text_of(elem, "link-text"),
            "url": text_of(elem, "link-url"),
            "description": text_of(elem, "link-description"),
        }
    if post_type == "video":
        # details may sit directly under <post> or inside <video-source>
        return {
            "post_id": post["id"],
            "content_type": text_of(elem, ".//content-type"),
            "extension": text_of(elem, ".//extension"),
            "width": to_int(text_of(elem, ".//width")),
            "height": to_int(text_of(elem, ".//height")),
            "duration": to_int(text_of(elem, ".//duration")),
            "revision": text_of(elem, ".//revision"),
            "video_caption": text_of(elem, "video-caption"),
        }
    return None


def parse_post_element(elem: ET.Element) -> ParsedPost:
    a = elem.attrib
    post_id = to_int(a.get("id"))
    if post_id is None:
        raise XmlParsingError("Post element without a numeric id attribute")

    tags = [(t.text or "").strip().lower() for t in elem.findall("tag")]
    tags = [t for t in tags if t]

    post: Dict[str, Any] = {
        "id": post_id,
        "url": a.get("url"),
        "url_with_slug": a.get("url-with-slug"),
        "type": a.get("type"),
        "date_gmt": a.get("date-gmt"),
        "date": a.get("date"),
        "unix_timestamp": to_int(a.get("unix-timestamp")),
        "reblog_key": a.get("reblog-key"),
        "slug": a.get("slug"),
        "state": a.get("state"),
        "is_reblog": to_bool(a.get("is_reblog")),
        "tumblelog": a.get("tumblelog"),
        "width": to_int(a.get("width")),
        "height": to_int(a.get("height")),
        "is_read": False,
        "is_favourite": False,
        "tags": ", ".join(tags),
    }

    parsed = ParsedPost(post=post, tags=tags)
    if post["type"] == "photo":
        parsed.photos = _parse_photos(elem, post)
    else:
        parsed.type_row = _parse_type_row(elem, post)
    return parsed


def read_posts(source: XmlSource) -> Iterator[ParsedPost]:
    """Yield every <post> of a Tumblr posts export.

    Raises XmlParsingError for malformed documents (possibly after some posts
    were already yielded).
    """
    try:
        for _event, elem in ET.iterparse(open_source(source), events=("end",)):
            if elem.tag != "post":
                continue
            yield parse_post_element(elem)
            elem.clear()
    except ET.ParseError as e:
        raise XmlParsingError(f"Malformed posts XML: {e}") from e
