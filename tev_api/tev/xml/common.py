from __future__ import annotations

import io
from pathlib import Path
from typing import IO, Optional, Union
from xml.etree import ElementTree as ET

XmlSource = Union[bytes, bytearray, str, Path, IO[bytes]]

# photo-url max-width -> photo column
PHOTO_SIZES = {
    "1280": "url1280",
    "500": "url500",
    "400": "url400",
    "250": "url250",
    "100": "url100",
    "75": "url75",
}


def open_source(source: XmlSource) -> Union[str, IO[bytes]]:
    """bytes -> in-memory stream; paths and binary streams pass through."""
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(bytes(source))
    if isinstance(source, Path):
        return str(source)
    return source


def text_of(elem: ET.Element, path: str) -> Optional[str]:
    """Text of the first element matching path, '' for empty elements, None when absent."""
    child = elem.find(path)
    if child is None:
        return None
    return "".join(child.itertext())


def to_int(raw: Optional[str]) -> Optional[int]:
    if raw is None or str(raw).strip() == "":
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        try:
            return int(float(raw))
        except ValueError:
            return None


def to_bool(raw: Optional[str]) -> bool:
    return (raw or "").strip().lower() in {"true", "1", "yes"}
