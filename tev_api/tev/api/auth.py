from __future__ import annotations

import hmac
import os
from typing import Iterator, Optional

from fastapi import Header, HTTPException, status


def _presented_keys(authorization: Optional[str], x_api_key: Optional[str]) -> Iterator[str]:
    if x_api_key:
        yield x_api_key.strip()
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            yield token.strip()


def require_api_key(
    authorization: Optional[str] = Header(default=None),
    x_api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
) -> None:
    """Guard for the JSON and upload routes.

    Only active when API_KEY is set. The front end sends the key as
    ``X-API-Key``; scripts may use ``Authorization: Bearer <key>``.
    Viewer media routes stay open because ``<img>`` tags cannot send headers.
    """
    expected = (os.getenv("API_KEY") or "").strip()
    if not expected:
        return

    for key in _presented_keys(authorization, x_api_key):
        if hmac.compare_digest(key.encode(), expected.encode()):
            return

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized (missing/invalid API key)",
    )
