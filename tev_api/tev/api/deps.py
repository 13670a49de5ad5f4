from __future__ import annotations

from typing import Iterator

from fastapi import Request

from tev.db.repo import Repo
from tev.i18n import DEFAULT_LOCALE
from tev.settings import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repo(request: Request) -> Iterator[Repo]:
    """One connection per request, closed when the response is done."""
    repo = Repo(settings=request.app.state.settings)
    try:
        yield repo
    finally:
        repo.close()


def get_locale(request: Request) -> str:
    return getattr(request.state, "locale", DEFAULT_LOCALE)
