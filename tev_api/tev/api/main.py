from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.staticfiles import StaticFiles

from tev import __version__
from tev.api.job_manager import JobManager
from tev.api.routers import admin, conversations, hashtags, jobs, metadata, posts, staging, ui
from tev.db.repo import Repo
from tev.errors import MediaError, TevError
from tev.i18n import DEFAULT_LOCALE, LOCALE_COOKIE, message, normalize_locale
from tev.logging_conf import setup_logging
from tev.settings import Settings

log = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"
LOCALE_COOKIE_MAX_AGE = 365 * 24 * 3600


def _load_env() -> None:
    """Load .env for local development.

    Set ENV_FILE to override the default.
    """
    env_file = os.getenv("ENV_FILE", ".env")
    if env_file and Path(env_file).exists():
        load_dotenv(env_file)


def _parse_cors_origins(raw: str) -> List[str]:
    raw = (raw or "").strip()
    if not raw:
        return []

    # Accept JSON list first, fallback to comma-separated.
    try:
        v = json.loads(raw)
        if isinstance(v, list):
            return [str(x) for x in v if str(x).strip()]
    except json.JSONDecodeError:
        pass

    return [x.strip() for x in raw.split(",") if x.strip()]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    if settings is None:
        _load_env()
        setup_logging()
        settings = Settings.from_env()
    settings.data_dir.mkdir(parents=True, exist_ok=True)

    # Ensure schema on startup.
    repo = Repo(settings=settings)
    repo.ensure_schema()
    repo.close()

    app = FastAPI(title="Tumblr Export Viewer", version=__version__)

    # Store shared objects
    app.state.settings = settings
    app.state.jobs = JobManager()

    # CORS
    cors_origins = _parse_cors_origins(settings.cors_origins)
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    default_locale = normalize_locale(settings.default_locale) or DEFAULT_LOCALE

    @app.middleware("http")
    async def resolve_locale(request: Request, call_next):
        # ?lang=fr switches the locale and sticks through a cookie
        requested = normalize_locale(request.query_params.get("lang"))
        request.state.locale = requested or normalize_locale(request.cookies.get(LOCALE_COOKIE)) or default_locale
        response = await call_next(request)
        if requested:
            response.set_cookie(LOCALE_COOKIE, requested, max_age=LOCALE_COOKIE_MAX_AGE, samesite="lax")
        return response

    @app.exception_handler(TevError)
    async def tev_error_handler(request: Request, exc: TevError) -> JSONResponse:
        detail = exc.message
        if isinstance(exc, MediaError):
            detail = message(exc.key, getattr(request.state, "locale", default_locale))
        if exc.status_code >= 500:
            log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": detail})

    # --- basic ---
    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/locale")
    def current_locale(request: Request) -> Dict[str, str]:
        return {"locale": request.state.locale}

    for module in (metadata, posts, hashtags, conversations, jobs, staging, admin, ui):
        app.include_router(module.router)

    # mounted last so the API routes win over the static files
    if STATIC_DIR.is_dir():
        app.mount("/", StaticFiles(directory=str(STATIC_DIR), html=True), name="static")

    return app
