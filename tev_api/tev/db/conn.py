from __future__ import annotations

import sqlite3
from pathlib import Path

SQLITE_PREFIX = "sqlite:///"
MEMORY = ":memory:"

# foreign keys make photos, type rows and messages follow their parent row
_PRAGMAS = (
    "PRAGMA foreign_keys = ON;",
    "PRAGMA journal_mode = WAL;",
    "PRAGMA synchronous = NORMAL;",
    "PRAGMA busy_timeout = 5000;",
)


def sqlite_path_from_url(db_url: str) -> Path | str:
    """Turn ``sqlite:///rel.db``, ``sqlite:////abs.db`` or ``sqlite:///:memory:``
    into a path (or the in-memory marker)."""
    if not db_url.startswith(SQLITE_PREFIX):
        raise ValueError(f"DB_URL must be a sqlite URL, got: {db_url}")
    target = db_url[len(SQLITE_PREFIX):]
    if target == MEMORY:
        return MEMORY
    return Path(target).expanduser()


def connect_sqlite(db_url: str) -> sqlite3.Connection:
    target = sqlite_path_from_url(db_url)
    if isinstance(target, Path):
        target.parent.mkdir(parents=True, exist_ok=True)
        target = str(target)

    # the API hands one Repo per request to FastAPI's threadpool
    conn = sqlite3.connect(target, timeout=30, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    for pragma in _PRAGMAS:
        conn.execute(pragma)
    return conn
