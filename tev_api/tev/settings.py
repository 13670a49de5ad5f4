from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

def _env_int(key: str, default: int) -> int:
    v = os.getenv(key)
    if v is None or v == "":
        return default
    try:
        return int(v)
    except ValueError:
        return default

@dataclass(frozen=True)
class Settings:
    # storage / db
    db_url: str
    data_dir: Path

    # locale used when the request carries no lang parameter / cookie
    default_locale: str

    # photo fetcher
    photo_fetch_attempts: int
    photo_fetch_timeout: int
    photo_fetch_concurrency: int

    # server
    cors_origins: str

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            db_url=os.getenv("DB_URL", "sqlite:///data/tev.db"),
            data_dir=Path(os.getenv("DATA_DIR", "data")),
            default_locale=(os.getenv("DEFAULT_LOCALE", "en") or "en").strip().lower(),
            photo_fetch_attempts=_env_int("PHOTO_FETCH_ATTEMPTS", 3),
            photo_fetch_timeout=_env_int("PHOTO_FETCH_TIMEOUT", 45),
            photo_fetch_concurrency=_env_int("PHOTO_FETCH_CONCURRENCY", 4),
            cors_origins=os.getenv("CORS_ORIGINS", ""),
        )
