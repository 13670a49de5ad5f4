from __future__ import annotations

import os

import uvicorn
from dotenv import load_dotenv


def main() -> None:
    # HOST / PORT may come from the same .env the app reads
    load_dotenv(os.getenv("ENV_FILE", ".env"))

    # Fetch-photos jobs live in the process that started them: keep one worker.
    workers = int(os.getenv("WORKERS", "1"))
    reload = os.getenv("RELOAD", "false").strip().lower() in {"1", "true", "yes", "y"}

    uvicorn.run(
        "tev.api.main:create_app",
        factory=True,
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8080")),
        reload=reload,
        workers=workers,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
