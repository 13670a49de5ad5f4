import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

# third-party loggers that drown out import and fetch progress below WARNING
_NOISY = ("aiohttp.access", "multipart", "python_multipart")


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for the CLI and the API.

    ``level`` wins over LOG_LEVEL. An unknown name falls back to INFO.
    """
    name = (level or os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    lvl = logging.getLevelName(name)
    if not isinstance(lvl, int):
        lvl = logging.INFO
    logging.basicConfig(level=lvl, format=LOG_FORMAT)
    for noisy in _NOISY:
        logging.getLogger(noisy).setLevel(max(lvl, logging.WARNING))
