"""Tumblr Export Viewer.

This package contains:
- Readers for Tumblr post and message XML exports
- SQLite repository holding posts, conversations, hashtags and per-blog metadata
- Writer re-exporting staged posts as Tumblr XML
- Media tools (photo fetching, importing and cleaning media directories)
- FastAPI app + static front end to browse everything and mark posts as read
"""

__all__ = [
    "settings",
    "logging_conf",
    "errors",
]

__version__ = "0.3.0"
