"""
Clipboard history record store.

This package persists observed clipboard values (text and images) in a
SQLite database, deduplicates them by content, bounds the history with a
pinned-aware retention policy and keeps a content-addressed directory of
image blobs consistent with the rows that reference them.

It leverages SQLAlchemy for persistence, Pydantic for models and settings,
and Pillow for image encoding.
"""

from . import constants  # noqa: F401
from .config import (  # noqa: F401
    AppSettings,
    ClipboardWatcherSettings,
    DatabaseSettings,
    StoreSettings,
    get_settings,
)

__version__ = "0.1.0"
