"""
clipstore.config
Configuration and settings management for the clipboard history store.
Overview:
- Provides Pydantic-based settings classes for every component of the store.
- Each settings class inherits from FactoryBaseSettings and supports environment variable
    overrides via Field aliases.
Contents:
- AppSettings:
    Application root, environment, log level and the derived logs directory.
- DatabaseSettings:
    SQLite database file, connection pool size, lock wait timeout and SQL echo.
- StoreSettings:
    Data directory, image blob directory, preferences file, retention bound,
    text hashing threshold, image blob format and blob self-healing switch.
- ClipboardWatcherSettings:
    Poll interval of the clipboard watcher loop.
Design Notes:
- All fields use upper-case aliases so they can be set from the environment
    (e.g., CLIPSTORE_MAX_RECORDS, CLIPBOARD_WATCHER_POLL_INTERVAL).
- Defaults allow zero-configuration startup in development environments.
- max_records here is only the first-run default; the persisted preferences file
    takes over once it exists.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, model_validator

from clipstore.config.base import APP_ENV, APP_ROOT, DATA_DIR
from clipstore.config.factory import FactoryBaseSettings
from clipstore.config.factory import get_settings  # noqa: F401  This is used externally
from clipstore.constants import (
    DEFAULT_MAX_RECORDS,
    DEFAULT_TEXT_HASH_THRESHOLD,
    ImageFormats,
)


class AppSettings(FactoryBaseSettings):
    """Application configuration settings."""

    app_root: Path = Field(
        default=Path(APP_ROOT),
        description="Root directory for application files.",
    )
    environment: str = Field(
        default=APP_ENV,
        description="Current application environment (prod, docker, dev).",
        alias="ENVIRONMENT",
    )
    log_level: str = Field(
        default="info",
        description="Log level for the clipboard store.",
        alias="CLIPSTORE_LOG_LEVEL",
    )

    @property
    def logs_dir(self) -> Path:
        """Base directory for logs."""
        return self.app_root / "logs"


class DatabaseSettings(FactoryBaseSettings):
    """
    SQLite database configuration settings.
    """

    db_path: Optional[Path] = Field(
        default=None,
        alias="CLIPSTORE_DB_PATH",
        description="Path to the SQLite database file. DEFAULT: <data_dir>/clipstore.db",
    )
    pool_size: int = Field(
        default=5,
        gt=0,
        alias="CLIPSTORE_DB_POOL_SIZE",
        description="Number of pooled SQLite connections.",
    )
    busy_timeout: float = Field(
        default=5.0,
        gt=0,
        alias="CLIPSTORE_DB_BUSY_TIMEOUT",
        description="Seconds a connection waits for a write lock before failing.",
    )
    echo: bool = Field(
        default=False,
        alias="CLIPSTORE_DB_ECHO",
        description="Log every SQL statement.",
    )

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL of the SQLite database."""
        path = self.db_path or DATA_DIR / "clipstore.db"
        return f"sqlite:///{Path(path).as_posix()}"


class StoreSettings(FactoryBaseSettings):
    """
    Record store configuration settings.
    """

    data_dir: Path = Field(
        default=DATA_DIR,
        description="Directory holding the database, image blobs and preferences.",
        alias="CLIPSTORE_DATA_DIR",
    )
    image_dir: Optional[Path] = Field(
        default=None,
        description="Directory of content-addressed image blobs. DEFAULT: <data_dir>/images",
        alias="CLIPSTORE_IMAGE_DIR",
    )
    preferences_path: Optional[Path] = Field(
        default=None,
        description="JSON preferences file. DEFAULT: <data_dir>/preferences.json",
        alias="CLIPSTORE_PREFERENCES_PATH",
    )
    max_records: int = Field(
        default=DEFAULT_MAX_RECORDS,
        gt=0,
        description="Maximum number of unpinned records kept. [Default: 200]",
        alias="CLIPSTORE_MAX_RECORDS",
    )
    text_hash_threshold: int = Field(
        default=DEFAULT_TEXT_HASH_THRESHOLD,
        ge=0,
        description="Texts longer than this many UTF-8 bytes are deduplicated by hash.",
        alias="CLIPSTORE_TEXT_HASH_THRESHOLD",
    )
    image_format: ImageFormats = Field(
        default=ImageFormats.PNG,
        description="Encoding used for stored image blobs.",
        alias="CLIPSTORE_IMAGE_FORMAT",
    )
    heal_missing_blobs: bool = Field(
        default=True,
        description="Rewrite a missing blob when a duplicate image is observed.",
        alias="CLIPSTORE_HEAL_MISSING_BLOBS",
    )

    @model_validator(mode="after")
    def fill_data_paths(self) -> "StoreSettings":
        if self.image_dir is None:
            self.image_dir = self.data_dir / "images"
        if self.preferences_path is None:
            self.preferences_path = self.data_dir / "preferences.json"
        return self


class ClipboardWatcherSettings(FactoryBaseSettings):
    """
    Configuration for the Clipboard Watcher loop.
    """

    poll_interval: float = Field(
        default=1.0,
        gt=0,
        description="Interval for polling the clipboard. (Seconds) [Default: 1.0]",
        alias="CLIPBOARD_WATCHER_POLL_INTERVAL",
    )


__all__ = [
    "AppSettings",
    "ClipboardWatcherSettings",
    "DatabaseSettings",
    "StoreSettings",
    "get_settings",
]
