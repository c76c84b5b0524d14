import logging
import os
from datetime import datetime, timedelta, timezone
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from clipstore.blob_gc import BlobGarbageCollector
from clipstore.blobs import BlobDirectory
from clipstore.commands import RecordCommands
from clipstore.config import DatabaseSettings, StoreSettings, get_settings
from clipstore.database import DatabaseSessionGenerator
from clipstore.ingest import IngestionService
from clipstore.logger import LOGGER_NAME
from clipstore.preferences import Preferences
from clipstore.store import RecordStore

ENV_PREFIXES = ("CLIPSTORE_", "CLIPBOARD_WATCHER_")


class FakeClock:
    """Monotonic UTC clock advancing one second per call."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.now = start
        self.step = timedelta(seconds=1)

    def __call__(self) -> datetime:
        self.now = self.now + self.step
        return self.now


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Environment variables outrank init kwargs, so clear ours for every test."""
    for key in list(os.environ):
        if key.startswith(ENV_PREFIXES) or key in ("ENVIRONMENT", "APP_ROOT"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_clipstore_logger():
    """Undo configure_logging so handlers never outlive the test that installed them."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def db_settings(tmp_path: Path) -> DatabaseSettings:
    return DatabaseSettings(db_path=tmp_path / "clipstore.db", busy_timeout=10.0)


@pytest.fixture
def db(db_settings: DatabaseSettings):
    """Session generator on a fresh SQLite file."""
    generator = DatabaseSessionGenerator(db_settings)
    generator.init_db()
    yield generator
    generator.dispose()


@pytest.fixture
def store_settings(tmp_path: Path) -> StoreSettings:
    return StoreSettings(data_dir=tmp_path)


@pytest.fixture
def blobs(store_settings: StoreSettings) -> BlobDirectory:
    return BlobDirectory(store_settings.image_dir)


@pytest.fixture
def store(db, blobs, clock) -> RecordStore:
    return RecordStore(db, blobs, max_records=200, clock=clock)


@pytest.fixture
def collector(store) -> BlobGarbageCollector:
    return BlobGarbageCollector(store)


@pytest.fixture
def ingestion(store, collector, store_settings) -> IngestionService:
    return IngestionService(store, collector, store_settings)


@pytest.fixture
def commands(store, store_settings) -> RecordCommands:
    return RecordCommands(store, Preferences(), store_settings.preferences_path)


def encode_image(
    color=(255, 0, 0), size=(4, 4), fmt: str = "PNG", mode: str = "RGB"
) -> bytes:
    buffered = BytesIO()
    Image.new(mode, size, color).save(buffered, format=fmt)
    return buffered.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return encode_image()


@pytest.fixture
def make_image():
    """Factory producing encoded images of a given color / size / format."""
    return encode_image


def set_kind(db: DatabaseSessionGenerator, record_id: int, tag: str) -> None:
    """Overwrite a row's kind tag behind the store's back."""
    from sqlalchemy import text

    with db.write_session() as session:
        session.execute(
            text("UPDATE clipboard_record SET kind = :tag WHERE id = :id"),
            {"tag": tag, "id": record_id},
        )


@pytest.fixture
def corrupt_kind(db):
    def _corrupt(record_id: int, tag: str = "video") -> None:
        set_kind(db, record_id, tag)

    return _corrupt
