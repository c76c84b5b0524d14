# region Docstring
"""
clipstore.app
Wiring of the shared store and its collaborators.
Overview:
- build_services creates one session generator, one RecordStore and the
    collaborators that share it, loads the persisted retention bound, creates
    the tables and runs a garbage collection pass to repair anything an earlier
    crash left behind.
- The returned ClipStoreServices is handed to the watcher, the command layer
    and the CLI; none of them opens its own database connection.
"""
# endregion
# region Imports
import logging
from dataclasses import dataclass
from logging import Logger
from typing import Optional

from clipstore.blob_gc import BlobGarbageCollector, GCReport
from clipstore.blobs import BlobDirectory
from clipstore.commands import RecordCommands
from clipstore.config import (
    ClipboardWatcherSettings,
    DatabaseSettings,
    StoreSettings,
    get_settings,
)
from clipstore.database import DatabaseSessionGenerator
from clipstore.ingest import IngestionService
from clipstore.preferences import load_preferences
from clipstore.store import RecordStore
from clipstore.watcher import ClipboardReader, ClipboardWatcher

# endregion


@dataclass
class ClipStoreServices:
    db: DatabaseSessionGenerator
    store: RecordStore
    collector: BlobGarbageCollector
    ingestion: IngestionService
    commands: RecordCommands
    settings: StoreSettings
    startup_report: GCReport
    logger: Logger

    def watcher(
        self,
        reader: ClipboardReader,
        settings: Optional[ClipboardWatcherSettings] = None,
    ) -> ClipboardWatcher:
        return ClipboardWatcher(
            reader,
            self.ingestion,
            settings or get_settings(ClipboardWatcherSettings),
            self.logger,
        )

    def close(self) -> None:
        self.db.dispose()


def build_services(
    store_settings: Optional[StoreSettings] = None,
    db_settings: Optional[DatabaseSettings] = None,
    logger: Optional[Logger] = None,
) -> ClipStoreServices:
    """
    Build the shared store and its collaborators.

    Args:
        store_settings (StoreSettings): Defaults to get_settings(StoreSettings).
        db_settings (DatabaseSettings): Defaults to get_settings(DatabaseSettings);
            a missing db_path resolves to <data_dir>/clipstore.db.
        logger (Logger): Parent logger. Defaults to the "clipstore" logger.

    Returns:
        ClipStoreServices: Ready to use, after the startup repair pass.
    """
    store_settings = store_settings or get_settings(StoreSettings)
    db_settings = db_settings or get_settings(DatabaseSettings)
    logger = logger or logging.getLogger("clipstore")

    if db_settings.db_path is None:
        db_settings = db_settings.model_copy(
            update={"db_path": store_settings.data_dir / "clipstore.db"}
        )
    store_settings.data_dir.mkdir(parents=True, exist_ok=True)

    db = DatabaseSessionGenerator(db_settings)
    db.init_db()

    preferences = load_preferences(
        store_settings.preferences_path, store_settings.max_records
    )
    blobs = BlobDirectory(store_settings.image_dir, logger)
    store = RecordStore(db, blobs, preferences.max_records, logger)
    collector = BlobGarbageCollector(store, logger)
    ingestion = IngestionService(store, collector, store_settings, logger)
    commands = RecordCommands(store, preferences, store_settings.preferences_path, logger)

    startup_report = collector.collect()
    logger.info(
        f"Record store ready: {store.count()} record(s), max_records={store.max_records}"
    )
    return ClipStoreServices(
        db=db,
        store=store,
        collector=collector,
        ingestion=ingestion,
        commands=commands,
        settings=store_settings,
        startup_report=startup_report,
        logger=logger,
    )


__all__ = ["ClipStoreServices", "build_services"]
