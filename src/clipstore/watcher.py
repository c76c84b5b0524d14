# region Docstring
"""
clipstore.watcher
Background poll loop feeding the ingestion façade.
Overview:
- Reading the OS clipboard is platform glue and is injected as a `reader`
    callable returning a ClipboardPayload (or None when nothing usable is there).
- The loop runs in a daemon thread, sleeping `poll_interval` seconds between
    polls, and submits a value only when it differs from the last value that was
    submitted successfully.
- A failed submission is logged and retried on the next poll. Unexpected errors
    are logged with their traceback and the loop keeps polling.
"""
# endregion
# region Imports
import logging
import threading
from logging import Logger
from typing import Callable, Optional

from clipstore.config import ClipboardWatcherSettings
from clipstore.errors import ClipStoreError
from clipstore.ingest import ClipboardPayload, IngestionService
from clipstore.models.record import UpsertResult

# endregion

ClipboardReader = Callable[[], Optional[ClipboardPayload]]


class ClipboardWatcher:
    def __init__(
        self,
        reader: ClipboardReader,
        ingestion: IngestionService,
        settings: ClipboardWatcherSettings,
        logger: Optional[Logger] = None,
    ):
        self.reader = reader
        self.ingestion = ingestion
        self.settings = settings
        self.logger = (logger or logging.getLogger("clipstore")).getChild(
            "ClipboardWatcher"
        )
        self._last_fingerprint: Optional[str] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll_once(self) -> Optional[UpsertResult]:
        """
        Read the clipboard once and submit the value if it changed.

        Returns:
            Optional[UpsertResult]: The upsert result, or None when nothing was submitted.
        """
        try:
            payload = self.reader()
        except Exception as e:
            self.logger.warning(f"Clipboard read failed: {e}")
            return None
        if payload is None:
            return None
        fingerprint = payload.fingerprint
        if fingerprint == self._last_fingerprint:
            return None
        try:
            result = self.ingestion.ingest_payload(payload)
        except ClipStoreError as e:
            self.logger.error(f"Failed to store clipboard value: {e}")
            return None
        self._last_fingerprint = fingerprint
        return result

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="clipboard-watcher", daemon=True
        )
        self._thread.start()
        self.logger.info(
            f"Clipboard watcher started (poll interval {self.settings.poll_interval}s)"
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        self.logger.info("Clipboard watcher stopped")

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.poll_once()
            except Exception:
                self.logger.exception("Unexpected error while polling the clipboard")
            self._stop.wait(self.settings.poll_interval)


__all__ = ["ClipboardReader", "ClipboardWatcher"]
