# region Docstring
"""
clipstore.commands
Command layer used by the UI / CLI to read and manage clipboard history.
Overview:
- Thin operations over the shared RecordStore, addressed by numeric id.
- delete_record removes the row first, then an image's blob, under the store lock
    so an ingestion of the same image cannot interleave. If the process dies in
    between, the orphan blob is removed by the next garbage collection pass.
- copy_record resolves what an OS automation collaborator should write back to
    the clipboard: the text itself, or the absolute path of the image blob.
- update_max_records validates, applies and persists the retention bound.
Contents:
- CopyPayload: What to paste for a record.
- RecordCommands: filter_records, get_record, pin_record, unpin_record,
    delete_record, copy_record, get_config, update_max_records.
"""
# endregion
# region Imports
import logging
from logging import Logger
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from clipstore.errors import StorageFailure
from clipstore.models.record import Record, RecordKind
from clipstore.preferences import Preferences, dump_preferences
from clipstore.store import RecordStore

# endregion
# region Result Models


class CopyPayload(BaseModel):
    record_id: int = Field(..., description="The record being copied")
    kind: RecordKind = Field(..., description="Kind of the record")
    text: Optional[str] = Field(None, description="Text to write to the clipboard")
    image_path: Optional[Path] = Field(
        None, description="Absolute path of the image blob to write to the clipboard"
    )


# endregion
# region Commands


class RecordCommands:
    """
    Operations exposed to the command/UI layer.
    """

    def __init__(
        self,
        store: RecordStore,
        preferences: Preferences,
        preferences_path: Path,
        logger: Optional[Logger] = None,
    ):
        self.store = store
        self.preferences = preferences
        self.preferences_path = Path(preferences_path)
        self.logger = (logger or logging.getLogger("clipstore")).getChild(
            "RecordCommands"
        )

    def filter_records(self, keyword: str = "") -> List[Record]:
        return self.store.query(keyword)

    def get_record(self, record_id: int) -> Record:
        return self.store.get(record_id)

    def pin_record(self, record_id: int) -> Record:
        return self.store.pin(record_id)

    def unpin_record(self, record_id: int) -> Record:
        return self.store.unpin(record_id)

    def delete_record(self, record_id: int) -> Record:
        """
        Delete a record and, for images, its blob.

        Raises:
            NotFoundError: If no record has this id.
            StorageFailure: If the row delete fails. A failed blob delete is
                logged and left to the garbage collector.
        """
        with self.store.lock:
            record = self.store.delete(record_id)
            if record.is_image:
                try:
                    if not self.store.blobs.remove(record.value):
                        self.logger.warning(
                            f"Blob {record.value} of record {record_id} was already gone"
                        )
                except StorageFailure as e:
                    self.logger.error(
                        f"Blob {record.value} of deleted record {record_id} kept: {e}"
                    )
        return record

    def copy_record(self, record_id: int) -> CopyPayload:
        """
        Resolve the value to write back to the OS clipboard.

        Raises:
            NotFoundError: If no record has this id.
            FileNotFoundError: If an image record's blob is missing on disk.
        """
        record = self.store.get(record_id)
        if record.kind is RecordKind.TEXT:
            return CopyPayload(record_id=record.id, kind=record.kind, text=record.value)
        path = self.store.blob_path(record)
        if not path.is_file():
            raise FileNotFoundError(f"Blob for record {record_id} missing: {path}")
        return CopyPayload(
            record_id=record.id, kind=record.kind, image_path=path.resolve()
        )

    def get_config(self) -> Preferences:
        return self.preferences.model_copy()

    def update_max_records(self, max_records: int) -> Preferences:
        """
        Change the retention bound. Takes effect on the next insertion.

        Raises:
            ValueError: If max_records is not a positive integer.
            StorageFailure: If the preferences file cannot be written.
        """
        if isinstance(max_records, bool) or not isinstance(max_records, int):
            raise ValueError(f"max_records must be an integer, got {max_records!r}")
        if max_records <= 0:
            raise ValueError(f"max_records must be positive, got {max_records}")
        updated = self.preferences.model_copy(update={"max_records": max_records})
        dump_preferences(self.preferences_path, updated)
        self.store.max_records = max_records
        self.preferences = updated
        self.logger.info(f"max_records set to {max_records}")
        return updated.model_copy()


# endregion

__all__ = ["CopyPayload", "RecordCommands"]
