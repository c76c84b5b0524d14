# region Docstring
"""
clipstore.store
The record store: the only component that reads or writes clipboard history rows.
Overview:
- upsert deduplicates by content: by content hash when one is supplied, otherwise
    by the literal value within the same kind. A match only refreshes updated_at; a new value is
    inserted unpinned and the retention policy runs in the same transaction.
- pin/unpin/delete/get address records by id and raise NotFoundError for unknown ids.
- query filters case-insensitively on value and orders pinned-first, then by recency.
Contents:
- RecordStore:
    Shared by every collaborator (watcher, command layer, garbage collector).
    Holds the session generator, the blob directory and the retention bound.
    Its `lock` serializes blob-touching sequences (ingest, delete, collect)
    within one process.
Design notes:
- Every write runs in a BEGIN IMMEDIATE transaction (see clipstore.database), so
    the match check, the insert and the eviction count are atomic against other
    writers. Reads use deferred transactions and do not block on writers.
- SQLAlchemy errors are wrapped in StorageFailure at this boundary and never
    retried here.
- delete removes the row only. Removing an image's blob is the caller's second
    step; a crash in between leaves an orphan for the garbage collector.
"""
# endregion
# region Imports
import logging
import threading
from datetime import datetime
from functools import wraps
from logging import Logger
from pathlib import Path
from typing import Callable, List, Optional, Set, TypeVar, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clipstore.blobs import BlobDirectory
from clipstore.constants import DEFAULT_MAX_RECORDS
from clipstore.database import DatabaseSessionGenerator
from clipstore.errors import InvalidKindError, NotFoundError, StorageFailure
from clipstore.models.record import (
    Applied,
    Record,
    RecordEntity,
    RecordKind,
    UpsertResult,
)
from clipstore.retention import apply_retention, count_records
from clipstore.utils import as_utc, get_time

# endregion
# region Helpers
T = TypeVar("T")


def _storage_operation(operation: str):
    """Decorator wrapping SQLAlchemy errors of a store method in StorageFailure."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(self: "RecordStore", *args, **kwargs) -> T:
            try:
                return func(self, *args, **kwargs)
            except SQLAlchemyError as e:
                self.logger.error(f"{operation} failed: {e}")
                raise StorageFailure(operation, str(e)) from e

        return wrapper

    return decorator


# endregion
# region RecordStore


class RecordStore:
    """
    Relational persistence for clipboard history records.

    Attributes:
        db (DatabaseSessionGenerator): Pooled session generator.
        blobs (BlobDirectory): Directory of image blobs referenced by image rows.
        max_records (int): Retention bound applied on the next insertion.
        lock (threading.RLock): Held while a blob and its row change together.
    """

    def __init__(
        self,
        db: DatabaseSessionGenerator,
        blobs: BlobDirectory,
        max_records: int = DEFAULT_MAX_RECORDS,
        logger: Optional[Logger] = None,
        clock: Callable[[], datetime] = get_time,
    ):
        self.db = db
        self.blobs = blobs
        self.logger = (logger or logging.getLogger("clipstore")).getChild("RecordStore")
        self._clock = clock
        self.lock = threading.RLock()
        self.max_records = max_records

    @property
    def max_records(self) -> int:
        return self._max_records

    @max_records.setter
    def max_records(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValueError(f"max_records must be a positive integer, got {value!r}")
        self._max_records = value

    # region Writes
    @_storage_operation("upsert")
    def upsert(
        self,
        kind: Union[RecordKind, str],
        value: str,
        content_hash: Optional[str] = None,
    ) -> UpsertResult:
        """
        Insert a value, or refresh the timestamp of its existing record.

        Args:
            kind (RecordKind | str): Kind of the value.
            value (str): Literal text, or the blob file name of an image.
            content_hash (Optional[str]): Fingerprint; required for images.

        Returns:
            UpsertResult: INSERTED with any evicted records, or UPDATED with
                discard=True telling the caller a freshly written blob is redundant.

        Raises:
            ValueError: If the kind is unknown or an image has no hash.
            StorageFailure: If the database operation fails.
        """
        kind = RecordKind(kind)
        if kind is RecordKind.IMAGE and not content_hash:
            raise ValueError("Image records require a content hash")
        now = as_utc(self._clock())

        with self.db.write_session() as session:
            existing = self._find_equivalent(session, kind, value, content_hash)
            if existing is not None:
                existing.updated_at = now
                session.flush()
                result = UpsertResult(applied=Applied.UPDATED, record=existing.model)
            else:
                entity = RecordEntity(
                    kind=kind.value,
                    value=value,
                    content_hash=content_hash,
                    updated_at=now,
                    pinned=False,
                )
                session.add(entity)
                session.flush()
                record = entity.model
                evicted = apply_retention(session, self._max_records)
                result = UpsertResult(
                    applied=Applied.INSERTED,
                    record=record,
                    evicted=self._evicted_models(evicted),
                )

        if result.inserted:
            self.logger.debug(
                f"Inserted {result.record.kind.value} record {result.record.id}"
            )
            for gone in result.evicted:
                self.logger.info(f"Evicted record {gone.id} ({gone.kind.value})")
        else:
            self.logger.debug(f"Refreshed record {result.record.id}")
        return result

    @_storage_operation("pin")
    def pin(self, record_id: int) -> Record:
        return self._set_pinned(record_id, True)

    @_storage_operation("unpin")
    def unpin(self, record_id: int) -> Record:
        return self._set_pinned(record_id, False)

    @_storage_operation("delete")
    def delete(self, record_id: int) -> Record:
        """
        Delete a record's row.

        Returns:
            Record: The deleted record, so the caller can remove an image blob.

        Raises:
            NotFoundError: If no record has this id.
            InvalidKindError: If the row's kind tag is corrupt; the row is kept.
        """
        with self.db.write_session() as session:
            entity = self._require(session, record_id)
            record = entity.model
            session.delete(entity)
        self.logger.info(f"Deleted record {record_id}")
        return record

    # endregion
    # region Reads
    @_storage_operation("get")
    def get(self, record_id: int) -> Record:
        with self.db.read_session() as session:
            return self._require(session, record_id).model

    @_storage_operation("query")
    def query(self, keyword: str = "") -> List[Record]:
        """
        List records whose value contains `keyword`, ignoring case.

        An empty keyword matches every record. Results are ordered pinned first,
        then most recently updated first.
        """
        stmt = select(RecordEntity).order_by(
            RecordEntity.pinned.desc(),
            RecordEntity.updated_at.desc(),
            RecordEntity.id.desc(),
        )
        if keyword:
            stmt = stmt.where(RecordEntity.value.icontains(keyword, autoescape=True))
        with self.db.read_session() as session:
            return [entity.model for entity in session.scalars(stmt)]

    @_storage_operation("count")
    def count(self) -> int:
        with self.db.read_session() as session:
            return count_records(session)

    @_storage_operation("referenced_hashes")
    def referenced_hashes(self) -> Set[str]:
        """
        Hashes of every live row that may own a blob.

        Rows with a corrupt kind tag are included so their blobs are never collected.
        """
        stmt = select(RecordEntity.content_hash).where(
            RecordEntity.kind != RecordKind.TEXT.value,
            RecordEntity.content_hash.is_not(None),
        )
        with self.db.read_session() as session:
            return set(session.scalars(stmt))

    def blob_path(self, record: Record) -> Path:
        if not record.is_image:
            raise ValueError(f"Record {record.id} is not an image")
        return self.blobs.path_for(record.value)

    # endregion
    # region Internals
    def _find_equivalent(
        self,
        session: Session,
        kind: RecordKind,
        value: str,
        content_hash: Optional[str],
    ) -> Optional[RecordEntity]:
        if content_hash:
            match = session.scalars(
                select(RecordEntity).where(RecordEntity.content_hash == content_hash)
            ).first()
            if match is not None:
                return match
        return session.scalars(
            select(RecordEntity).where(
                RecordEntity.kind == kind.value, RecordEntity.value == value
            )
        ).first()

    def _require(self, session: Session, record_id: int) -> RecordEntity:
        entity = session.get(RecordEntity, record_id)
        if entity is None:
            raise NotFoundError(record_id)
        return entity

    def _set_pinned(self, record_id: int, pinned: bool) -> Record:
        with self.db.write_session() as session:
            entity = self._require(session, record_id)
            entity.pinned = pinned
            session.flush()
            record = entity.model
        self.logger.debug(f"Record {record_id} pinned={pinned}")
        return record

    def _evicted_models(self, evicted: List[RecordEntity]) -> List[Record]:
        models: List[Record] = []
        for entity in evicted:
            try:
                models.append(entity.model)
            except InvalidKindError as e:
                self.logger.warning(f"Evicted record {entity.id} with corrupt kind: {e}")
        return models

    # endregion


# endregion

__all__ = ["RecordStore"]
