# region Docstring
"""
clipstore.models.record
Persistence and domain models for clipboard history records.
Overview:
- Provides the SQLAlchemy entity persisting one observed clipboard value.
- Provides the Pydantic model mirroring the entity for safe I/O and serialization.
- Provides the closed kind enumeration and the result type of an upsert.
Contents:
- Enums:
    - RecordKind:
        TEXT or IMAGE. The enum value is the tag stored in the database;
        RecordKind.parse is the only way back from a stored tag and rejects
        anything it does not know with InvalidKindError.
    - Applied:
        INSERTED or UPDATED, reported by RecordStore.upsert.
- SQLAlchemy entities:
    - RecordEntity:
        id, kind tag, value (literal text or blob file name), optional content hash,
        updated_at and pinned flag. The .model property converts to Record.
- Pydantic models:
    - Record:
        Domain model returned by every store operation.
    - UpsertResult:
        Outcome of an upsert: what was applied, the resulting record, the records
        evicted by the retention policy, and the duplicate-discard signal.
Design notes:
- id uses SQLite AUTOINCREMENT so an id is never handed out twice, even after
    the row holding it was deleted.
- (kind, value) is unique, so a text equal to an image blob name is its own
    record. content_hash is unique; a NULL hash never collides.
- SQLite returns naive datetimes; Record normalises them back to UTC.
"""
# endregion
# region Imports
import enum
from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from clipstore.database import Base
from clipstore.errors import InvalidKindError

# endregion
# region Enums


class RecordKind(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"

    @classmethod
    def parse(cls, tag: Any) -> "RecordKind":
        """
        Map a persisted tag back to its kind.

        Raises:
            InvalidKindError: If the tag is not a known kind.
        """
        if isinstance(tag, cls):
            return tag
        try:
            return cls(tag)
        except ValueError:
            raise InvalidKindError(tag) from None


class Applied(str, enum.Enum):
    INSERTED = "inserted"
    UPDATED = "updated"


# endregion
# region SQLAlchemy Model
class RecordEntity(Base):
    """
    Model representing a clipboard history record.

    Attributes:
        id (int): Primary key, never reused.
        kind (str): Persisted RecordKind tag ('text' or 'image').
        value (str): Captured text, or the blob file name for images.
        content_hash (Optional[str]): SHA-256 of the payload, the dedup key when present.
        updated_at (datetime): Last time this value was observed.
        pinned (bool): Whether the record is exempt from retention.
    """

    __tablename__ = "clipboard_record"
    __table_args__ = (
        Index("ix_clipboard_record_rank", "pinned", "updated_at"),
        UniqueConstraint("kind", "value", name="uq_clipboard_record_kind_value"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    content_hash: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, unique=True
    )
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Record(id={self.id}, kind='{self.kind}', pinned={self.pinned})>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RecordEntity):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def model(self) -> "Record":
        """
        Convert to the Pydantic model.

        Raises:
            InvalidKindError: If the stored kind tag is unknown.
        """
        return Record(
            id=self.id,
            kind=RecordKind.parse(self.kind),
            value=self.value,
            content_hash=self.content_hash,
            updated_at=self.updated_at,
            pinned=self.pinned,
        )


# endregion
# region Pydantic Models
class Record(BaseModel):
    id: int = Field(..., description="The unique ID of the record")
    kind: RecordKind = Field(..., description="The kind of value (text or image)")
    value: str = Field(
        ..., description="The captured text, or the blob file name for images"
    )
    content_hash: Optional[str] = Field(
        None, description="SHA-256 of the payload when it is keyed by hash"
    )
    updated_at: datetime = Field(
        ..., description="Timestamp of the most recent observation"
    )
    pinned: bool = Field(False, description="Whether the record is pinned")

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "id": 1,
                    "kind": "text",
                    "value": "Sample clipboard text",
                    "content_hash": None,
                    "updated_at": "2024-01-01T12:00:00Z",
                    "pinned": True,
                }
            ]
        },
    )

    @field_validator("updated_at")
    def ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @property
    def is_image(self) -> bool:
        return self.kind is RecordKind.IMAGE


class UpsertResult(BaseModel):
    applied: Applied = Field(..., description="Whether a row was inserted or refreshed")
    record: Record = Field(..., description="The inserted or refreshed record")
    evicted: List[Record] = Field(
        default_factory=list, description="Records removed by the retention policy"
    )

    @property
    def inserted(self) -> bool:
        return self.applied is Applied.INSERTED

    @property
    def discard(self) -> bool:
        """True when the value was a duplicate and a freshly written blob is redundant."""
        return self.applied is Applied.UPDATED


# endregion

__all__ = ["Applied", "Record", "RecordEntity", "RecordKind", "UpsertResult"]
