# region Docstring
"""
clipstore.ingest
Ingestion façade: the single entry point for newly observed clipboard values.
Overview:
- Text: whitespace-only text is ignored. Text longer than the configured byte
    threshold gets a content hash; shorter text is keyed by its literal value.
- Images: the payload is encoded as the configured blob format (bytes already in
    that format are stored untouched), hashed, written as `<hash>.<ext>`, and only
    then upserted, so a committed image row always has its blob on disk.
- After an image insertion, or an insertion that evicted an image row, the blob
    garbage collector runs.
Contents:
- ClipboardPayload:
    Kind + payload pair as produced by a clipboard reader.
- IngestionService:
    ingest(kind, payload), ingest_text(text), ingest_image(data).
Design notes:
- Calls hold the store lock, which RecordCommands.delete_record and the garbage
    collector also take, so neither can remove a blob between this call seeing
    it on disk and committing the row that references it.
- Duplicate image (upsert reports discard): when this call had to write the blob,
    the row's blob was missing. With heal_missing_blobs the new file is kept and
    restores the row's blob; otherwise it is discarded.
"""
# endregion
# region Imports
import logging
from io import BytesIO
from logging import Logger
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel, ConfigDict, Field

from clipstore.blob_gc import BlobGarbageCollector
from clipstore.config import StoreSettings
from clipstore.constants import ImageFormats
from clipstore.errors import InvalidPayloadError
from clipstore.hashing import blob_name, content_hash, text_fingerprint
from clipstore.models.record import RecordKind, UpsertResult
from clipstore.store import RecordStore

# endregion
# region Payload Model

ImagePayload = Union[bytes, bytearray, memoryview, Image.Image]


class ClipboardPayload(BaseModel):
    kind: RecordKind = Field(..., description="Kind of the clipboard value")
    data: Union[str, bytes] = Field(
        ..., description="Text, or encoded image bytes"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def fingerprint(self) -> str:
        return f"{self.kind.value}:{content_hash(self.data)}"


# endregion
# region Ingestion Service


class IngestionService:
    """
    Turns observed clipboard values into records.
    """

    def __init__(
        self,
        store: RecordStore,
        collector: BlobGarbageCollector,
        settings: StoreSettings,
        logger: Optional[Logger] = None,
    ):
        """
        Args:
            store (RecordStore): The shared record store.
            collector (BlobGarbageCollector): Collector run after image changes.
            settings (StoreSettings): Hash threshold, blob format and healing switch.
            logger (Logger): Parent logger.
        """
        self.store = store
        self.collector = collector
        self.settings = settings
        self.logger = (logger or logging.getLogger("clipstore")).getChild(
            "IngestionService"
        )
        self._lock = store.lock

    def ingest(
        self, kind: Union[RecordKind, str], payload: Union[str, ImagePayload]
    ) -> Optional[UpsertResult]:
        """
        Submit a newly observed value.

        Args:
            kind (RecordKind | str): TEXT or IMAGE.
            payload: The text, or encoded image bytes / a PIL image.

        Returns:
            Optional[UpsertResult]: None when the value was ignored (blank text).

        Raises:
            InvalidPayloadError: If the payload does not match its kind.
            StorageFailure: If the database or the blob directory fails.
        """
        kind = RecordKind(kind)
        if kind is RecordKind.TEXT:
            if not isinstance(payload, str):
                raise InvalidPayloadError("Text payload must be a string")
            return self.ingest_text(payload)
        if isinstance(payload, str):
            raise InvalidPayloadError("Image payload must be bytes or a PIL image")
        return self.ingest_image(payload)

    def ingest_payload(self, payload: ClipboardPayload) -> Optional[UpsertResult]:
        return self.ingest(payload.kind, payload.data)

    def ingest_text(self, text: str) -> Optional[UpsertResult]:
        if not text.strip():
            self.logger.debug("Ignoring blank text")
            return None
        digest = text_fingerprint(text, self.settings.text_hash_threshold)
        with self._lock:
            result = self.store.upsert(RecordKind.TEXT, text, digest)
            self._collect_if_needed(result)
        return result

    def ingest_image(self, data: ImagePayload) -> UpsertResult:
        fmt = self.settings.image_format
        encoded = self._encode_image(data, fmt)
        digest = content_hash(encoded)
        name = blob_name(digest, fmt.value)

        with self._lock:
            written = self.store.blobs.write(name, encoded)
            try:
                result = self.store.upsert(RecordKind.IMAGE, name, digest)
            except Exception:
                if written:
                    self.store.blobs.remove(name)
                raise

            if result.discard and written:
                if self.settings.heal_missing_blobs:
                    self.logger.warning(
                        f"Restored missing blob {name} for record {result.record.id}"
                    )
                else:
                    self.store.blobs.remove(name)
                    self.logger.debug(f"Discarded duplicate blob {name}")
            self._collect_if_needed(result)
        return result

    # region Internals
    def _collect_if_needed(self, result: UpsertResult) -> None:
        image_inserted = result.inserted and result.record.is_image
        image_evicted = any(record.is_image for record in result.evicted)
        if image_inserted or image_evicted:
            self.collector.collect()

    @staticmethod
    def _encode_image(data: ImagePayload, fmt: ImageFormats) -> bytes:
        """
        Encode an image payload as `fmt`.

        Bytes already in `fmt` are returned unchanged so the blob hash equals the
        hash of what the caller submitted.

        Raises:
            InvalidPayloadError: If the bytes are not a decodable image.
        """
        if isinstance(data, Image.Image):
            return _save(data, fmt)

        raw = bytes(data)
        if not raw:
            raise InvalidPayloadError("Empty image payload")
        try:
            with Image.open(BytesIO(raw)) as check:
                source_format = (check.format or "").upper()
                check.verify()
            if source_format == fmt.pil_format:
                return raw
            with Image.open(BytesIO(raw)) as img:
                img.load()
                return _save(img, fmt)
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            SyntaxError,
            ValueError,
        ) as e:
            raise InvalidPayloadError(f"Cannot decode image payload: {e}") from e

    # endregion


def _save(img: Image.Image, fmt: ImageFormats) -> bytes:
    buffered = BytesIO()
    if fmt is ImageFormats.BMP and img.mode not in ("1", "L", "P", "RGB"):
        img = img.convert("RGB")
    img.save(buffered, format=fmt.pil_format)
    return buffered.getvalue()


# endregion

__all__ = ["ClipboardPayload", "ImagePayload", "IngestionService"]
