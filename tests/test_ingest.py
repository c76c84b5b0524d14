from hashlib import sha256
from io import BytesIO

import pytest
from PIL import Image

from clipstore.constants import ImageFormats
from clipstore.errors import InvalidPayloadError, StorageFailure
from clipstore.ingest import ClipboardPayload, IngestionService
from clipstore.models.record import Applied, RecordKind


def blob_files(store):
    return sorted(p.name for p in store.blobs.root.iterdir())


# region Text
def test_text_is_inserted(ingestion):
    result = ingestion.ingest_text("hello")

    assert result.inserted
    assert result.record.value == "hello"
    assert result.record.content_hash is None


@pytest.mark.parametrize("blank", ["", "   ", "\n\t "])
def test_blank_text_is_ignored(ingestion, blank):
    assert ingestion.ingest_text(blank) is None
    assert ingestion.store.count() == 0


def test_text_hash_threshold(ingestion):
    at_threshold = "a" * 1024
    above = "b" * 1025

    assert ingestion.ingest_text(at_threshold).record.content_hash is None
    record = ingestion.ingest_text(above).record
    assert record.content_hash == sha256(above.encode("utf-8")).hexdigest()
    assert record.value == above


def test_long_text_dedups_by_hash(ingestion):
    text = "x" * 5000
    first = ingestion.ingest_text(text)
    second = ingestion.ingest_text(text)

    assert second.applied is Applied.UPDATED
    assert second.record.id == first.record.id
    assert ingestion.store.count() == 1


# endregion
# region Images
def test_image_is_stored_under_its_hash(ingestion, png_bytes):
    digest = sha256(png_bytes).hexdigest()

    result = ingestion.ingest_image(png_bytes)

    assert result.inserted
    assert result.record.kind is RecordKind.IMAGE
    assert result.record.value == f"{digest}.png"
    assert result.record.content_hash == digest
    assert ingestion.store.blob_path(result.record).read_bytes() == png_bytes


def test_duplicate_image_keeps_one_blob(ingestion, png_bytes):
    first = ingestion.ingest_image(png_bytes)
    second = ingestion.ingest_image(png_bytes)

    assert second.applied is Applied.UPDATED
    assert second.record.id == first.record.id
    assert blob_files(ingestion.store) == [first.record.value]


def test_different_images_get_different_records(ingestion, make_image):
    red = ingestion.ingest_image(make_image((255, 0, 0))).record
    blue = ingestion.ingest_image(make_image((0, 0, 255))).record

    assert red.id != blue.id
    assert blob_files(ingestion.store) == sorted([red.value, blue.value])


def test_other_formats_are_reencoded(ingestion, make_image):
    bmp = make_image((0, 255, 0), size=(3, 2), fmt="BMP")

    record = ingestion.ingest_image(bmp).record

    path = ingestion.store.blob_path(record)
    assert path.suffix == ".png"
    blob = path.read_bytes()
    assert record.content_hash == sha256(blob).hexdigest()
    with Image.open(BytesIO(blob)) as img:
        assert img.format == "PNG"
        assert img.size == (3, 2)


def test_pil_image_payload(ingestion):
    record = ingestion.ingest_image(Image.new("RGB", (2, 2), (1, 2, 3))).record

    assert record.is_image
    assert ingestion.store.blob_path(record).is_file()


def test_configured_blob_format(store, collector, store_settings, png_bytes):
    settings = store_settings.model_copy(update={"image_format": ImageFormats.BMP})
    service = IngestionService(store, collector, settings)

    record = service.ingest_image(png_bytes).record

    assert record.value.endswith(".bmp")
    with Image.open(store.blob_path(record)) as img:
        assert img.format == "BMP"


@pytest.mark.parametrize("payload", [b"", b"not an image", b"\x89PNG\r\n\x1a\ntruncated"])
def test_undecodable_image_is_rejected(ingestion, payload):
    with pytest.raises(InvalidPayloadError):
        ingestion.ingest_image(payload)
    assert ingestion.store.count() == 0
    assert blob_files(ingestion.store) == []


def test_missing_blob_is_restored_by_duplicate(ingestion, png_bytes):
    record = ingestion.ingest_image(png_bytes).record
    ingestion.store.blobs.remove(record.value)

    result = ingestion.ingest_image(png_bytes)

    assert result.applied is Applied.UPDATED
    assert ingestion.store.blobs.exists(record.value)


def test_missing_blob_stays_missing_without_healing(
    store, collector, store_settings, png_bytes
):
    settings = store_settings.model_copy(update={"heal_missing_blobs": False})
    service = IngestionService(store, collector, settings)
    record = service.ingest_image(png_bytes).record
    store.blobs.remove(record.value)

    result = service.ingest_image(png_bytes)

    assert result.applied is Applied.UPDATED
    assert not store.blobs.exists(record.value)


def test_evicted_image_blob_is_collected(ingestion, png_bytes):
    ingestion.store.max_records = 1
    image = ingestion.ingest_image(png_bytes).record

    result = ingestion.ingest_text("newer")

    assert [r.id for r in result.evicted] == [image.id]
    assert blob_files(ingestion.store) == []


def test_failed_upsert_removes_new_blob(ingestion, png_bytes, monkeypatch):
    def fail(*args, **kwargs):
        raise StorageFailure("upsert", "disk full")

    monkeypatch.setattr(ingestion.store, "upsert", fail)

    with pytest.raises(StorageFailure):
        ingestion.ingest_image(png_bytes)
    assert blob_files(ingestion.store) == []


# endregion
# region Dispatch
def test_ingest_dispatches_by_kind(ingestion, png_bytes):
    assert ingestion.ingest("text", "hello").record.kind is RecordKind.TEXT
    assert ingestion.ingest(RecordKind.IMAGE, png_bytes).record.kind is RecordKind.IMAGE


def test_ingest_rejects_mismatched_payloads(ingestion):
    with pytest.raises(InvalidPayloadError):
        ingestion.ingest("text", b"bytes")
    with pytest.raises(InvalidPayloadError):
        ingestion.ingest("image", "text")


def test_ingest_payload(ingestion):
    payload = ClipboardPayload(kind="text", data="from the clipboard")

    result = ingestion.ingest_payload(payload)

    assert result.record.value == "from the clipboard"
    assert payload.fingerprint.startswith("text:")


# endregion


def test_oversized_image_is_rejected(ingestion, make_image, monkeypatch):
    bmp = make_image(size=(10, 10), fmt="BMP")
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)

    with pytest.raises(InvalidPayloadError):
        ingestion.ingest_image(bmp)
    assert ingestion.store.count() == 0


def test_text_equal_to_blob_name_is_its_own_record(ingestion, png_bytes):
    image = ingestion.ingest_image(png_bytes).record

    result = ingestion.ingest_text(image.value)

    assert result.inserted
    assert result.record.kind is RecordKind.TEXT
    assert result.record.id != image.id
    assert ingestion.store.count() == 2
    assert ingestion.store.blobs.exists(image.value)
