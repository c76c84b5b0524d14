import json

import pytest

from clipstore.errors import NotFoundError
from clipstore.models.record import RecordKind


def test_filter_and_get(commands, ingestion):
    record = ingestion.ingest_text("Needle in a haystack").record
    ingestion.ingest_text("something else")

    assert [r.id for r in commands.filter_records("NEEDLE")] == [record.id]
    assert len(commands.filter_records()) == 2
    assert commands.get_record(record.id) == record


def test_pin_and_unpin(commands, ingestion):
    record = ingestion.ingest_text("a").record

    assert commands.pin_record(record.id).pinned
    assert not commands.unpin_record(record.id).pinned


def test_delete_image_removes_blob(commands, ingestion, png_bytes):
    record = ingestion.ingest_image(png_bytes).record
    path = commands.store.blob_path(record)

    deleted = commands.delete_record(record.id)

    assert deleted.id == record.id
    assert not path.exists()
    assert commands.store.count() == 0


def test_delete_image_with_missing_blob(commands, ingestion, png_bytes):
    record = ingestion.ingest_image(png_bytes).record
    commands.store.blobs.remove(record.value)

    assert commands.delete_record(record.id).id == record.id
    assert commands.store.count() == 0


def test_delete_unknown_record(commands):
    with pytest.raises(NotFoundError):
        commands.delete_record(7)


def test_copy_text(commands, ingestion):
    record = ingestion.ingest_text("paste me").record

    payload = commands.copy_record(record.id)

    assert payload.kind is RecordKind.TEXT
    assert payload.text == "paste me"
    assert payload.image_path is None


def test_copy_image(commands, ingestion, png_bytes):
    record = ingestion.ingest_image(png_bytes).record

    payload = commands.copy_record(record.id)

    assert payload.text is None
    assert payload.image_path.is_absolute()
    assert payload.image_path.read_bytes() == png_bytes


def test_copy_image_with_missing_blob(commands, ingestion, png_bytes):
    record = ingestion.ingest_image(png_bytes).record
    commands.store.blobs.remove(record.value)

    with pytest.raises(FileNotFoundError):
        commands.copy_record(record.id)


def test_update_max_records_persists(commands):
    updated = commands.update_max_records(5)

    assert updated.max_records == 5
    assert commands.get_config().max_records == 5
    assert commands.store.max_records == 5
    saved = json.loads(commands.preferences_path.read_text(encoding="utf-8"))
    assert saved["max_records"] == 5


@pytest.mark.parametrize("value", [0, -3, True, 2.5])
def test_update_max_records_rejects_invalid(commands, value):
    with pytest.raises(ValueError):
        commands.update_max_records(value)
    assert commands.store.max_records == 200
    assert not commands.preferences_path.exists()


def test_new_bound_applies_on_next_insert(commands, ingestion):
    for value in ("a", "b", "c"):
        ingestion.ingest_text(value)
    commands.update_max_records(1)
    assert commands.store.count() == 3

    ingestion.ingest_text("d")

    assert [r.value for r in commands.filter_records()] == ["d"]


def test_get_config_returns_a_copy(commands):
    config = commands.get_config()
    config.max_records = 1

    assert commands.get_config().max_records == 200
