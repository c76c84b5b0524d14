from datetime import datetime, timedelta, timezone

import pytest

from clipstore.errors import CorruptionError, InvalidKindError
from clipstore.models.record import Applied, Record, RecordKind, UpsertResult


def test_kind_tags_round_trip():
    for kind in RecordKind:
        assert RecordKind.parse(kind.value) is kind
    assert RecordKind.parse(RecordKind.IMAGE) is RecordKind.IMAGE


def test_unknown_kind_tag_is_corruption():
    with pytest.raises(InvalidKindError) as info:
        RecordKind.parse("video")
    assert info.value.tag == "video"
    assert isinstance(info.value, CorruptionError)


def test_record_normalises_updated_at_to_utc():
    naive = Record(
        id=1, kind=RecordKind.TEXT, value="a", updated_at=datetime(2024, 1, 1, 12)
    )
    assert naive.updated_at.tzinfo == timezone.utc

    offset = timezone(timedelta(hours=2))
    aware = Record(
        id=1,
        kind="text",
        value="a",
        updated_at=datetime(2024, 1, 1, 14, tzinfo=offset),
    )
    assert aware.updated_at == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)
    assert aware.updated_at.utcoffset() == timedelta(0)


def test_record_is_image():
    now = datetime.now(timezone.utc)
    assert Record(id=1, kind="image", value="x.png", updated_at=now).is_image
    assert not Record(id=2, kind="text", value="x", updated_at=now).is_image


def test_upsert_result_discard_signal():
    record = Record(
        id=1, kind="text", value="a", updated_at=datetime.now(timezone.utc)
    )
    inserted = UpsertResult(applied=Applied.INSERTED, record=record)
    updated = UpsertResult(applied=Applied.UPDATED, record=record)
    assert inserted.inserted and not inserted.discard
    assert updated.discard and not updated.inserted
    assert inserted.evicted == []
