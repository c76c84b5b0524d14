import json

import pytest

from clipstore.errors import StorageFailure
from clipstore.preferences import Preferences, dump_preferences, load_preferences


def test_load_creates_defaults(tmp_path):
    path = tmp_path / "nested" / "preferences.json"

    preferences = load_preferences(path, default_max_records=50)

    assert preferences.max_records == 50
    assert json.loads(path.read_text(encoding="utf-8")) == {"max_records": 50}


def test_load_existing_file(tmp_path):
    path = tmp_path / "preferences.json"
    path.write_text('{"max_records": 12, "auto_start": true}', encoding="utf-8")

    assert load_preferences(path).max_records == 12


@pytest.mark.parametrize("content", ["not json", '{"max_records": 0}', '{"max_records": "many"}'])
def test_load_invalid_file(tmp_path, content):
    path = tmp_path / "preferences.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(StorageFailure):
        load_preferences(path)


def test_dump_leaves_no_temporary_file(tmp_path):
    path = tmp_path / "preferences.json"

    dump_preferences(path, Preferences(max_records=3))
    dump_preferences(path, Preferences(max_records=4))

    assert [p.name for p in tmp_path.iterdir()] == ["preferences.json"]
    assert load_preferences(path).max_records == 4
