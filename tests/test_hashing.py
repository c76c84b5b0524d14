from hashlib import sha256
from pathlib import Path

from clipstore.hashing import (
    blob_name,
    content_hash,
    get_file_sha256,
    hash_from_blob_name,
    text_fingerprint,
)

FOO_HASH = "2c26b46b68ffc68ff99b453c1d30413413422d706483bfa0f98a5e886266e7ae"


def test_content_hash_is_sha256_hex():
    assert content_hash("foo") == FOO_HASH
    assert content_hash(b"foo") == FOO_HASH
    assert content_hash("héllo") == sha256("héllo".encode("utf-8")).hexdigest()


def test_text_fingerprint_threshold_is_in_bytes():
    assert text_fingerprint("a" * 8, threshold=8) is None
    assert text_fingerprint("a" * 9, threshold=8) == content_hash("a" * 9)
    # four characters, eight UTF-8 bytes
    assert text_fingerprint("éééé", threshold=7) == content_hash("éééé")


def test_blob_name_round_trip():
    name = blob_name(FOO_HASH, ".png")
    assert name == f"{FOO_HASH}.png"
    assert hash_from_blob_name(name) == FOO_HASH
    assert hash_from_blob_name(Path("/tmp") / name) == FOO_HASH


def test_hash_from_blob_name_rejects_foreign_names():
    assert hash_from_blob_name("notes.png") is None
    assert hash_from_blob_name(f"{FOO_HASH.upper()}.png") is None
    assert hash_from_blob_name(f".{FOO_HASH}.png.abc123.tmp") is None
    assert hash_from_blob_name(f"{FOO_HASH[:-1]}.png") is None


def test_get_file_sha256(tmp_path):
    path = tmp_path / "payload.bin"
    path.write_bytes(b"foo")
    assert get_file_sha256(path) == FOO_HASH
