# region Docstring
"""
clipstore.hashing
Content fingerprints used as dedup keys and as blob file names.
Overview:
- SHA-256 lowercase hex digests, stable across processes and platforms.
- Short text is never hashed: its literal value is already an exact, cheap key.
- Image blobs are named `<hash>.<ext>` so the file name itself is the dedup key
    and the garbage collector never needs to read file contents.
"""
# endregion
# region Imports
import hashlib
import re
from pathlib import Path
from typing import Optional, Union

from clipstore.constants import HASH_HEX_LENGTH

# endregion

_HEX_DIGEST = re.compile(rf"^[0-9a-f]{{{HASH_HEX_LENGTH}}}$")


def content_hash(data: Union[bytes, str]) -> str:
    """
    Compute the fingerprint of a payload.

    Args:
        data (bytes | str): Raw bytes, or text which is UTF-8 encoded first.

    Returns:
        str: The SHA-256 hash as a hexadecimal string.

    Example:
        >>> content_hash("foo")
        '2c26b46b68ffc68ff99b453c1d30413413422d706483bfa0f98a5e886266e7ae'
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def text_fingerprint(text: str, threshold: int) -> Optional[str]:
    """
    Hash text only when its UTF-8 encoding is longer than `threshold` bytes.

    Returns:
        Optional[str]: The hash, or None when the literal value is the key.
    """
    encoded = text.encode("utf-8")
    if len(encoded) > threshold:
        return content_hash(encoded)
    return None


def blob_name(digest: str, ext: str) -> str:
    """Build the content-addressed file name `<hash>.<ext>`."""
    return f"{digest}.{ext.lstrip('.')}"


def hash_from_blob_name(name: Union[str, Path]) -> Optional[str]:
    """
    Extract the hash from a blob file name.

    Returns:
        Optional[str]: The stem when it is a well-formed digest, otherwise None.

    Example:
        >>> hash_from_blob_name("notes.png") is None
        True
    """
    stem = Path(name).stem
    if _HEX_DIGEST.match(stem):
        return stem
    return None


def get_file_sha256(file_path: Path) -> str:
    """
    Calculate the SHA256 hash of a file.

    Arguments:
        file_path (Path): The file path to calculate the hash for.

    Returns:
        str: The SHA256 hash as a hexadecimal string.

    Raises:
        OSError: If the file cannot be read.
    """
    sha256_hash = hashlib.sha256()
    with file_path.open("rb") as f:
        for byte_block in iter(lambda: f.read(4096), b""):
            sha256_hash.update(byte_block)
    return sha256_hash.hexdigest()


__all__ = [
    "blob_name",
    "content_hash",
    "get_file_sha256",
    "hash_from_blob_name",
    "text_fingerprint",
]
