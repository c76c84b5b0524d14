# region Docstring
"""
clipstore.blobs
Content-addressed image blob directory owned by the record store.
Overview:
- Blobs are stored flat as `<sha256>.<ext>`; the name is the dedup key.
- Writes go to a hidden temporary file first and are moved into place with
    os.replace, so a reader never sees a half-written blob under its final name.
- Temporary and foreign files are ignored by scan(), so the garbage collector
    only ever considers well-formed blob names.
"""
# endregion
# region Imports
import os
from logging import Logger
from pathlib import Path
from typing import Dict, List, Optional
from uuid import uuid4

from clipstore.errors import StorageFailure
from clipstore.hashing import hash_from_blob_name
from clipstore.utils import is_image_file

# endregion
# region BlobDirectory


class BlobDirectory:
    """
    Flat directory of image blobs.

    Attributes:
        root (Path): Directory holding the blobs. Created on init.
    """

    def __init__(self, root: Path, logger: Optional[Logger] = None):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.logger = logger.getChild("BlobDirectory") if logger else None

    def path_for(self, name: str) -> Path:
        """
        Resolve a blob name to its path.

        Raises:
            ValueError: If the name is not a bare file name.
        """
        if not name or Path(name).name != name:
            raise ValueError(f"Invalid blob name: {name!r}")
        return self.root / name

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def write(self, name: str, data: bytes) -> bool:
        """
        Write a blob unless one with the same name already exists.

        Args:
            name (str): Blob file name `<hash>.<ext>`.
            data (bytes): Encoded image bytes.

        Returns:
            bool: True if the blob was written by this call, False if it was already present.

        Raises:
            StorageFailure: If the file cannot be written.
        """
        target = self.path_for(name)
        if target.is_file():
            return False
        temp_path = self.root / f".{name}.{uuid4().hex}.tmp"
        try:
            temp_path.write_bytes(data)
            os.replace(temp_path, target)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise StorageFailure("blob write", f"{target}: {e}") from e
        if self.logger:
            self.logger.debug(f"Wrote blob {name} ({len(data)} bytes)")
        return True

    def remove(self, name: str) -> bool:
        """
        Delete a blob.

        Returns:
            bool: True if a file was deleted, False if it was already gone.

        Raises:
            StorageFailure: If the file exists but cannot be deleted.
        """
        try:
            self.path_for(name).unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageFailure("blob delete", f"{name}: {e}") from e
        if self.logger:
            self.logger.debug(f"Removed blob {name}")
        return True

    def scan(self) -> Dict[str, List[Path]]:
        """
        List blobs on disk grouped by the hash their name carries.

        Returns:
            Dict[str, List[Path]]: hash -> blob paths (one per stored format).
        """
        found: Dict[str, List[Path]] = {}
        try:
            entries = list(self.root.iterdir())
        except FileNotFoundError:
            return found
        except OSError as e:
            raise StorageFailure("blob scan", str(e)) from e
        for entry in entries:
            if not is_image_file(entry):
                continue
            digest = hash_from_blob_name(entry.name)
            if digest is None or not entry.is_file():
                continue
            found.setdefault(digest, []).append(entry)
        return found


# endregion

__all__ = ["BlobDirectory"]
