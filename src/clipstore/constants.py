# region Docstring
"""
clipstore.constants
Shared constants and enumerations for the clipboard history store.
Contents:
- Retention / hashing defaults:
    - DEFAULT_MAX_RECORDS: Number of unpinned records retained on first run.
    - DEFAULT_TEXT_HASH_THRESHOLD: Byte length above which text is keyed by hash.
    - HASH_HEX_LENGTH: Length of a SHA-256 hex digest.
- Format Enumerations:
    - ImageFormats: Lossless formats an image blob can be stored in.
- Derived Lists:
    - IMAGE_FORMAT_LIST: Blob file suffixes (with the leading dot) the garbage
        collector treats as blobs.
"""
# endregion
# region Imports
import enum
from typing import List

# endregion
# region Constants

DEFAULT_MAX_RECORDS: int = 200
DEFAULT_TEXT_HASH_THRESHOLD: int = 1024
HASH_HEX_LENGTH: int = 64

# endregion
# region Enums


class ImageFormats(str, enum.Enum):
    """Image blob formats. Values are file suffixes without the dot."""

    PNG = "png"
    BMP = "bmp"
    TIFF = "tiff"

    @property
    def pil_format(self) -> str:
        """Format name understood by PIL.Image.save."""
        return self.value.upper()

    @property
    def suffix(self) -> str:
        return f".{self.value}"


IMAGE_FORMAT_LIST: List[str] = [fmt.suffix for fmt in ImageFormats]

# endregion
