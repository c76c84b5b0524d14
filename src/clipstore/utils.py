from datetime import datetime, timezone
from pathlib import Path

from clipstore.constants import IMAGE_FORMAT_LIST


def get_time() -> datetime:
    """
    Current time in UTC.

    Returns:
        datetime: A timezone-aware datetime.
    """
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Interpret a naive datetime as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_image_file(path: Path) -> bool:
    """
    Check if the given path is an image blob based on its extension.

    Args:
        path (Path): The file path to check.

    Returns:
        bool: True if the file has a blob image suffix, False otherwise.

    Example:
        >>> is_image_file(Path("3a7bd3e2.png"))
        True
        >>> is_image_file(Path(".3a7bd3e2.png.tmp"))
        False
    """
    return path.suffix.lower() in IMAGE_FORMAT_LIST
