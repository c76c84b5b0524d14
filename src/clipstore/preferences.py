# region Docstring
"""
clipstore.preferences
User preferences persisted next to the database.
Overview:
- The retention bound is a user preference that can change at runtime, so it
    lives in a small JSON file rather than in the environment-driven settings.
- load_preferences writes the defaults when the file does not exist yet, so the
    first run leaves a file the user can edit.
"""
# endregion
# region Imports
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from clipstore.constants import DEFAULT_MAX_RECORDS
from clipstore.errors import StorageFailure

# endregion


class Preferences(BaseModel):
    max_records: int = Field(
        DEFAULT_MAX_RECORDS,
        gt=0,
        description="Maximum number of unpinned records kept",
    )

    model_config = ConfigDict(extra="ignore")


def load_preferences(path: Path, default_max_records: int = DEFAULT_MAX_RECORDS) -> Preferences:
    """
    Read preferences, creating the file with defaults when missing.

    Args:
        path (Path): Location of preferences.json.
        default_max_records (int): Bound written on first run.

    Raises:
        StorageFailure: If the file cannot be read, written or parsed.
    """
    path = Path(path)
    if not path.exists():
        preferences = Preferences(max_records=default_max_records)
        dump_preferences(path, preferences)
        return preferences
    try:
        return Preferences.model_validate_json(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise StorageFailure("preferences load", str(e)) from e
    except ValidationError as e:
        raise StorageFailure("preferences load", f"{path}: {e}") from e


def dump_preferences(path: Path, preferences: Preferences) -> None:
    """Atomically write preferences as JSON."""
    path = Path(path)
    temp_path = path.with_name(f".tmp-{path.name}")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path.write_text(preferences.model_dump_json(indent=2), encoding="utf-8")
        os.replace(temp_path, path)
    except OSError as e:
        temp_path.unlink(missing_ok=True)
        raise StorageFailure("preferences dump", str(e)) from e


__all__ = ["Preferences", "dump_preferences", "load_preferences"]
