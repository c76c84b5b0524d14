"""
Logging setup for clipstore.

configure_logging() installs a JSON-lines file handler (python-json-logger) and a
plain console handler on the "clipstore" logger, after rotating the previous day's
log file into a timestamped archive and pruning old archives.
Components take the returned logger and use logger.getChild("<Component>").
"""

import logging
from datetime import datetime
from logging import Logger as T_Logger
from logging.config import dictConfig
from pathlib import Path
from typing import Optional

from pythonjsonlogger.json import JsonFormatter  # type: ignore # noqa F401

from clipstore.config import AppSettings
from clipstore.utils import get_time

LOGGER_NAME = "clipstore"
ARCHIVE_STAMP = "%Y%m%d_%H%M%S"


def build_logging_config(log_file_path: Path, log_level: str) -> dict:
    level = log_level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
            },
            "standard": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
        },
        "handlers": {
            "file": {
                "class": "logging.FileHandler",
                "filename": str(log_file_path),
                "formatter": "json",
                "level": level,
            },
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "level": level,
            },
        },
        "loggers": {
            LOGGER_NAME: {
                "handlers": ["file", "console"],
                "level": level,
                "propagate": False,
            },
        },
    }


def configure_logging(
    settings: AppSettings,
    log_file_path: Optional[Path] = None,
    days_to_keep: int = 10,
) -> T_Logger:
    """
    Configure the clipstore logger.

    Args:
        settings (AppSettings): Supplies the log level and logs directory.
        log_file_path (Optional[Path]): Override for the JSON log file.
        days_to_keep (int): Number of archived log files to keep.

    Returns:
        Logger: The configured "clipstore" logger.
    """
    log_file_path = log_file_path or settings.logs_dir / "clipstore.jsonl"
    log_file_path.parent.mkdir(parents=True, exist_ok=True)
    _archive_daily_log_file(log_file_path)
    _manage_logfile_archives(log_file_path, days_to_keep)

    dictConfig(build_logging_config(log_file_path, settings.log_level))
    logger = logging.getLogger(LOGGER_NAME)
    logger.getChild("SYSTEM").debug("Logger for clipstore initialized.")
    return logger


def _archives(log_file_path: Path) -> list[Path]:
    return sorted(
        log_file_path.parent.glob(f"{log_file_path.stem}_*.jsonl"),
        key=lambda f: f.stat().st_mtime,
        reverse=True,
    )


def _archive_daily_log_file(log_file_path: Path) -> Optional[Path]:
    """Archive the log file by renaming it with a timestamp, at most once a day."""
    current_time = get_time().replace(tzinfo=None)
    archive_files = _archives(log_file_path)
    if archive_files:
        latest_archive = archive_files[0]
        timestamp_str = latest_archive.stem.replace(f"{log_file_path.stem}_", "")
        try:
            timestamp = datetime.strptime(timestamp_str, ARCHIVE_STAMP)
        except ValueError:
            return None
        if (current_time - timestamp).total_seconds() < 24 * 3600:
            return None

    if log_file_path.exists() and log_file_path.stat().st_size > 0:
        archive_path = log_file_path.with_name(
            f"{log_file_path.stem}_{current_time.strftime(ARCHIVE_STAMP)}.jsonl"
        )
        log_file_path.rename(archive_path)
        return archive_path
    return None


def _manage_logfile_archives(log_file_path: Path, days_to_keep: int = 10) -> list[Path]:
    """Keep only the most recent archives."""
    removed = []
    for archive_file in _archives(log_file_path)[days_to_keep:]:
        archive_file.unlink(missing_ok=True)
        removed.append(archive_file)
    return removed


__all__ = ["LOGGER_NAME", "build_logging_config", "configure_logging"]
