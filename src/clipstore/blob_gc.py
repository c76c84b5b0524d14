# region Docstring
"""
clipstore.blob_gc
Garbage collector reconciling image blobs on disk with live image rows.
Overview:
- A pass lists the blob directory, takes the hashes named by blob file stems,
    subtracts the hashes referenced by live rows, and deletes what is left.
- The pass is a pure set difference, so it is idempotent and safe to re-run at
    any time. A crash between a row delete and its blob delete leaves an orphan
    that the next pass removes.
Contents:
- GCReport:
    Pydantic summary of one pass (scanned, referenced, removed, missing).
- BlobGarbageCollector:
    collect() runs one pass. Runs after image insertions, after evictions of
    image rows, and once at startup as a repair pass.
Design notes:
- The scan is O(number of blobs), fine for a bounded personal history.
- Only file names are compared; blob contents are never read.
- A pass holds the store lock, so in-process ingestion never races it.
- Live rows whose blob is missing are reported, not repaired; ingesting the same
    image again restores the blob (see IngestionService).
"""
# endregion
# region Imports
import logging
from logging import Logger
from typing import List, Optional

from pydantic import BaseModel, Field

from clipstore.errors import StorageFailure
from clipstore.store import RecordStore

# endregion
# region Result Models


class GCReport(BaseModel):
    scanned: int = Field(0, description="Number of blob files found on disk")
    referenced: int = Field(0, description="Number of hashes referenced by live rows")
    removed: List[str] = Field(
        default_factory=list, description="File names of deleted orphan blobs"
    )
    missing: List[str] = Field(
        default_factory=list, description="Referenced hashes with no blob on disk"
    )


# endregion
# region Collector


class BlobGarbageCollector:
    """
    Deletes blob files whose hash no live record references.
    """

    def __init__(self, store: RecordStore, logger: Optional[Logger] = None):
        self.store = store
        self.logger = (logger or logging.getLogger("clipstore")).getChild(
            "BlobGarbageCollector"
        )

    def collect(self) -> GCReport:
        """
        Run one collection pass.

        Returns:
            GCReport: What was scanned and removed.

        Raises:
            StorageFailure: If the directory cannot be listed or the database read fails.
        """
        with self.store.lock:
            on_disk = self.store.blobs.scan()
            referenced = self.store.referenced_hashes()
            report = GCReport(scanned=sum(len(paths) for paths in on_disk.values()))
            report.referenced = len(referenced)

            for digest in sorted(set(on_disk) - referenced):
                for path in on_disk[digest]:
                    try:
                        if self.store.blobs.remove(path.name):
                            report.removed.append(path.name)
                    except StorageFailure as e:
                        self.logger.error(
                            f"Could not remove orphan blob {path.name}: {e}"
                        )
                        raise

        report.missing = sorted(referenced - set(on_disk))
        if report.removed:
            self.logger.info(f"Removed {len(report.removed)} orphan blob(s)")
        for digest in report.missing:
            self.logger.warning(f"Blob missing for live record hash {digest}")
        return report


# endregion

__all__ = ["BlobGarbageCollector", "GCReport"]
