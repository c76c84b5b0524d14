"""
clipstore.errors
Typed failures raised by the record store and its collaborators.

- NotFoundError: an id references no live row. Callers usually treat it as
    "already removed".
- StorageFailure: database or filesystem I/O failed. Never retried inside the
    store; the original exception is chained as __cause__.
- CorruptionError / InvalidKindError: persisted data cannot be interpreted.
    Kept apart from NotFoundError so corruption is never mistaken for absence.
- InvalidPayloadError: an ingested value cannot be decoded.
"""

from typing import Optional


class ClipStoreError(Exception):
    """Base class for all clipstore errors."""


class NotFoundError(ClipStoreError, LookupError):
    def __init__(self, record_id: int):
        self.record_id = record_id
        super().__init__(f"Record {record_id} not found")


class StorageFailure(ClipStoreError):
    def __init__(self, operation: str, detail: Optional[str] = None):
        self.operation = operation
        message = f"Storage failure during {operation}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class CorruptionError(ClipStoreError):
    pass


class InvalidKindError(CorruptionError):
    def __init__(self, tag: object):
        self.tag = tag
        super().__init__(f"Unknown record kind tag: {tag!r}")


class InvalidPayloadError(ClipStoreError, ValueError):
    pass


__all__ = [
    "ClipStoreError",
    "CorruptionError",
    "InvalidKindError",
    "InvalidPayloadError",
    "NotFoundError",
    "StorageFailure",
]
