"""
clipstore.models
Persistence entities and domain models of the record store.

Exports are organized into __entities__ and __models__ lists, separating
SQLAlchemy persistence entities from Pydantic models used for I/O.
"""

from .record import (  # noqa: F401
    Applied,
    Record,
    RecordEntity,
    RecordKind,
    UpsertResult,
)

__entities__ = ["RecordEntity"]
__models__ = ["Applied", "Record", "RecordKind", "UpsertResult"]
__all__ = [*__entities__, *__models__]
