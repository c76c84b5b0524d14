# region Docstring
"""
clipstore.retention
Retention policy bounding the number of live records.
Overview:
- apply_retention runs inside the write transaction of an insertion, right after
    the new row is flushed. Refreshing an existing row never calls it because the
    row count did not grow.
- Rows are ranked pinned-first, then by recency. Eviction removes unpinned rows,
    oldest updated_at first (lowest id breaks ties), until the live count equals
    max_records or no unpinned row is left.
- Pinned rows are never evicted, so the bound is relaxed when pinned rows alone
    exceed it.
"""
# endregion
# region Imports
from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from clipstore.models.record import RecordEntity

# endregion


def count_records(session: Session) -> int:
    return session.scalar(select(func.count()).select_from(RecordEntity)) or 0


def eviction_candidates(session: Session, limit: int) -> List[RecordEntity]:
    """Unpinned rows in eviction order, at most `limit` of them."""
    if limit <= 0:
        return []
    stmt = (
        select(RecordEntity)
        .where(RecordEntity.pinned.is_(False))
        .order_by(RecordEntity.updated_at.asc(), RecordEntity.id.asc())
        .limit(limit)
    )
    return list(session.scalars(stmt))


def apply_retention(session: Session, max_records: int) -> List[RecordEntity]:
    """
    Evict the lowest ranked unpinned rows until the count is back within bounds.

    Args:
        session (Session): Session holding the insertion's write transaction.
        max_records (int): The bound; must be positive.

    Returns:
        List[RecordEntity]: The evicted rows, in eviction order.

    Raises:
        ValueError: If max_records is not positive.
    """
    if max_records <= 0:
        raise ValueError(f"max_records must be positive, got {max_records}")
    overflow = count_records(session) - max_records
    evicted = eviction_candidates(session, overflow)
    for entity in evicted:
        session.delete(entity)
    if evicted:
        session.flush()
    return evicted


__all__ = ["apply_retention", "count_records", "eviction_candidates"]
