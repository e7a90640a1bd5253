"""Record store - append reports and read the latest state per job path.

Every operation is a single statement against the ``records`` table. Writes
are pure appends, so concurrent requests need no locking of their own.
"""
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from ..models import RecordRow
from ..schemas.record import Record, is_overdue, record_from_row, record_to_row
from ..utils.clock import Clock, utc_now
from ..utils.db_utils import storage_errors


async def insert_record(db: AsyncSession, record: Record) -> Record:
    """Append ``record`` and return it with its assigned id.

    Raises:
        StorageError: If the insert or commit fails
    """
    row = record_to_row(record)
    async with storage_errors("insert record", db):
        db.add(row)
        await db.flush()
        row_id = row.id
        await db.commit()
    return record.model_copy(update={"id": row_id})


def _latest_per_path_query():
    """Newest row of every path, newest paths first.

    ``row_number()`` picks exactly one row per path even when two rows share
    the maximum timestamp; which one wins is arbitrary.
    """
    ranked = select(
        RecordRow,
        func.row_number()
        .over(partition_by=RecordRow.path, order_by=RecordRow.ts.desc())
        .label("rank"),
    ).subquery()
    latest = aliased(RecordRow, ranked)
    return (
        select(latest)
        .where(ranked.c.rank == 1)
        .order_by(ranked.c.ts.desc())
    )


async def get_latest_records(db: AsyncSession) -> List[Record]:
    """Return the most recent record for every distinct path.

    Raises:
        StorageError: If the query fails
        RecordDecodeError: If a stored row has no path
    """
    async with storage_errors("fetch latest records", db):
        result = await db.execute(_latest_per_path_query())
        rows = result.scalars().all()
    return [record_from_row(row) for row in rows]


async def get_overdue_records(db: AsyncSession, now: Clock = utc_now) -> List[Record]:
    """Latest records whose next-report deadline has passed."""
    records = await get_latest_records(db)
    return [record for record in records if is_overdue(record, now)]
