"""Status overview API for dashboard."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.record import RecordDecodeError, is_overdue
from ..schemas.status import StatusOverview, JobSummary
from ..services.record_store import get_latest_records
from ..utils.clock import Clock, get_clock
from ..utils.db_utils import StorageError
from ..utils.parsing import Status, format_timestamp

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/status", tags=["status"])


@router.get("/overview", response_model=StatusOverview)
async def get_status_overview(
    db: AsyncSession = Depends(get_db),
    now: Clock = Depends(get_clock),
):
    """Get dashboard overview data."""
    try:
        records = await get_latest_records(db)
    except StorageError as e:
        logger.error(f"Failed to build status overview: {e}")
        raise HTTPException(status_code=503, detail="Storage unavailable")
    except RecordDecodeError as e:
        logger.error(f"Stored record could not be decoded: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    jobs = []
    counts = {Status.SUCCESS: 0, Status.FAILURE: 0}
    overdue_count = 0

    for record in records:
        overdue = is_overdue(record, now)
        counts[record.status] += 1
        if overdue:
            overdue_count += 1

        jobs.append(JobSummary(
            path=record.path,
            status=record.status.value,
            overdue=overdue,
            last_report=format_timestamp(record.ts),
            next_expected=format_timestamp(record.next) if record.next else None,
        ))

    return StatusOverview(
        total_jobs=len(records),
        jobs_succeeding=counts[Status.SUCCESS],
        jobs_failing=counts[Status.FAILURE],
        jobs_overdue=overdue_count,
        jobs=jobs,
    )
