"""Report ingestion endpoints - jobs check in here."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.record import Record, from_query
from ..services.record_store import insert_record
from ..utils.clock import Clock, get_clock
from ..utils.db_utils import StorageError
from ..utils.parsing import Status

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/report", tags=["reports"])


def first_query_params(request: Request) -> dict[str, str]:
    """Query parameters with the first occurrence of each key winning."""
    params: dict[str, str] = {}
    for key, value in request.query_params.multi_items():
        params.setdefault(key, value)
    return params


def normalize_path(path: str) -> str:
    """Job paths always start with a single slash, e.g. ``/project/job``."""
    return "/" + path.strip("/")


async def _store(db: AsyncSession, record: Record) -> Record:
    try:
        stored = await insert_record(db, record)
    except StorageError as e:
        logger.error(f"Failed to store report for {record.path}: {e}")
        raise HTTPException(status_code=503, detail="Storage unavailable")

    logger.info(
        f"Report stored: {stored.path} status={stored.status.value} "
        f"next={stored.next.isoformat() if stored.next else '-'}"
    )
    return stored


@router.get("/{path:path}", response_model=Record, status_code=201)
async def report_get(
    path: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    now: Clock = Depends(get_clock),
):
    """Record a check-in; without a ``status`` parameter it counts as success.

    Query parameters: ``status``, ``ts`` (RFC 3339), ``next`` (e.g. ``30m``).
    """
    record = from_query(normalize_path(path), Status.SUCCESS, first_query_params(request), now)
    return await _store(db, record)


@router.post("/{path:path}", response_model=Record, status_code=201)
async def report_post(
    path: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    now: Clock = Depends(get_clock),
):
    """Record a check-in with the request body attached as logs.

    Without a ``status`` parameter the report counts as a failure, so a job
    can simply post its error output.
    """
    record = from_query(normalize_path(path), Status.FAILURE, first_query_params(request), now)

    body = await request.body()
    if body:
        record = record.model_copy(update={"logs": body.decode("utf-8", errors="replace")})

    return await _store(db, record)
