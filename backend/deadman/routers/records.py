"""Record query and JSON ingestion endpoints."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.record import Record, RecordDecodeError, parse_json
from ..services.record_store import get_latest_records, get_overdue_records, insert_record
from ..utils.clock import Clock, get_clock
from ..utils.db_utils import StorageError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/records", tags=["records"])


@router.get("", response_model=List[Record])
async def list_latest_records(db: AsyncSession = Depends(get_db)):
    """Latest record for every job path, most recent first."""
    try:
        return await get_latest_records(db)
    except StorageError as e:
        logger.error(f"Failed to fetch latest records: {e}")
        raise HTTPException(status_code=503, detail="Storage unavailable")
    except RecordDecodeError as e:
        logger.error(f"Stored record could not be decoded: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/overdue", response_model=List[Record])
async def list_overdue_records(
    db: AsyncSession = Depends(get_db),
    now: Clock = Depends(get_clock),
):
    """Latest records whose next expected report has not arrived in time."""
    try:
        return await get_overdue_records(db, now)
    except StorageError as e:
        logger.error(f"Failed to fetch overdue records: {e}")
        raise HTTPException(status_code=503, detail="Storage unavailable")
    except RecordDecodeError as e:
        logger.error(f"Stored record could not be decoded: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("", response_model=Record, status_code=201)
async def create_record(request: Request, db: AsyncSession = Depends(get_db)):
    """Store a complete record sent as JSON. Any ``id`` in the body is ignored."""
    try:
        record = parse_json(await request.body())
    except RecordDecodeError as e:
        raise HTTPException(status_code=422, detail={"field": e.field, "message": e.message})

    try:
        stored = await insert_record(db, record.model_copy(update={"id": 0}))
    except StorageError as e:
        logger.error(f"Failed to store record for {record.path}: {e}")
        raise HTTPException(status_code=503, detail="Storage unavailable")

    logger.info(f"Record stored: {stored.path} status={stored.status.value}")
    return stored
