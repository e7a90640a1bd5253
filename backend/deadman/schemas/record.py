"""Record schema - the heartbeat report on the wire and its derived state."""
from datetime import datetime
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_serializer, field_validator

from ..models import RecordRow
from ..utils.clock import EPOCH, Clock, utc_now
from ..utils.parsing import (
    Status,
    format_timestamp,
    get_next_from_duration,
    parse_timestamp,
    status_from_string,
)


class RecordDecodeError(ValueError):
    """A JSON document or stored row could not be decoded into a Record."""

    def __init__(self, field: Optional[str], message: str):
        self.field = field
        self.message = message
        where = f"field '{field}'" if field else "document"
        super().__init__(f"Invalid record {where}: {message}")


class Record(BaseModel):
    """One reported heartbeat for a job path.

    ``id`` is 0 until the record has been stored. ``next`` is the deadline
    for the following report, or None when no deadline is tracked.
    """
    id: int = 0
    path: str = Field(..., min_length=1)
    status: Status = Status.SUCCESS
    ts: datetime = Field(default_factory=utc_now)
    next: Optional[datetime] = None
    logs: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _classify_status(cls, value):
        if isinstance(value, str) and not isinstance(value, Status):
            return status_from_string(value)
        return value

    @field_validator("ts", "next", mode="before")
    @classmethod
    def _parse_rfc3339(cls, value):
        if value is None:
            return None
        parsed = parse_timestamp(value)
        if parsed is None:
            raise ValueError("expected an RFC 3339 timestamp")
        return parsed

    @field_serializer("ts", "next")
    def _format_rfc3339(self, value: Optional[datetime]) -> Optional[str]:
        if value is None:
            return None
        return format_timestamp(value)


def is_overdue(record: Record, now: Clock = utc_now) -> bool:
    """True once the record's ``next`` deadline has been reached."""
    if record.next is None:
        return False
    return now() >= record.next


def from_query(
    path: str,
    default_status: Status,
    params: Mapping[str, str],
    now: Clock = utc_now,
) -> Record:
    """Build an unsaved Record from report query parameters.

    Recognised parameters are ``ts`` (RFC 3339), ``next`` (a duration such
    as ``15m``, relative to ``ts``) and ``status``. Unparseable values fall
    back to the current time, no deadline and ``default_status``.
    """
    ts = parse_timestamp(params.get("ts")) or now()
    status = status_from_string(params["status"]) if "status" in params else default_status
    return Record(
        id=0,
        path=path,
        status=status,
        ts=ts,
        next=get_next_from_duration(ts, params.get("next", "")),
        logs=None,
    )


def to_json(record: Record) -> str:
    return record.model_dump_json()


def parse_json(document: str | bytes) -> Record:
    """Decode a JSON document into a Record.

    Raises:
        RecordDecodeError: naming the first offending field
    """
    try:
        return Record.model_validate_json(document)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error.get("loc", ())) or None
        raise RecordDecodeError(field, error.get("msg", "invalid value")) from e


def record_to_row(record: Record) -> RecordRow:
    """Map a Record onto a row; unsaved records leave ``id`` to the database."""
    return RecordRow(
        id=record.id or None,
        path=record.path,
        status=record.status.value,
        ts=format_timestamp(record.ts),
        next=format_timestamp(record.next) if record.next is not None else None,
        logs=record.logs,
    )


def record_from_row(row: RecordRow) -> Record:
    """Map a stored row back to a Record.

    A stored ``ts`` that cannot be parsed becomes the epoch rather than
    failing the whole row.
    """
    if not row.path:
        raise RecordDecodeError("path", "stored row has no path")

    return Record(
        id=row.id or 0,
        path=row.path,
        status=status_from_string(row.status),
        ts=parse_timestamp(row.ts) or EPOCH,
        next=parse_timestamp(row.next) if row.next else None,
        logs=row.logs,
    )
