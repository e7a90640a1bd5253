"""Pydantic schemas for API request/response models."""
from .record import (
    Record,
    RecordDecodeError,
    from_query,
    is_overdue,
    parse_json,
    to_json,
    record_to_row,
    record_from_row,
)
from .status import (
    StatusOverview,
    JobSummary,
)

__all__ = [
    "Record",
    "RecordDecodeError",
    "from_query",
    "is_overdue",
    "parse_json",
    "to_json",
    "record_to_row",
    "record_from_row",
    "StatusOverview",
    "JobSummary",
]
