"""Services for storing and querying reports."""
from .record_store import insert_record, get_latest_records, get_overdue_records

__all__ = ["insert_record", "get_latest_records", "get_overdue_records"]
