"""Record model - one heartbeat report per row, append-only."""
from sqlalchemy import Column, Index, Integer, Text, text

from ..database import Base

# Same fixed-width RFC 3339 form the application writes; SQLite's %f stops at
# milliseconds, so the microsecond digits are padded with zeros
CURRENT_TS_SQL = text("(strftime('%Y-%m-%dT%H:%M:%f', 'now') || '000Z')")


class RecordRow(Base):
    """A persisted report for a monitored job path."""

    __tablename__ = "records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    path = Column(Text, nullable=False)  # e.g. /project/job
    status = Column(Text, server_default=text("'success'"))  # success, failure
    ts = Column(Text, server_default=CURRENT_TS_SQL)  # RFC 3339, UTC
    next = Column(Text, nullable=True)  # RFC 3339 deadline for the next report
    logs = Column(Text, nullable=True)  # Free-text payload, e.g. command output

    __table_args__ = (
        Index("ix_records_path_ts", "path", "ts"),
    )
