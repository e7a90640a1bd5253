"""Status overview schemas for dashboard."""
from typing import List, Optional
from pydantic import BaseModel


class JobSummary(BaseModel):
    """Current state of one monitored job path."""
    path: str
    status: str  # success, failure
    overdue: bool
    last_report: str  # RFC 3339
    next_expected: Optional[str] = None


class StatusOverview(BaseModel):
    """Overview of every job path that has reported."""
    total_jobs: int
    jobs_succeeding: int
    jobs_failing: int
    jobs_overdue: int
    jobs: List[JobSummary]
