"""Time source used wherever "now" matters."""
from datetime import datetime, timezone
from typing import Callable

# A clock is any zero-argument callable returning an aware UTC datetime.
Clock = Callable[[], datetime]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Current wall-clock time in UTC."""
    return datetime.now(timezone.utc)


def get_clock() -> Clock:
    """Dependency providing the time source; tests override it."""
    return utc_now


def fixed_clock(at: datetime) -> Clock:
    """Return a clock that always reports ``at``."""
    return lambda: at
