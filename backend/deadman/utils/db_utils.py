"""Database utility functions."""
from contextlib import asynccontextmanager, suppress
from typing import AsyncIterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession


class StorageError(Exception):
    """Any failure of the storage layer (connection, constraint, query).

    The originating SQLAlchemy exception is kept as ``__cause__``.
    """


@asynccontextmanager
async def storage_errors(operation: str, db: Optional[AsyncSession] = None) -> AsyncIterator[None]:
    """Translate SQLAlchemy failures inside the block into ``StorageError``.

    Errors are surfaced once; nothing is retried here. When a session is
    given it is rolled back first so the caller can keep using it.

    Args:
        operation: Short description used in the error message
        db: Session to roll back on failure
    """
    try:
        yield
    except SQLAlchemyError as e:
        if db is not None:
            # The original failure is the one reported
            with suppress(SQLAlchemyError):
                await db.rollback()
        raise StorageError(f"{operation} failed: {e}") from e
