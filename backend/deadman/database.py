"""Database setup and session management.

Records live in a file-backed SQLite database. Set DATABASE_URL to use a
different file:
    sqlite+aiosqlite:///path/to/deadman.db
"""
import logging
import os
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from .config import get_database_url, get_sqlite_path

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()


def create_engine_for(url: str, **engine_kwargs) -> AsyncEngine:
    """Create an async engine configured for concurrent SQLite access."""
    engine = create_async_engine(
        url,
        echo=False,
        future=True,
        pool_pre_ping=True,
        connect_args={"timeout": 30},  # Wait up to 30 seconds for locks
        **engine_kwargs,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        """Configure SQLite for concurrent appends and reads."""
        cursor = dbapi_connection.cursor()
        # WAL mode allows concurrent reads during writes
        cursor.execute("PRAGMA journal_mode=WAL")
        # Wait up to 30 seconds for locks before failing
        cursor.execute("PRAGMA busy_timeout=30000")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.close()

    return engine


_database_url = get_database_url()
engine = create_engine_for(_database_url)

# Session factory
async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncSession:
    """Dependency to get database session."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()


async def migrate(target: AsyncEngine) -> None:
    """Create the schema if it does not exist yet. Safe to run repeatedly."""
    # Register models with the metadata
    from . import models  # noqa: F401

    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db():
    """Initialize database - ensure the data directory exists and create tables."""
    db_path = get_sqlite_path(_database_url)
    if db_path:
        db_dir = os.path.dirname(os.path.abspath(db_path))
        os.makedirs(db_dir, exist_ok=True)

    await migrate(engine)
    logger.info(f"Database ready at {db_path or _database_url}")


async def close_db():
    """Close database connections."""
    await engine.dispose()
