import os
import tempfile
from datetime import datetime, timezone

# Keep the application's default database out of /data during tests
os.environ.setdefault("DATA_PATH", tempfile.mkdtemp(prefix="deadman-tests-"))

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from deadman import models  # noqa: F401
from deadman.database import Base, create_engine_for, get_db, migrate
from deadman.main import app
from deadman.utils.clock import fixed_clock, get_clock

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Async engine on a fresh, migrated SQLite file."""
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'records.db'}")
    await migrate(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


def _override_app_db(db_file):
    # NullPool so no connection outlives the loop that opened it
    engine = create_engine_for(f"sqlite+aiosqlite:///{db_file}", poolclass=NullPool)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: fixed_clock(NOW)


@pytest.fixture
def api_db_file(tmp_path):
    """SQLite file with the schema in place, for seeding rows directly."""
    db_file = tmp_path / "api.db"

    # Create the schema synchronously; the app's event loop lives in the client
    sync_engine = create_engine(f"sqlite:///{db_file}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    return db_file


@pytest.fixture
def client(api_db_file):
    """
    TestClient backed by a temporary database and a clock frozen at NOW.
    """
    _override_app_db(api_db_file)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def unmigrated_client(tmp_path):
    """TestClient whose database has no schema, so every query fails."""
    _override_app_db(tmp_path / "empty.db")
    yield TestClient(app)
    app.dependency_overrides.clear()
