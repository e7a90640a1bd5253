"""Application configuration from environment variables."""
import os
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Directory for the SQLite database file (used if DATABASE_URL not set)
    data_path: str = "/data"

    # Database URL (optional - overrides the default SQLite file if set)
    # Format: sqlite+aiosqlite:///path/to/deadman.db
    database_url: str | None = None

    # Web server bind address and port
    host: str = "0.0.0.0"
    web_port: int = 8000

    # Root log level: debug, info, warning, error
    log_level: str = "info"

    class Config:
        env_prefix = ""
        case_sensitive = False


settings = Settings()


def get_database_url() -> str:
    """Get the database URL.

    Priority:
    1. DATABASE_URL environment variable
    2. Default SQLite file in DATA_PATH
    """
    if settings.database_url:
        url = settings.database_url
        # Plain sqlite URLs need the async driver
        if url.startswith("sqlite://"):
            url = url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return url

    db_path = os.path.join(settings.data_path, "deadman.db")
    return f"sqlite+aiosqlite:///{db_path}"


def get_sqlite_path(url: str) -> str | None:
    """Return the filesystem path of a SQLite URL, or None for other URLs."""
    prefix = "sqlite+aiosqlite:///"
    if not url.startswith(prefix):
        return None
    path = url[len(prefix):]
    if not path or path == ":memory:":
        return None
    return path
