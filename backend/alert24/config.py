"""Settings for the monitoring service, read from the environment."""
import os
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Monitoring settings; every field maps to an upper-case env var."""

    # Directory holding alert24.db when no DATABASE_URL is given
    data_path: str = "/data"

    # Port uvicorn binds when run as a script
    web_port: int = 8000

    # Takes precedence over the SQLite file
    # e.g. postgresql+asyncpg://alert24:secret@db:5432/alert24
    database_url: str | None = None

    # Probe defaults, used when a check leaves the field empty
    user_agent: str = "Alert24-Monitor/1.0"
    default_timeout_seconds: int = 30
    default_check_interval_seconds: int = 300

    # Read the peer certificate for SSL checks (expiry, validity)
    ssl_inspect_certificates: bool = True

    # Dispatcher worker pool size
    max_concurrent_checks: int = 10

    # In-process periodic trigger for the dispatcher
    scheduler_enabled: bool = True
    scheduler_tick_seconds: int = 60

    log_level: str = "INFO"

    class Config:
        env_prefix = ""
        case_sensitive = False


settings = Settings()


def get_database_url(config: Settings | None = None) -> str:
    """SQLAlchemy async URL: DATABASE_URL when set, else SQLite under DATA_PATH."""
    config = config or settings
    if config.database_url:
        url = config.database_url
        # Hosted Postgres providers hand out postgres:// URLs
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgresql://") and "+asyncpg" not in url:
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    db_path = os.path.join(config.data_path, "alert24.db")
    return f"sqlite+aiosqlite:///{db_path}"


def is_postgresql(url: str) -> bool:
    """Check if a database URL points at PostgreSQL."""
    return url.startswith("postgresql")
