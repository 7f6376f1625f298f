"""Application configuration via environment variables."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

from dotenv import load_dotenv
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL

# Load .env from project root (works regardless of CWD)
_project_root = Path(__file__).resolve().parents[2]
load_dotenv(_project_root / ".env")


class Settings(BaseSettings):
    """usercount configuration."""

    # Database (SQLite via aiosqlite)
    database_path: str = "usercount.db"
    database_url: str = ""  # Overrides database_path when set

    # Connection retry (open only, never queries)
    connect_retries: int = 3
    retry_backoff: float = 0.1  # seconds, multiplied by attempt number

    # Server
    host: str = "0.0.0.0"
    port: int = 6776
    cors_origins: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"  # DEBUG | INFO | WARNING | ERROR
    log_format: str = "text"  # "text" | "json"
    quiet_loggers: list[str] = ["aiosqlite", "sqlalchemy.engine", "httpx", "httpcore"]

    # Include driver error text in 500 response details
    debug: bool = False

    model_config = {"env_prefix": "UC_", "env_file": ".env"}

    def resolved_database_url(self) -> str | URL:
        """Database URL for serving requests and for `init-db`.

        ``database_url`` wins over ``database_path`` everywhere; a path URL
        requires the file to exist.
        """
        if self.database_url:
            return self.database_url
        return build_database_url(self.database_path)


def build_database_url(path: str | Path, create: bool = False) -> URL:
    """Build an aiosqlite URL for ``path``.

    SQLite silently creates missing files, so the URI ``mode`` parameter
    is used to make a missing file a connection failure unless
    ``create`` is requested.
    """
    mode = "rwc" if create else "rw"
    resolved = Path(path).expanduser().resolve().as_posix()
    # SQLite percent-decodes URI filenames.
    return URL.create(
        "sqlite+aiosqlite",
        database=f"file:{quote(resolved)}",
        query={"mode": mode, "uri": "true"},
    )


settings = Settings()
