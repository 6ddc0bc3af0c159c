from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Subject Sync API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    database_url: str = "sqlite:///./subjects.db"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Remote subjects API (consumed by the client-side sync layer)
    api_base_url: str = "http://localhost:8020"
    api_token: str = ""
    api_timeout_seconds: float = 30.0

    # Subject list query
    subjects_list_count: int = 50

    # Seconds before a cached subject list is considered stale
    subjects_stale_time: float = 60.0

    # Ownership & plan limits (0 = unlimited)
    default_owner_id: str = "local-user"
    max_subjects_per_owner: int = 0

    # Per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine SQL statements
    log_level_http: str = "WARNING"          # httpx / httpcore outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_sync: str = "INFO"             # Query cache + mutation coordinator

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance; reads .env once."""
    return Settings()
