"""Per-category log levels driven by Settings.

Lets noisy libraries (SQLAlchemy statements, httpx/httpcore) be silenced
while the query cache and mutation coordinator log at DEBUG, or the other
way round.

Usage:
    from subject_sync.infrastructure.logging.log_config import setup_logging
    setup_logging()   # once, from the FastAPI lifespan or a script's entry point
"""

import logging
import sys

from subject_sync.config import Settings, get_settings

# Settings field → loggers it controls
LOGGER_CATEGORIES: dict[str, tuple[str, ...]] = {
    "log_level_sql": ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite"),
    "log_level_http": ("httpx", "httpcore"),
    "log_level_uvicorn": ("uvicorn", "uvicorn.access", "uvicorn.error"),
    "log_level_sync": (
        "QueryCache",
        "MutationCoordinator",
        "subject_sync.application.services",
    ),
}

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(settings: Settings | None = None) -> dict[str, int]:
    """Apply root and per-category levels; returns the level set for each logger."""
    settings = settings or get_settings()

    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level))
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
        root.addHandler(handler)

    applied: dict[str, int] = {}
    for field_name, logger_names in LOGGER_CATEGORIES.items():
        level = _parse_level(getattr(settings, field_name))
        for name in logger_names:
            logging.getLogger(name).setLevel(level)
            applied[name] = level

    logging.getLogger(__name__).debug(
        "Log levels: root=%s sql=%s http=%s uvicorn=%s sync=%s",
        settings.log_level,
        settings.log_level_sql,
        settings.log_level_http,
        settings.log_level_uvicorn,
        settings.log_level_sync,
    )
    return applied


def _parse_level(raw: str) -> int:
    """Level name → logging constant; unknown names fall back to INFO."""
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else logging.INFO
