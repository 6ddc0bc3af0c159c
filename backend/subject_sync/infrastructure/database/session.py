"""Async engine, session factory and the per-request session dependency."""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from subject_sync.config import get_settings

logger = logging.getLogger(__name__)

_ASYNC_DRIVERS = {
    "sqlite://": "sqlite+aiosqlite://",
    "postgresql://": "postgresql+asyncpg://",
}


def to_async_url(url: str) -> str:
    """Swap a plain ``sqlite://`` or ``postgresql://`` URL for its async driver."""
    for plain, driver in _ASYNC_DRIVERS.items():
        if url.startswith(plain):
            return driver + url[len(plain):]
    return url


def build_engine(database_url: str) -> AsyncEngine:
    """Create the async engine for ``database_url``.

    An in-memory SQLite database lives inside a single connection, so it
    gets a StaticPool that hands every session that same connection.
    """
    url = to_async_url(database_url)
    if url.startswith("sqlite") and ":memory:" in url:
        return create_async_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(url, pool_pre_ping=not url.startswith("sqlite"))


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(get_settings().database_url)
async_session_factory = build_session_factory(engine)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency; commits when the request succeeds, rolls back otherwise."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            logger.debug("Rolling back request session", exc_info=True)
            await session.rollback()
            raise
