"""FastAPI application factory for the subjects API."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from subject_sync.config import get_settings
from subject_sync.infrastructure.database import Base, engine
from subject_sync.infrastructure.logging.log_config import setup_logging
from subject_sync.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging and create missing tables; dispose the engine on shutdown."""
    setup_logging()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Subjects database ready at %s", engine.url.render_as_string(hide_password=True))

    try:
        yield
    finally:
        await engine.dispose()


def create_app() -> FastAPI:
    """Build the app: CORS for the configured origins plus every /api route."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type", "X-Owner-Id"],
    )
    app.include_router(api_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    # log_config=None keeps uvicorn from replacing the levels set in lifespan
    uvicorn.run("subject_sync.main:app", host="0.0.0.0", port=8020, reload=True, log_config=None)
