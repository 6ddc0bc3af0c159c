"""FastAPI dependency injection: wires infrastructure to the application layer."""

from collections.abc import AsyncGenerator

import httpx
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from subject_sync.application.services import QueryCache, SubjectsController, SubjectService
from subject_sync.config import get_settings
from subject_sync.infrastructure.api import HttpSubjectApiClient
from subject_sync.infrastructure.database.repositories import SQLAlchemySubjectRepository
from subject_sync.infrastructure.database.session import get_db_session


async def get_owner_id(x_owner_id: str | None = Header(None)) -> str:
    """Owner of the request; falls back to the configured default owner."""
    owner_id = (x_owner_id or "").strip()
    return owner_id or get_settings().default_owner_id


async def get_subject_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[SubjectService, None]:
    """Provides a SubjectService instance with its repository wired up."""
    settings = get_settings()
    repository = SQLAlchemySubjectRepository(session)
    yield SubjectService(repository, max_subjects=settings.max_subjects_per_owner)


def get_subject_api_client(
    http_client: httpx.AsyncClient | None = None,
    *,
    owner_id: str | None = None,
) -> HttpSubjectApiClient:
    """Remote subjects API client configured from settings."""
    settings = get_settings()
    return HttpSubjectApiClient(
        base_url=settings.api_base_url,
        api_token=settings.api_token,
        timeout=settings.api_timeout_seconds,
        owner_id=owner_id,
        http_client=http_client,
    )


def build_subjects_controller(
    http_client: httpx.AsyncClient | None = None,
    *,
    cache: QueryCache | None = None,
    owner_id: str | None = None,
) -> SubjectsController:
    """Client-side controller talking to the configured subjects API."""
    api = get_subject_api_client(http_client, owner_id=owner_id)
    return SubjectsController(api, cache if cache is not None else QueryCache())
