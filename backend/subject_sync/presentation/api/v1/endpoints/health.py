"""Liveness check; touches neither the database nor the remote API."""

from fastapi import APIRouter

from subject_sync.config import get_settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict:
    settings = get_settings()
    return {
        "status": "healthy",
        "app": settings.app_title,
        "version": settings.app_version,
        "environment": settings.app_env,
    }
