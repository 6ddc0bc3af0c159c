"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from subject_sync.presentation.api.v1.endpoints.health import router as health_router
from subject_sync.presentation.api.v1.endpoints.subjects import router as subjects_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(subjects_router)
