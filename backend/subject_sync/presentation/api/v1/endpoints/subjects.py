"""Subject CRUD, bulk delete and import endpoints.

Every route is scoped to the caller's ``X-Owner-Id``; a subject owned by
someone else behaves exactly like a missing one.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from subject_sync.application.schemas.subject import (
    BulkDeleteRequest,
    INVALID_ID_MESSAGE,
    BulkDeleteResult,
    DeleteResult,
    ImportResult,
    SubjectCreate,
    SubjectResponse,
    SubjectUpdate,
    is_subject_id,
)
from subject_sync.application.services import SubjectService
from subject_sync.domain.exceptions import (
    EntityNotFoundError,
    SubjectLimitError,
    SubjectValidationError,
)
from subject_sync.infrastructure.dependencies import get_owner_id, get_subject_service

router = APIRouter(prefix="/subjects", tags=["Subjects"])


def _to_response(subject) -> SubjectResponse:
    return SubjectResponse.model_validate(subject, from_attributes=True)


def _check_subject_id(subject_id: str) -> None:
    if not is_subject_id(subject_id):
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=INVALID_ID_MESSAGE)


@router.get("", response_model=list[SubjectResponse])
async def list_subjects(
    count: int | None = Query(None, ge=1, le=500, description="Maximum number of subjects"),
    owner_id: str = Depends(get_owner_id),
    service: SubjectService = Depends(get_subject_service),
) -> list[SubjectResponse]:
    """Newest first."""
    subjects = await service.list_subjects(owner_id, limit=count)
    return [_to_response(s) for s in subjects]


@router.get("/{subject_id}", response_model=SubjectResponse)
async def get_subject(
    subject_id: str,
    owner_id: str = Depends(get_owner_id),
    service: SubjectService = Depends(get_subject_service),
) -> SubjectResponse:
    _check_subject_id(subject_id)
    try:
        subject = await service.get_subject(subject_id, owner_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return _to_response(subject)


@router.post("", response_model=SubjectResponse, status_code=status.HTTP_201_CREATED)
async def create_subject(
    data: SubjectCreate,
    owner_id: str = Depends(get_owner_id),
    service: SubjectService = Depends(get_subject_service),
) -> SubjectResponse:
    try:
        subject = await service.create_subject(data, owner_id)
    except SubjectLimitError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except SubjectValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return _to_response(subject)


@router.post("/find-or-create", response_model=SubjectResponse)
async def find_or_create_subject(
    data: SubjectCreate,
    owner_id: str = Depends(get_owner_id),
    service: SubjectService = Depends(get_subject_service),
) -> SubjectResponse:
    """Return the existing subject with the same name and birth moment, or create one."""
    try:
        subject = await service.find_or_create_subject(data, owner_id)
    except SubjectLimitError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except SubjectValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return _to_response(subject)


@router.post("/bulk-delete", response_model=BulkDeleteResult)
async def bulk_delete_subjects(
    data: BulkDeleteRequest,
    owner_id: str = Depends(get_owner_id),
    service: SubjectService = Depends(get_subject_service),
) -> BulkDeleteResult:
    try:
        count = await service.delete_subjects(data.ids, owner_id)
    except SubjectValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return BulkDeleteResult(count=count)


@router.post("/import", response_model=ImportResult)
async def import_subjects(
    rows: list[dict[str, Any]] = Body(...),
    owner_id: str = Depends(get_owner_id),
    service: SubjectService = Depends(get_subject_service),
) -> ImportResult:
    """Rows are validated one by one; invalid rows are reported, not rejected wholesale."""
    return await service.import_subjects(rows, owner_id)


@router.put("/{subject_id}", response_model=SubjectResponse)
async def update_subject(
    subject_id: str,
    data: SubjectUpdate,
    owner_id: str = Depends(get_owner_id),
    service: SubjectService = Depends(get_subject_service),
) -> SubjectResponse:
    """The path id wins over any id in the body."""
    _check_subject_id(subject_id)
    data = data.model_copy(update={"id": subject_id})
    try:
        subject = await service.update_subject(data, owner_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SubjectValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return _to_response(subject)


@router.delete("/{subject_id}", response_model=DeleteResult)
async def delete_subject(
    subject_id: str,
    owner_id: str = Depends(get_owner_id),
    service: SubjectService = Depends(get_subject_service),
) -> DeleteResult:
    _check_subject_id(subject_id)
    try:
        deleted_id = await service.delete_subject(subject_id, owner_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return DeleteResult(id=deleted_id)
