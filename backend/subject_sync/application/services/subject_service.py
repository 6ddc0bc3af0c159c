"""Application service (use case) for Subject persistence operations."""

import logging
from uuid import uuid4

from pydantic import ValidationError

from subject_sync.application.interfaces import SubjectRepository
from subject_sync.application.schemas.subject import (
    ImportResult,
    SubjectCreate,
    SubjectUpdate,
    format_validation_errors,
)
from subject_sync.domain.entities import Subject
from subject_sync.domain.exceptions import (
    EntityNotFoundError,
    SubjectLimitError,
    SubjectValidationError,
    get_error_message,
)

logger = logging.getLogger(__name__)


def parse_birth_datetime(birth_date: str | None, birth_time: str | None) -> str:
    """Combine a normalised birth date and optional time into a UTC ISO stamp.

    A missing time means midnight UTC.
    """
    if not birth_date:
        raise SubjectValidationError("Invalid birth date", ["birthDate: Required"])
    day = birth_date.split("T")[0]
    return f"{day}T{birth_time or '00:00:00'}.000Z"


def duplicate_signature(name: str, birth_datetime: str) -> str:
    return f"{name.lower().strip()}|{birth_datetime}"


class SubjectService:
    """Orchestrates subject CRUD, plan limits and imports. Depends on the repository port (DI)."""

    def __init__(self, repository: SubjectRepository, *, max_subjects: int = 0):
        self._repository = repository
        self._max_subjects = max_subjects

    async def list_subjects(self, owner_id: str, *, limit: int | None = None) -> list[Subject]:
        return await self._repository.get_all(owner_id, limit=limit)

    async def get_subject(self, subject_id: str, owner_id: str) -> Subject:
        subject = await self._repository.get_by_id(subject_id, owner_id)
        if subject is None:
            raise EntityNotFoundError("Subject", subject_id)
        return subject

    async def create_subject(self, data: SubjectCreate, owner_id: str) -> Subject:
        if self._max_subjects and await self._repository.count(owner_id) >= self._max_subjects:
            raise SubjectLimitError(self._max_subjects)
        subject = self._build_subject(data)
        created = await self._repository.create(subject, owner_id)
        logger.info("Created subject %s for owner %s", created.id, owner_id)
        return created

    async def find_or_create_subject(self, data: SubjectCreate, owner_id: str) -> Subject:
        """Return the owner's subject with the same name and birth moment, or create it."""
        birth_datetime = parse_birth_datetime(data.birth_date, data.birth_time)
        signature = duplicate_signature(data.name, birth_datetime)
        for existing in await self._repository.get_all(owner_id):
            if duplicate_signature(existing.name, existing.birth_datetime) == signature:
                return existing
        return await self.create_subject(data, owner_id)

    async def update_subject(self, data: SubjectUpdate, owner_id: str) -> Subject:
        existing = await self.get_subject(data.id, owner_id)

        birth_datetime = existing.birth_datetime
        if data.birth_date:
            birth_datetime = parse_birth_datetime(data.birth_date, data.birth_time)

        provided = data.model_fields_set
        updated = existing.with_changes(
            name=data.name,
            birth_datetime=birth_datetime,
            city=data.city,
            nation=data.nation,
            latitude=data.latitude if data.latitude is not None else existing.latitude,
            longitude=data.longitude if data.longitude is not None else existing.longitude,
            timezone=data.timezone,
            rodens_rating=data.rodens_rating if "rodens_rating" in provided else existing.rodens_rating,
            tags=data.tags if data.tags else existing.tags,
            notes=data.notes if data.notes is not None else existing.notes,
        )
        return await self._repository.update(updated, owner_id)

    async def delete_subject(self, subject_id: str, owner_id: str) -> str:
        deleted = await self._repository.delete(subject_id, owner_id)
        if not deleted:
            raise EntityNotFoundError("Subject", subject_id)
        logger.info("Deleted subject %s for owner %s", subject_id, owner_id)
        return subject_id

    async def delete_subjects(self, subject_ids: list[str], owner_id: str) -> int:
        if not subject_ids:
            raise SubjectValidationError("Invalid subject IDs", ["ids: At least one ID is required"])
        return await self._repository.delete_many(subject_ids, owner_id)

    async def import_subjects(self, rows: list[dict], owner_id: str) -> ImportResult:
        """Create many subjects, skipping name + birth moment duplicates.

        Each row is validated on its own; a bad row is counted as failed
        and reported without stopping the import.
        """
        result = ImportResult()
        existing = await self._repository.get_all(owner_id)
        signatures = {duplicate_signature(s.name, s.birth_datetime) for s in existing}
        remaining = self._max_subjects - len(existing) if self._max_subjects else None

        for index, row in enumerate(rows, start=1):
            try:
                try:
                    data = SubjectCreate.model_validate(row)
                except ValidationError as exc:
                    raise SubjectValidationError(
                        f"Subject #{index}", format_validation_errors(exc)
                    ) from exc
                birth_datetime = parse_birth_datetime(data.birth_date, data.birth_time)
                signature = duplicate_signature(data.name, birth_datetime)
                if signature in signatures:
                    result.skipped += 1
                    continue
                if remaining is not None and remaining <= 0:
                    result.failed += 1
                    result.errors.append("Subject limit reached. Upgrade to import more subjects.")
                    continue

                await self._repository.create(self._build_subject(data), owner_id)
                signatures.add(signature)
                if remaining is not None:
                    remaining -= 1
                result.created += 1
            except (SubjectValidationError, ValueError) as exc:
                result.failed += 1
                result.errors.append(get_error_message(exc))

        logger.info(
            "Import for owner %s: created=%d skipped=%d failed=%d",
            owner_id, result.created, result.skipped, result.failed,
        )
        return result

    @staticmethod
    def _build_subject(data: SubjectCreate) -> Subject:
        return Subject(
            id=str(uuid4()),
            name=data.name,
            birth_datetime=parse_birth_datetime(data.birth_date, data.birth_time),
            city=data.city,
            nation=data.nation,
            latitude=data.latitude,
            longitude=data.longitude,
            timezone=data.timezone,
            rodens_rating=data.rodens_rating,
            tags=tuple(data.tags) if data.tags is not None else None,
            notes=data.notes,
        )
