"""Abstract interface (port) for the remote subjects API."""

from abc import ABC, abstractmethod

from subject_sync.application.schemas.subject import (
    BulkDeleteResult,
    DeleteResult,
    ImportResult,
    SubjectCreate,
    SubjectUpdate,
)
from subject_sync.domain.entities import Subject


class SubjectApi(ABC):
    """Port for remote subject persistence, implemented in the infrastructure layer.

    Every method raises on failure; the raised exception's message is what
    the user ends up seeing after a rollback.
    """

    @abstractmethod
    async def list_subjects(self, count: int | None = None) -> list[Subject]:
        """Fetch the owner's subjects, newest first."""
        ...

    @abstractmethod
    async def create(self, payload: SubjectCreate) -> Subject:
        """Create a subject; the server assigns its id."""
        ...

    @abstractmethod
    async def update(self, subject_id: str, patch: SubjectUpdate) -> Subject:
        """Update a subject; raises when it does not exist."""
        ...

    @abstractmethod
    async def delete(self, subject_id: str) -> DeleteResult:
        """Delete a subject; raises when it does not exist."""
        ...

    @abstractmethod
    async def delete_many(self, subject_ids: list[str]) -> BulkDeleteResult:
        """Delete several subjects at once."""
        ...

    @abstractmethod
    async def import_subjects(self, payloads: list[SubjectCreate]) -> ImportResult:
        """Create many subjects, skipping duplicates."""
        ...
