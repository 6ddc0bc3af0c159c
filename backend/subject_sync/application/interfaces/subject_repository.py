"""Abstract repository interface (port) for Subject persistence."""

from abc import ABC, abstractmethod

from subject_sync.domain.entities import Subject


class SubjectRepository(ABC):
    """Port for subject persistence, implemented in the infrastructure layer.

    All lookups are scoped to an owner so one user can never see or touch
    another user's subjects.
    """

    @abstractmethod
    async def get_by_id(self, subject_id: str, owner_id: str) -> Subject | None:
        """Retrieve a single subject owned by ``owner_id``."""
        ...

    @abstractmethod
    async def get_all(self, owner_id: str, *, limit: int | None = None) -> list[Subject]:
        """Retrieve the owner's subjects ordered by creation date, newest first."""
        ...

    @abstractmethod
    async def count(self, owner_id: str) -> int:
        ...

    @abstractmethod
    async def create(self, subject: Subject, owner_id: str) -> Subject:
        """Persist a new subject and return it."""
        ...

    @abstractmethod
    async def update(self, subject: Subject, owner_id: str) -> Subject:
        """Update an existing subject."""
        ...

    @abstractmethod
    async def delete(self, subject_id: str, owner_id: str) -> bool:
        """Delete a subject. Returns True if deleted, False if not found."""
        ...

    @abstractmethod
    async def delete_many(self, subject_ids: list[str], owner_id: str) -> int:
        """Delete several subjects. Returns the number actually removed."""
        ...
