"""Dialog and form state adapters driving the subject mutations.

Each dialog exposes ``open``, ``error`` and ``is_submitting`` and one entry
point (``on_confirm`` / ``on_submit``). A dialog only closes after the
coordinator reports a commit; on rollback it stays open with the error.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from subject_sync.application.schemas.subject import SubjectCreate, SubjectUpdate
from subject_sync.application.services.mutation_coordinator import OptimisticMutation
from subject_sync.application.services.subject_transforms import (
    PendingSubject,
    new_temp_id,
    subject_to_form_values,
)
from subject_sync.domain.entities import MutationRecord, Subject

ModelT = TypeVar("ModelT", bound=BaseModel)

CREATE_FORM_DEFAULTS: dict[str, Any] = {
    "name": "",
    "city": "",
    "nation": "",
    "birthDate": "",
    "birthTime": "",
    "latitude": None,
    "longitude": None,
    "timezone": "UTC",
    "rodens_rating": None,
    "tags": None,
}

EDIT_FORM_DEFAULTS: dict[str, Any] = {"id": "", **CREATE_FORM_DEFAULTS}


class SubjectFormState:
    """Raw form values plus per-field validation messages."""

    def __init__(self, defaults: dict[str, Any]):
        self._defaults = dict(defaults)
        self.values: dict[str, Any] = dict(defaults)
        self.field_errors: dict[str, list[str]] = {}

    def reset(self, values: dict[str, Any] | None = None) -> None:
        self.values = dict(values if values is not None else self._defaults)
        self.field_errors = {}

    def update(self, values: dict[str, Any]) -> None:
        self.values.update(values)

    def validate(self, schema: type[ModelT]) -> ModelT | None:
        """Validate current values; on failure fill ``field_errors`` and return None."""
        try:
            model = schema.model_validate(self.values)
        except ValidationError as exc:
            errors: dict[str, list[str]] = {}
            for error in exc.errors():
                loc = error.get("loc", ())
                field = str(loc[0]) if loc else "__root__"
                message = error.get("msg", "Invalid value")
                if message.startswith("Value error, "):
                    message = message[len("Value error, "):]
                errors.setdefault(field, []).append(message)
            self.field_errors = errors
            return None
        self.field_errors = {}
        return model

    @property
    def is_valid(self) -> bool:
        return not self.field_errors


class _DialogBase:
    def __init__(self, mutation: OptimisticMutation):
        self._mutation = mutation
        self.open = False
        self.error: str | None = None

    @property
    def mutation(self) -> OptimisticMutation:
        return self._mutation

    @property
    def is_submitting(self) -> bool:
        return self._mutation.is_pending

    def set_open(self, value: bool) -> None:
        self.open = value


class DeleteSubjectDialog(_DialogBase):
    """Confirm-delete dialog."""

    def __init__(self, mutation: OptimisticMutation):
        super().__init__(mutation)
        self.subject: Subject | None = None

    def show(self, subject: Subject) -> None:
        self.subject = subject
        self.error = None
        self.open = True

    async def on_confirm(self) -> MutationRecord | None:
        # A second click while the first delete is in flight is ignored
        if self.subject is None or self._mutation.is_pending:
            return None
        record = await self._mutation.mutate(self.subject.id)
        if record.committed:
            self.open = False
            self.subject = None
        else:
            self.error = record.error
        return record


class EditSubjectDialog(_DialogBase):
    """Edit dialog backed by a validated form."""

    def __init__(self, mutation: OptimisticMutation):
        super().__init__(mutation)
        self.subject: Subject | None = None
        self.form = SubjectFormState(EDIT_FORM_DEFAULTS)

    def show(self, subject: Subject) -> None:
        self.subject = subject
        self.error = None
        self.form.reset(subject_to_form_values(subject))
        self.open = True

    async def on_submit(self, values: dict[str, Any] | None = None) -> MutationRecord | None:
        if values:
            self.form.update(values)
        payload = self.form.validate(SubjectUpdate)
        if payload is None or self._mutation.is_pending:
            return None
        self.error = None
        record = await self._mutation.mutate(payload)
        if record.committed:
            self.open = False
            self.subject = None
        else:
            self.error = record.error
        return record


class CreateSubjectDialog(_DialogBase):
    """Create dialog; the placeholder gets a temporary id until the server answers."""

    def __init__(self, mutation: OptimisticMutation):
        super().__init__(mutation)
        self.form = SubjectFormState(CREATE_FORM_DEFAULTS)

    def show(self) -> None:
        self.error = None
        self.form.reset()
        self.open = True

    async def on_submit(self, values: dict[str, Any] | None = None) -> MutationRecord | None:
        if values:
            self.form.update(values)
        payload = self.form.validate(SubjectCreate)
        if payload is None or self._mutation.is_pending:
            return None
        self.error = None
        record = await self._mutation.mutate(PendingSubject(temp_id=new_temp_id(), data=payload))
        if record.committed:
            self.open = False
            self.form.reset()
        else:
            self.error = record.error
        return record
