from .query_cache import QueryCache
from .mutation_coordinator import OptimisticMutation
from .dialog_state import (
    CreateSubjectDialog,
    DeleteSubjectDialog,
    EditSubjectDialog,
    SubjectFormState,
)
from .subjects_controller import SubjectsController
from .subject_service import SubjectService

__all__ = [
    "QueryCache",
    "OptimisticMutation",
    "CreateSubjectDialog",
    "DeleteSubjectDialog",
    "EditSubjectDialog",
    "SubjectFormState",
    "SubjectsController",
    "SubjectService",
]
