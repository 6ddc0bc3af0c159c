from .subject import (
    RoddenRating,
    SubjectCreate,
    SubjectUpdate,
    SubjectResponse,
    DeleteResult,
    BulkDeleteRequest,
    BulkDeleteResult,
    ImportResult,
    format_validation_errors,
    normalize_birth_date,
    normalize_birth_time,
)

__all__ = [
    "RoddenRating",
    "SubjectCreate",
    "SubjectUpdate",
    "SubjectResponse",
    "DeleteResult",
    "BulkDeleteRequest",
    "BulkDeleteResult",
    "ImportResult",
    "format_validation_errors",
    "normalize_birth_date",
    "normalize_birth_time",
]
