from .subject_repository import SQLAlchemySubjectRepository

__all__ = [
    "SQLAlchemySubjectRepository",
]
