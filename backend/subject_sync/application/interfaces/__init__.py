from .subject_api import SubjectApi
from .subject_repository import SubjectRepository

__all__ = [
    "SubjectApi",
    "SubjectRepository",
]
