from .subject import SubjectModel

__all__ = [
    "SubjectModel",
]
