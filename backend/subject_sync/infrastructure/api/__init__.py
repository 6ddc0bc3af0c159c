"""Remote subjects API infrastructure package."""

from .subject_api_client import HttpSubjectApiClient

__all__ = ["HttpSubjectApiClient"]
