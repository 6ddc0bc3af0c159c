"""Domain-specific exceptions, free of framework imports."""

from typing import Any

UNKNOWN_ERROR_MESSAGE = "Unknown error"


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class SubjectValidationError(Exception):
    """Raised when subject data fails validation.

    Carries the individual field messages (``"path: message"``) so callers
    can surface them next to the offending inputs.
    """

    def __init__(self, message: str, errors: list[str] | None = None):
        self.message = message
        self.errors = list(errors or [])
        detail = f"{message}: {'; '.join(self.errors)}" if self.errors else message
        super().__init__(detail)


class SubjectLimitError(Exception):
    """Raised when an owner has reached the subject quota of their plan."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            f"Subject limit reached ({limit}). Upgrade your plan to add more subjects."
        )


class RemoteApiError(Exception):
    """Raised when the remote subjects API rejects a request.

    ``status_code`` is 0 for transport failures (timeouts, refused
    connections) where no HTTP response was received.
    """

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


def get_error_message(error: Any) -> str:
    """Normalise anything raised by a remote call into a displayable message.

    Exceptions yield their message, strings are used as-is, anything else
    becomes ``"Unknown error"``.
    """
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    if isinstance(error, str):
        return error
    return UNKNOWN_ERROR_MESSAGE
