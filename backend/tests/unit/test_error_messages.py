"""Unit tests for error message normalisation and domain exceptions."""

from subject_sync.domain.exceptions import (
    UNKNOWN_ERROR_MESSAGE,
    EntityNotFoundError,
    RemoteApiError,
    SubjectLimitError,
    SubjectValidationError,
    get_error_message,
)


def test_exception_yields_its_message():
    assert get_error_message(RuntimeError("Network error: Failed to delete")) == "Network error: Failed to delete"


def test_string_is_used_as_is():
    assert get_error_message("Validation error: Invalid data") == "Validation error: Invalid data"


def test_anything_else_is_unknown_error():
    assert get_error_message(42) == UNKNOWN_ERROR_MESSAGE
    assert get_error_message(None) == "Unknown error"
    assert get_error_message({"message": "hidden"}) == "Unknown error"


def test_empty_exception_message_falls_back_to_class_name():
    assert get_error_message(TimeoutError()) == "TimeoutError"


def test_remote_api_error_message_is_verbatim():
    exc = RemoteApiError(404, "Subject not found")
    assert str(exc) == "Subject not found"
    assert exc.status_code == 404
    assert get_error_message(exc) == "Subject not found"


def test_validation_error_joins_field_messages():
    exc = SubjectValidationError("Invalid subject data", ["name: Required", "city: Required"])
    assert str(exc) == "Invalid subject data: name: Required; city: Required"
    assert exc.errors == ["name: Required", "city: Required"]
    assert str(SubjectValidationError("Invalid subject IDs")) == "Invalid subject IDs"


def test_not_found_and_limit_messages():
    assert str(EntityNotFoundError("Subject", "s1")) == "Subject with id 's1' not found"
    assert "(5)" in str(SubjectLimitError(5))
