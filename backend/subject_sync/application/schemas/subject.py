"""Pydantic DTOs (Data Transfer Objects) for the Subject feature."""

import re
from datetime import datetime, timezone
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, ValidationError, field_validator

RoddenRating = Literal["AA", "A", "B", "C", "DD", "X", "XX"]

_TIME_RE = re.compile(r"^(\d{2}):(\d{2}):(\d{2})$")
_TIMEZONE_RE = r"^[A-Za-z0-9_+\-/]+$"


INVALID_ID_MESSAGE = "Invalid subject ID format"


def is_subject_id(value: str) -> bool:
    """Server-side subject ids are UUID strings."""
    try:
        UUID(value)
    except (TypeError, ValueError):
        return False
    return True


def _blank_to_none(value: object) -> object:
    if value is None or value == "":
        return None
    return value


def normalize_birth_date(value: str | None) -> str | None:
    """Parse an ISO date (or datetime) and return UTC midnight as ISO string."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError("Invalid date") from None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    midnight = datetime(parsed.year, parsed.month, parsed.day, tzinfo=timezone.utc)
    return midnight.isoformat().replace("+00:00", ".000Z")


def normalize_birth_time(value: str | None) -> str | None:
    """Validate a 24h ``HH:MM:SS`` string."""
    if not value:
        return None
    match = _TIME_RE.match(value)
    if match is None:
        raise ValueError("Invalid time format (HH:MM:SS)")
    hours, minutes, seconds = (int(part) for part in match.groups())
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ValueError("Invalid time format (HH:MM:SS)")
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


class SubjectCreate(BaseModel):
    """Schema for creating a new subject."""

    name: str = Field(..., min_length=1, max_length=120, examples=["Albert Einstein"])
    city: str = Field(..., min_length=1, max_length=60, examples=["Ulm"])
    nation: str = Field(..., min_length=1, max_length=60, examples=["DE"])
    timezone: str = Field(
        "UTC", min_length=1, max_length=80, pattern=_TIMEZONE_RE,
        examples=["Europe/Berlin"],
    )
    birth_date: str | None = Field(None, alias="birthDate", examples=["1879-03-14"])
    birth_time: str | None = Field(None, alias="birthTime", examples=["11:30:00"])
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    rodens_rating: RoddenRating | None = None
    tags: list[str] | None = Field(None, max_length=10)
    notes: str | None = None

    model_config = {"populate_by_name": True}

    @field_validator("city", "nation", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("birth_date", mode="before")
    @classmethod
    def _check_birth_date(cls, value: object) -> object:
        value = _blank_to_none(value)
        return normalize_birth_date(value) if isinstance(value, str) else value

    @field_validator("birth_time", mode="before")
    @classmethod
    def _check_birth_time(cls, value: object) -> object:
        value = _blank_to_none(value)
        return normalize_birth_time(value) if isinstance(value, str) else value

    @field_validator("tags")
    @classmethod
    def _strip_tags(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return [tag.strip() for tag in value]


class SubjectUpdate(SubjectCreate):
    """Schema for updating an existing subject: same rules plus the target id."""

    id: str = Field(..., min_length=1)


class SubjectResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    name: str
    birth_datetime: str
    city: str
    nation: str
    latitude: float | None
    longitude: float | None
    timezone: str
    rodens_rating: str | None
    tags: list[str] | None
    notes: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class DeleteResult(BaseModel):
    id: str


class BulkDeleteRequest(BaseModel):
    ids: list[str] = Field(..., min_length=1)

    @field_validator("ids")
    @classmethod
    def _check_ids(cls, value: list[str]) -> list[str]:
        if not all(is_subject_id(v) for v in value):
            raise ValueError(INVALID_ID_MESSAGE)
        return value


class BulkDeleteResult(BaseModel):
    count: int


class ImportResult(BaseModel):
    """Outcome of a bulk import: per-row counts plus human-readable errors."""

    created: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[str] = Field(default_factory=list)


def format_validation_errors(exc: ValidationError) -> list[str]:
    """Flatten pydantic errors into ``"path: message"`` strings."""
    messages: list[str] = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        messages.append(f"{path}: {message}" if path else message)
    return messages
