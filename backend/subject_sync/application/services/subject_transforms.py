"""Pure cache transforms for subject collections.

Collections are tuples of immutable ``Subject`` snapshots. Every function
returns a new tuple (or the very same object when nothing changes) and
leaves untouched subjects identical, so snapshots taken before a change
stay valid for rollback.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import uuid4

from subject_sync.application.schemas.subject import SubjectCreate, SubjectUpdate
from subject_sync.domain.entities import Subject

SubjectList = tuple[Subject, ...]

TEMP_ID_PREFIX = "temp-"


@dataclass(frozen=True)
class PendingSubject:
    """A create payload paired with the temporary id of its placeholder."""

    temp_id: str
    data: SubjectCreate


def new_temp_id() -> str:
    return f"{TEMP_ID_PREFIX}{uuid4().hex}"


def is_temp_id(subject_id: str) -> bool:
    return subject_id.startswith(TEMP_ID_PREFIX)


def combine_birth_datetime(birth_date: str | None, birth_time: str | None) -> str | None:
    """Join a normalised date and an ``HH:MM:SS`` time into a UTC ISO stamp."""
    if not birth_date or not birth_time:
        return None
    return f"{birth_date.split('T')[0]}T{birth_time}.000Z"


def build_placeholder(pending: PendingSubject) -> Subject:
    data = pending.data
    return Subject(
        id=pending.temp_id,
        name=data.name,
        birth_datetime=combine_birth_datetime(data.birth_date, data.birth_time)
        or data.birth_date
        or "",
        city=data.city,
        nation=data.nation,
        latitude=data.latitude,
        longitude=data.longitude,
        timezone=data.timezone,
        rodens_rating=data.rodens_rating,
        tags=tuple(data.tags) if data.tags is not None else None,
        notes=data.notes,
    )


def prepend_placeholder(subjects: SubjectList | None, pending: PendingSubject) -> SubjectList | None:
    """Optimistic create: newest first. An unfetched list stays unfetched."""
    if subjects is None:
        return None
    return (build_placeholder(pending), *subjects)


def commit_created(
    subjects: SubjectList | None, pending: PendingSubject, created: Subject
) -> SubjectList:
    """Swap the placeholder for the server entity, keeping exactly one copy."""
    if subjects is None:
        return (created,)
    if any(s.id == pending.temp_id for s in subjects):
        return tuple(
            created if s.id == pending.temp_id else s
            for s in subjects
            if s.id != created.id
        )
    if any(s.id == created.id for s in subjects):
        return replace_subject(subjects, created)
    return (created, *subjects)


def merge_update(subject: Subject, patch: SubjectUpdate) -> Subject:
    """Overlay a validated update onto a snapshot.

    Mirrors the server merge: plain fields and notes keep their old value
    when the patch carries None, empty tags keep the old tags, and only the
    rating is cleared by an explicit None.
    """
    provided = patch.model_fields_set
    birth_datetime = combine_birth_datetime(patch.birth_date, patch.birth_time)
    return subject.with_changes(
        name=patch.name if patch.name is not None else subject.name,
        city=patch.city if patch.city is not None else subject.city,
        nation=patch.nation if patch.nation is not None else subject.nation,
        birth_datetime=birth_datetime or subject.birth_datetime,
        latitude=patch.latitude if patch.latitude is not None else subject.latitude,
        longitude=patch.longitude if patch.longitude is not None else subject.longitude,
        timezone=patch.timezone if patch.timezone is not None else subject.timezone,
        rodens_rating=patch.rodens_rating if "rodens_rating" in provided else subject.rodens_rating,
        tags=tuple(patch.tags) if patch.tags else subject.tags,
        notes=patch.notes if patch.notes is not None else subject.notes,
    )


def apply_update(subjects: SubjectList | None, patch: SubjectUpdate) -> SubjectList | None:
    if subjects is None or not any(s.id == patch.id for s in subjects):
        return subjects
    return tuple(merge_update(s, patch) if s.id == patch.id else s for s in subjects)


def replace_subject(subjects: SubjectList | None, updated: Subject) -> SubjectList | None:
    if subjects is None or not any(s.id == updated.id for s in subjects):
        return subjects
    return tuple(updated if s.id == updated.id else s for s in subjects)


def remove_subject(subjects: SubjectList | None, subject_id: str) -> SubjectList | None:
    """Optimistic delete. Deleting an absent id leaves the list untouched."""
    if subjects is None or not any(s.id == subject_id for s in subjects):
        return subjects
    return tuple(s for s in subjects if s.id != subject_id)


def remove_subjects(subjects: SubjectList | None, subject_ids: list[str]) -> SubjectList | None:
    doomed = set(subject_ids)
    if subjects is None or not any(s.id in doomed for s in subjects):
        return subjects
    return tuple(s for s in subjects if s.id not in doomed)


def subject_to_form_values(subject: Subject) -> dict:
    """Pre-fill values for the edit form (``birthTime`` in UTC ``HH:MM:SS``)."""
    birth_date = ""
    birth_time = ""
    try:
        moment = datetime.fromisoformat(subject.birth_datetime.replace("Z", "+00:00"))
    except ValueError:
        moment = None
    if moment is not None:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        moment = moment.astimezone(timezone.utc)
        birth_date = moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"
        birth_time = moment.strftime("%H:%M:%S")

    return {
        "id": subject.id,
        "name": subject.name,
        "city": subject.city or "",
        "nation": subject.nation or "",
        "birthDate": birth_date,
        "birthTime": birth_time,
        "latitude": subject.latitude,
        "longitude": subject.longitude,
        "timezone": subject.timezone,
        "rodens_rating": subject.rodens_rating,
        "tags": list(subject.tags) if subject.tags is not None else None,
    }
