"""Unit tests for the pure subject list transforms."""

from subject_sync.application.schemas import SubjectCreate, SubjectUpdate
from subject_sync.application.services.subject_transforms import (
    PendingSubject,
    apply_update,
    combine_birth_datetime,
    commit_created,
    is_temp_id,
    merge_update,
    new_temp_id,
    prepend_placeholder,
    remove_subject,
    remove_subjects,
    replace_subject,
    subject_to_form_values,
)
from subject_sync.domain.entities import Subject


def _subject(subject_id: str, name: str = "Subject", **kwargs) -> Subject:
    values = {
        "birth_datetime": "1990-06-15T12:30:00.000Z",
        "city": "London",
        "nation": "GB",
    }
    values.update(kwargs)
    return Subject(id=subject_id, name=name, **values)


def _pending(temp_id: str = "temp-abc") -> PendingSubject:
    return PendingSubject(
        temp_id=temp_id,
        data=SubjectCreate(
            name="Ada",
            city="London",
            nation="GB",
            birthDate="1815-12-10",
            birthTime="08:00:00",
            tags=["math"],
        ),
    )


def test_temp_ids():
    temp_id = new_temp_id()
    assert is_temp_id(temp_id)
    assert not is_temp_id("0b6f3c1e-1111-2222-3333-444455556666")
    assert new_temp_id() != temp_id


def test_combine_birth_datetime():
    assert combine_birth_datetime("1990-06-15T00:00:00.000Z", "12:30:00") == "1990-06-15T12:30:00.000Z"
    assert combine_birth_datetime("1990-06-15T00:00:00.000Z", None) is None
    assert combine_birth_datetime(None, "12:30:00") is None


def test_prepend_placeholder():
    subjects = (_subject("s1"),)
    result = prepend_placeholder(subjects, _pending())

    assert [s.id for s in result] == ["temp-abc", "s1"]
    placeholder = result[0]
    assert placeholder.name == "Ada"
    assert placeholder.birth_datetime == "1815-12-10T08:00:00.000Z"
    assert placeholder.tags == ("math",)
    assert result[1] is subjects[0]
    assert subjects == (_subject("s1"),)


def test_prepend_placeholder_on_unfetched_list():
    assert prepend_placeholder(None, _pending()) is None


def test_commit_created_replaces_placeholder():
    created = _subject("srv-1", "Ada")
    subjects = prepend_placeholder((_subject("s1"),), _pending())

    assert [s.id for s in commit_created(subjects, _pending(), created)] == ["srv-1", "s1"]


def test_commit_created_keeps_exactly_one_copy():
    created = _subject("srv-1", "Ada")
    # A refetch already delivered the server copy next to the placeholder
    subjects = (_subject("temp-abc"), created, _subject("s1"))

    result = commit_created(subjects, _pending(), created)
    assert [s.id for s in result] == ["srv-1", "s1"]


def test_commit_created_without_placeholder():
    created = _subject("srv-1", "Ada")
    assert commit_created(None, _pending(), created) == (created,)
    assert [s.id for s in commit_created((_subject("s1"),), _pending(), created)] == ["srv-1", "s1"]

    newer = created.with_changes(name="Ada Lovelace")
    result = commit_created((created, _subject("s1")), _pending(), newer)
    assert result[0].name == "Ada Lovelace"
    assert len(result) == 2


def test_merge_update_keeps_and_clears_fields():
    subject = _subject("s1", rodens_rating="AA", tags=("a",), notes="keep", latitude=51.5)

    patch = SubjectUpdate(id="s1", name="Renamed", city="Paris", nation="FR", tags=None, notes=None)
    merged = merge_update(subject, patch)

    assert merged.name == "Renamed"
    assert merged.city == "Paris"
    assert merged.latitude == 51.5
    assert merged.rodens_rating == "AA"
    assert merged.notes == "keep"
    assert merged.tags == ("a",)
    assert merged.birth_datetime == subject.birth_datetime

    cleared = merge_update(subject, SubjectUpdate(id="s1", name="S", city="C", nation="N", rodens_rating=None))
    assert cleared.rodens_rating is None


def test_optimistic_update_matches_server_merge_for_notes_and_tags():
    subjects = (_subject("s1", notes="keep me", tags=("a",)),)

    kept = apply_update(subjects, SubjectUpdate(id="s1", name="S", city="C", nation="N", notes=None, tags=[]))
    assert kept[0].notes == "keep me"
    assert kept[0].tags == ("a",)

    changed = apply_update(subjects, SubjectUpdate(id="s1", name="S", city="C", nation="N", notes="new", tags=["b"]))
    assert changed[0].notes == "new"
    assert changed[0].tags == ("b",)


def test_merge_update_combines_birth_moment():
    subject = _subject("s1")
    patch = SubjectUpdate(
        id="s1", name="S", city="C", nation="N", birthDate="2000-01-02", birthTime="03:04:05"
    )
    assert merge_update(subject, patch).birth_datetime == "2000-01-02T03:04:05.000Z"


def test_apply_update_preserves_untouched_identity():
    subjects = (_subject("s1"), _subject("s2"))
    patch = SubjectUpdate(id="s1", name="Updated Name", city="London", nation="GB")

    result = apply_update(subjects, patch)
    assert result[0].name == "Updated Name"
    assert result[1] is subjects[1]

    missing = SubjectUpdate(id="nope", name="X", city="London", nation="GB")
    assert apply_update(subjects, missing) is subjects
    assert apply_update(None, patch) is None


def test_replace_subject():
    subjects = (_subject("s1"), _subject("s2"))
    server = _subject("s1", "From Server")
    assert replace_subject(subjects, server)[0] is server
    assert replace_subject(subjects, _subject("s3")) is subjects
    assert replace_subject(None, server) is None


def test_remove_subject_and_absent_id():
    subjects = (_subject("s1"), _subject("s2"))
    assert [s.id for s in remove_subject(subjects, "s1")] == ["s2"]
    assert remove_subject(subjects, "missing") is subjects
    assert remove_subject(None, "s1") is None


def test_remove_subjects():
    subjects = (_subject("s1"), _subject("s2"), _subject("s3"))
    assert [s.id for s in remove_subjects(subjects, ["s1", "s3", "zz"])] == ["s2"]
    assert remove_subjects(subjects, ["zz"]) is subjects


def test_subject_to_form_values():
    values = subject_to_form_values(_subject("s1", tags=("x",), rodens_rating="A"))

    assert values["id"] == "s1"
    assert values["birthDate"] == "1990-06-15T12:30:00.000Z"
    assert values["birthTime"] == "12:30:00"
    assert values["tags"] == ["x"]
    assert values["rodens_rating"] == "A"
    assert values["timezone"] == "UTC"


def test_subject_to_form_values_with_unparseable_birth_moment():
    values = subject_to_form_values(_subject("s1", birth_datetime="not a date"))
    assert values["birthDate"] == ""
    assert values["birthTime"] == ""
