"""Subject domain entity: an immutable snapshot of a birth chart subject."""

from dataclasses import asdict, dataclass, fields, replace
from datetime import datetime
from typing import Any

RODDEN_RATINGS = ("AA", "A", "B", "C", "DD", "X", "XX")


@dataclass(frozen=True)
class Subject:
    """A person or event whose chart can be cast.

    Snapshots are never edited in place: every change produces a new
    instance via ``with_changes`` so earlier snapshots stay valid for
    rollback.
    """

    id: str
    name: str
    birth_datetime: str
    city: str = ""
    nation: str = ""
    latitude: float | None = None
    longitude: float | None = None
    timezone: str = "UTC"
    rodens_rating: str | None = None
    tags: tuple[str, ...] | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def with_changes(self, **changes: Any) -> "Subject":
        """Return a copy with the given fields replaced."""
        if "tags" in changes and changes["tags"] is not None:
            changes["tags"] = tuple(changes["tags"])
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Subject":
        """Build a snapshot from a JSON-like mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        if values.get("tags") is not None:
            values["tags"] = tuple(values["tags"])
        for stamp in ("created_at", "updated_at"):
            raw = values.get(stamp)
            if isinstance(raw, str):
                values[stamp] = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if self.tags is not None:
            data["tags"] = list(self.tags)
        for stamp in ("created_at", "updated_at"):
            if data[stamp] is not None:
                data[stamp] = data[stamp].isoformat()
        return data
