"""Cache and mutation bookkeeping types for the client-side sync layer."""

from collections.abc import Hashable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

QueryKey = tuple[Hashable, ...]


def make_query_key(*parts: Any) -> QueryKey:
    """Build a hashable query key.

    Mapping parts (filter parameters) are serialised to a sorted tuple of
    items so that ``{"count": 50}`` always yields the same key regardless
    of insertion order.
    """
    key: list[Hashable] = []
    for part in parts:
        if isinstance(part, Mapping):
            key.append(tuple(sorted(part.items())))
        elif isinstance(part, list):
            key.append(tuple(part))
        else:
            key.append(part)
    return tuple(key)


def key_matches(key: QueryKey, prefix: QueryKey) -> bool:
    """True when ``prefix`` is a leading slice of ``key``."""
    return key[: len(prefix)] == prefix


class FetchStatus(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    ERROR = "error"


@dataclass
class CacheEntry:
    """One logical collection in the query cache."""

    key: QueryKey
    data: Any = None
    status: FetchStatus = FetchStatus.IDLE
    updated_at: float | None = None
    is_invalidated: bool = False
    error: str | None = None


class MutationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    BULK_DELETE = "bulk_delete"
    IMPORT = "import"


class MutationStatus(str, Enum):
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class MutationRecord:
    """Transient record of a single in-flight mutation.

    Lives for the duration of the remote call; the coordinator hands it
    back to the caller once settled and keeps no reference to it.
    """

    kind: MutationKind
    payload: Any
    target_id: str | None = None
    previous_snapshots: dict[QueryKey, Any] = field(default_factory=dict)
    status: MutationStatus = MutationStatus.PENDING
    result: Any = None
    error: str | None = None
    exception: BaseException | None = None

    @property
    def committed(self) -> bool:
        return self.status is MutationStatus.COMMITTED

    @property
    def rolled_back(self) -> bool:
        return self.status is MutationStatus.ROLLED_BACK
