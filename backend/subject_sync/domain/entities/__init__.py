from .subject import Subject, RODDEN_RATINGS
from .cache import (
    QueryKey,
    make_query_key,
    key_matches,
    FetchStatus,
    CacheEntry,
    MutationKind,
    MutationStatus,
    MutationRecord,
)

__all__ = [
    "Subject",
    "RODDEN_RATINGS",
    "QueryKey",
    "make_query_key",
    "key_matches",
    "FetchStatus",
    "CacheEntry",
    "MutationKind",
    "MutationStatus",
    "MutationRecord",
]
