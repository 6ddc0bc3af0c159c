"""Centralized query keys so cache writes and invalidations agree on addresses."""

from subject_sync.domain.entities import QueryKey, make_query_key

DEFAULT_SUBJECTS_COUNT = 50


def subjects_all_key() -> QueryKey:
    """Prefix matching every subjects collection."""
    return make_query_key("subjects")


def subjects_list_key(count: int = DEFAULT_SUBJECTS_COUNT) -> QueryKey:
    return make_query_key("subjects", {"count": count})
