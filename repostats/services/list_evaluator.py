"""
In-memory listing: search filter, stable sort, pagination.

Mirrors what the store does in SQL so that synthetic responses are
interchangeable with live ones.
"""
from typing import Iterable, List, Sequence

from repostats.db import schemas
from repostats.services.query_contract import (
    ListQuery,
    build_page,
    normalize_sort_field,
    normalize_sort_order,
    SORT_ASC,
)

SEARCH_FIELDS = ("full_name", "name", "owner")


def matches_search(record: schemas.RepositoryRecord, term: str) -> bool:
    """Case-insensitive substring match on full name, name or owner."""
    needle = term.lower()
    return any(needle in (getattr(record, field) or "").lower() for field in SEARCH_FIELDS)


def filter_records(records: Iterable[schemas.RepositoryRecord], search: str) -> List[schemas.RepositoryRecord]:
    active = [record for record in records if record.is_active]
    if not search:
        return active
    return [record for record in active if matches_search(record, search)]


def sort_records(
    records: Sequence[schemas.RepositoryRecord],
    sort_by: str,
    sort_order: str,
) -> List[schemas.RepositoryRecord]:
    """Stable sort on an allow-listed field; missing values go last in both directions."""
    field = normalize_sort_field(sort_by)
    descending = normalize_sort_order(sort_order) != SORT_ASC
    present = [record for record in records if getattr(record, field) is not None]
    missing = [record for record in records if getattr(record, field) is None]
    # sorted() keeps equal keys in input order even with reverse=True
    ordered = sorted(present, key=lambda record: getattr(record, field), reverse=descending)
    return ordered + missing


def evaluate(records: Iterable[schemas.RepositoryRecord], query: ListQuery) -> schemas.RepositoryPage:
    filtered = filter_records(records, query.search)
    ordered = sort_records(filtered, query.sort_by, query.sort_order)
    start = query.offset
    window = ordered[start:start + query.limit]
    return build_page(window, query, total_count=len(filtered))
