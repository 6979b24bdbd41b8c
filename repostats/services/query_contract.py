"""
Request parameter policy for repository listings.

Both the store-backed path and the in-memory synthetic path go through this
module: it turns the raw query-string values into a `ListQuery` and builds the
pagination/sorting blocks of the response, so the two backends cannot drift.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Optional

from repostats.db import schemas
from repostats.utils.settings import DEFAULT_PAGE_LIMIT, get_settings

ALLOWED_SORT_FIELDS = (
    "id",
    "stars",
    "forks",
    "name",
    "owner",
    "created_at",
    "updated_at",
    "last_seen",
)
TIMESTAMP_SORT_FIELDS = frozenset({"created_at", "updated_at", "last_seen"})
DEFAULT_SORT_FIELD = "id"

SORT_ASC = "asc"
SORT_DESC = "desc"
DEFAULT_SORT_ORDER = SORT_DESC

DEFAULT_PAGE = 1

# Leading integer, optionally signed; trailing garbage is ignored ("2abc" -> 2)
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


def parse_int(raw: Any, default: int) -> int:
    """Parse ``raw`` leniently, returning ``default`` when no integer is present."""
    if raw is None:
        return default
    if isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        return raw
    match = _INT_PREFIX.match(str(raw))
    if not match:
        return default
    try:
        return int(match.group(1))
    except ValueError:
        # digit runs past the interpreter's int conversion limit
        return default


def normalize_sort_field(value: Optional[str]) -> str:
    """Return ``value`` if it is an allow-listed sort field, else ``id``."""
    if value in ALLOWED_SORT_FIELDS:
        return value
    return DEFAULT_SORT_FIELD


def normalize_sort_order(value: Optional[str]) -> str:
    """Case-insensitive; anything other than ``asc`` means descending."""
    if value is not None and str(value).strip().lower() == SORT_ASC:
        return SORT_ASC
    return SORT_DESC


@dataclass(frozen=True)
class ListQuery:
    """A normalized listing request."""

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_LIMIT
    sort_by: str = DEFAULT_SORT_FIELD
    sort_order: str = DEFAULT_SORT_ORDER
    search: str = ""

    @property
    def offset(self) -> int:
        # page may be <= 0 when callers pass it through verbatim
        return max(0, (self.page - 1) * self.limit)

    @property
    def descending(self) -> bool:
        return self.sort_order != SORT_ASC

    @property
    def has_search(self) -> bool:
        return bool(self.search)


def normalize_list_query(
    page: Any = None,
    limit: Any = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    search: Optional[str] = None,
    *,
    default_limit: Optional[int] = None,
    max_limit: Optional[int] = None,
) -> ListQuery:
    """Build a `ListQuery` from raw query-string values.

    - page: unparsable -> 1, otherwise kept verbatim (even when <= 0)
    - limit: unparsable -> default, then clamped into [1, max_limit]
    - sort_by: outside the allow-list -> ``id``
    - sort_order: anything but ``asc`` (any case) -> ``desc``
    - search: ``None`` -> empty string (no filter)
    """
    if default_limit is None or max_limit is None:
        settings = get_settings()
        default_limit = settings.default_limit if default_limit is None else default_limit
        max_limit = settings.max_limit if max_limit is None else max_limit

    resolved_limit = parse_int(limit, default_limit)
    resolved_limit = min(max(resolved_limit, 1), max_limit)

    return ListQuery(
        page=parse_int(page, DEFAULT_PAGE),
        limit=resolved_limit,
        sort_by=normalize_sort_field(sort_by),
        sort_order=normalize_sort_order(sort_order),
        search=search or "",
    )


def count_pages(total_count: int, limit: int) -> int:
    if limit <= 0 or total_count <= 0:
        return 0
    return math.ceil(total_count / limit)


def build_page(records, query: ListQuery, total_count: int) -> schemas.RepositoryPage:
    """Assemble the listing response shared by every backend."""
    total_pages = count_pages(total_count, query.limit)
    return schemas.RepositoryPage(
        repositories=list(records),
        pagination=schemas.Pagination(
            current_page=query.page,
            total_pages=total_pages,
            total_count=total_count,
            limit=query.limit,
            has_next=query.page < total_pages,
            has_prev=query.page > 1,
        ),
        sorting=schemas.Sorting(
            sort_by=normalize_sort_field(query.sort_by),
            sort_order=normalize_sort_order(query.sort_order),
        ),
        search=query.search,
    )
