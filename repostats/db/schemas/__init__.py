"""
Pydantic schemas for the repository API.

Request-side normalization lives in `repostats.services.query_contract`;
these models describe what leaves the service.
"""

from .repository import (
    RepositoryRecord,
    Pagination,
    Sorting,
    RepositoryPage,
    SourceCount,
    TopStarRepository,
    OwnerRollup,
    SavedOnDate,
    StarTotals,
    RepositoryStats,
)

__all__ = [
    "RepositoryRecord",
    "Pagination",
    "Sorting",
    "RepositoryPage",
    "SourceCount",
    "TopStarRepository",
    "OwnerRollup",
    "SavedOnDate",
    "StarTotals",
    "RepositoryStats",
]
