from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Envelope models are emitted with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RepositoryRecord(BaseModel):
    id: int
    full_name: str
    name: str
    owner: str
    url: str
    homepage: Optional[str] = None
    stars: int = 0
    forks: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_seen: Optional[datetime] = None
    saved_at: Optional[datetime] = None
    source: List[str] = []
    # Soft-delete marker is used for filtering only and never serialized
    deleted_at: Optional[datetime] = Field(default=None, exclude=True)
    model_config = ConfigDict(from_attributes=True, frozen=True)

    @field_validator("created_at", "updated_at", "last_seen", "saved_at", "deleted_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # SQLite hands back naive datetimes; everything is stored as UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None


class Pagination(_CamelModel):
    current_page: int
    total_pages: int
    total_count: int
    limit: int
    has_next: bool
    has_prev: bool


class Sorting(_CamelModel):
    sort_by: str
    sort_order: str


class RepositoryPage(_CamelModel):
    repositories: List[RepositoryRecord]
    pagination: Pagination
    sorting: Sorting
    search: str = ""


class SourceCount(BaseModel):
    source: str
    count: int


class TopStarRepository(BaseModel):
    full_name: str
    name: str
    owner: str
    stars: int
    forks: int
    url: str
    source: List[str] = []
    model_config = ConfigDict(from_attributes=True)


class OwnerRollup(BaseModel):
    owner: str
    repo_count: int
    total_stars: int


class SavedOnDate(BaseModel):
    date: str
    count: int


class StarTotals(_CamelModel):
    total_stars: int = 0
    total_forks: int = 0


class RepositoryStats(_CamelModel):
    total_repos: int
    deleted_repos: int
    source_stats: List[SourceCount]
    top_stars: List[TopStarRepository]
    recent_repos: int
    recent_saved_repos: int
    saved_by_date: List[SavedOnDate]
    totals: StarTotals
    top_owners: List[OwnerRollup]
