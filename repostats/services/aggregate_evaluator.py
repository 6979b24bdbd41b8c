"""
In-memory statistics over a set of repository records.

Produces the same `RepositoryStats` document the store computes with
COUNT/SUM/GROUP BY, so the stats endpoint can fall back to synthetic data.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from repostats.db import schemas

TOP_STARS_LIMIT = 10
TOP_OWNERS_LIMIT = 10
RECENT_WINDOW = timedelta(days=7)
SAVED_HISTORY_WINDOW = timedelta(days=30)


def _on_or_after(value: Optional[datetime], cutoff: datetime) -> bool:
    return value is not None and value >= cutoff


def count_sources(records: Iterable[schemas.RepositoryRecord]) -> List[schemas.SourceCount]:
    """Tally provenance tags; a record counts once per tag it carries."""
    counts: Dict[str, int] = {}
    for record in records:
        for tag in record.source:
            counts[tag] = counts.get(tag, 0) + 1
    # Most frequent first, ties by tag name (same as the store's ORDER BY)
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [schemas.SourceCount(source=tag, count=count) for tag, count in ordered]


def top_by_stars(records: Iterable[schemas.RepositoryRecord], limit: int = TOP_STARS_LIMIT) -> List[schemas.TopStarRepository]:
    ranked = sorted(records, key=lambda record: record.stars, reverse=True)[:limit]
    return [schemas.TopStarRepository.model_validate(record, from_attributes=True) for record in ranked]


def rollup_owners(records: Iterable[schemas.RepositoryRecord], limit: int = TOP_OWNERS_LIMIT) -> List[schemas.OwnerRollup]:
    totals: Dict[str, List[int]] = {}
    for record in records:
        bucket = totals.setdefault(record.owner, [0, 0])
        bucket[0] += 1
        bucket[1] += record.stars
    ranked = sorted(totals.items(), key=lambda item: item[1][0], reverse=True)[:limit]
    return [
        schemas.OwnerRollup(owner=owner, repo_count=repo_count, total_stars=total_stars)
        for owner, (repo_count, total_stars) in ranked
    ]


def saved_per_day(
    records: Iterable[schemas.RepositoryRecord],
    now: datetime,
    window: timedelta = SAVED_HISTORY_WINDOW,
) -> List[schemas.SavedOnDate]:
    """Daily counts of ``saved_at`` over the trailing window, newest day first.

    Soft-deleted rows are included, matching the store query.
    """
    cutoff = now - window
    per_day: Dict[date, int] = {}
    for record in records:
        if not _on_or_after(record.saved_at, cutoff):
            continue
        day = record.saved_at.astimezone(timezone.utc).date()
        per_day[day] = per_day.get(day, 0) + 1
    return [
        schemas.SavedOnDate(date=day.isoformat(), count=count)
        for day, count in sorted(per_day.items(), reverse=True)
    ]


def aggregate(
    records: Iterable[schemas.RepositoryRecord],
    now: Optional[datetime] = None,
) -> schemas.RepositoryStats:
    now = now or datetime.now(timezone.utc)
    records = list(records)
    active = [record for record in records if record.is_active]
    recent_cutoff = now - RECENT_WINDOW

    return schemas.RepositoryStats(
        total_repos=len(active),
        deleted_repos=len(records) - len(active),
        source_stats=count_sources(active),
        top_stars=top_by_stars(active),
        recent_repos=sum(1 for record in active if _on_or_after(record.created_at, recent_cutoff)),
        recent_saved_repos=sum(1 for record in active if _on_or_after(record.saved_at, recent_cutoff)),
        saved_by_date=saved_per_day(records, now),
        totals=schemas.StarTotals(
            total_stars=sum(record.stars for record in active),
            total_forks=sum(record.forks for record in active),
        ),
        top_owners=rollup_owners(active),
    )
