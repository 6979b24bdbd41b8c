"""
Store-backed listing and statistics for repository records.

Filtering, sorting and pagination run in SQL. Sort columns come from the
shared allow-list and search terms are always bound parameters.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional
import logging

from sqlalchemy import desc, func, or_, select
from sqlalchemy.orm import Session

from repostats.db import models, schemas
from repostats.services.aggregate_evaluator import (
    RECENT_WINDOW,
    SAVED_HISTORY_WINDOW,
    TOP_OWNERS_LIMIT,
    TOP_STARS_LIMIT,
    count_sources,
)
from repostats.services.query_contract import ListQuery, build_page, normalize_sort_field

logger = logging.getLogger(__name__)

_LIKE_ESCAPE = "\\"


def _like_pattern(term: str) -> str:
    # Wildcards in user input are matched literally, like the in-memory filter does
    escaped = (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def _active_repositories(db: Session):
    return db.query(models.Repository).filter(models.Repository.deleted_at.is_(None))


def list_repositories(db: Session, query: ListQuery) -> schemas.RepositoryPage:
    repo = models.Repository
    base = _active_repositories(db)
    if query.has_search:
        pattern = _like_pattern(query.search)
        base = base.filter(
            or_(
                repo.full_name.ilike(pattern, escape=_LIKE_ESCAPE),
                repo.name.ilike(pattern, escape=_LIKE_ESCAPE),
                repo.owner.ilike(pattern, escape=_LIKE_ESCAPE),
            )
        )

    total_count = base.count()
    if query.offset >= total_count:
        # Past the last row; also keeps huge offsets out of the SQL (BIGINT range)
        return build_page([], query, total_count=total_count)

    order_column = getattr(repo, normalize_sort_field(query.sort_by))
    ordering = order_column.desc() if query.descending else order_column.asc()
    rows = (
        base.order_by(ordering.nulls_last(), repo.id.asc())
        .offset(query.offset)
        .limit(query.limit)
        .all()
    )
    records = [schemas.RepositoryRecord.model_validate(row) for row in rows]
    return build_page(records, query, total_count=total_count)


def _count_sources(db: Session) -> List[schemas.SourceCount]:
    repo = models.Repository
    if db.get_bind().dialect.name == "postgresql":
        tags = (
            select(func.unnest(repo.source).label("source"))
            .where(repo.deleted_at.is_(None))
            .subquery()
        )
        stmt = (
            select(tags.c.source, func.count().label("count"))
            .group_by(tags.c.source)
            .order_by(desc("count"), tags.c.source)
        )
        return [schemas.SourceCount(source=row.source, count=row.count) for row in db.execute(stmt)]
    # No array type to unnest on this dialect; tally the tag lists in Python
    rows = db.query(repo.source).filter(repo.deleted_at.is_(None)).order_by(repo.id.asc()).all()
    return count_sources(rows)


def _utc_date(db: Session, column):
    if db.get_bind().dialect.name == "postgresql":
        # DATE(timestamptz) follows the session TimeZone; pin the bucket to UTC
        return func.date(func.timezone("UTC", column))
    # SQLite stores the UTC wall clock as written
    return func.date(column)


def _count(db: Session, *criteria) -> int:
    return db.query(func.count(models.Repository.id)).filter(*criteria).scalar() or 0


def get_repository_stats(db: Session, now: Optional[datetime] = None) -> schemas.RepositoryStats:
    repo = models.Repository
    now = now or datetime.now(timezone.utc)
    is_active = repo.deleted_at.is_(None)
    recent_cutoff = now - RECENT_WINDOW
    history_cutoff = now - SAVED_HISTORY_WINDOW

    top_rows = (
        _active_repositories(db)
        .order_by(repo.stars.desc(), repo.id.asc())
        .limit(TOP_STARS_LIMIT)
        .all()
    )

    saved_day = _utc_date(db, repo.saved_at)
    saved_rows = (
        db.query(saved_day.label("day"), func.count(repo.id).label("count"))
        .filter(repo.saved_at >= history_cutoff)
        .group_by(saved_day)
        .order_by(saved_day.desc())
        .all()
    )

    star_sum, fork_sum = (
        db.query(
            func.coalesce(func.sum(repo.stars), 0),
            func.coalesce(func.sum(repo.forks), 0),
        )
        .filter(is_active)
        .one()
    )

    repo_count = func.count(repo.id).label("repo_count")
    owner_rows = (
        db.query(repo.owner, repo_count, func.coalesce(func.sum(repo.stars), 0).label("total_stars"))
        .filter(is_active)
        .group_by(repo.owner)
        .order_by(desc("repo_count"), func.min(repo.id))
        .limit(TOP_OWNERS_LIMIT)
        .all()
    )

    return schemas.RepositoryStats(
        total_repos=_count(db, is_active),
        deleted_repos=_count(db, repo.deleted_at.isnot(None)),
        source_stats=_count_sources(db),
        top_stars=[schemas.TopStarRepository.model_validate(row) for row in top_rows],
        recent_repos=_count(db, is_active, repo.created_at >= recent_cutoff),
        recent_saved_repos=_count(db, is_active, repo.saved_at >= recent_cutoff),
        saved_by_date=[
            schemas.SavedOnDate(date=_day_string(row.day), count=row.count) for row in saved_rows
        ],
        totals=schemas.StarTotals(total_stars=int(star_sum), total_forks=int(fork_sum)),
        top_owners=[
            schemas.OwnerRollup(owner=row.owner, repo_count=row.repo_count, total_stars=int(row.total_stars))
            for row in owner_rows
        ],
    )


def _day_string(value) -> str:
    # PostgreSQL returns a date, SQLite a 'YYYY-MM-DD' string
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)
