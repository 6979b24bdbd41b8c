"""
Per-request routing between the repository store and the synthetic dataset.

Every request starts in store mode when a store URL is configured and drops
to fallback mode for that request only if anything goes wrong. Callers always
get a complete response; the failure is logged, never raised.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Sequence, TypeVar

from sqlalchemy.orm import Session

from repostats.db import schemas
from repostats.db.database import store_session
from repostats.db.repositories import repository_records
from repostats.services import aggregate_evaluator, list_evaluator
from repostats.services.query_contract import ListQuery
from repostats.services.synthetic_dataset import get_synthetic_repositories
from repostats.utils.settings import ServiceSettings, get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BackendMode(str, Enum):
    store = "store"
    fallback = "synthetic"


class FallbackReason(str, Enum):
    store_not_configured = "store_not_configured"
    store_unavailable = "store_unavailable"


class BackendSelector:
    """Resolve listing and stats requests against the best available backend.

    One instance serves one request: ``mode`` and ``fallback_reason`` describe
    how the last call was answered.
    """

    def __init__(
        self,
        store_url: Optional[str] = None,
        session_scope=store_session,
        dataset_provider: Callable[[], Sequence[schemas.RepositoryRecord]] = get_synthetic_repositories,
    ):
        self.store_url = store_url
        self._session_scope = session_scope
        self._dataset_provider = dataset_provider
        self.mode: Optional[BackendMode] = None
        self.fallback_reason: Optional[FallbackReason] = None

    @classmethod
    def from_settings(cls, settings: Optional[ServiceSettings] = None) -> "BackendSelector":
        settings = settings or get_settings()
        return cls(store_url=settings.store_url)

    @property
    def store_configured(self) -> bool:
        return self.store_url is not None

    def resolve_list(self, query: ListQuery) -> schemas.RepositoryPage:
        return self._resolve(
            "list",
            lambda db: repository_records.list_repositories(db, query),
            lambda records: list_evaluator.evaluate(records, query),
        )

    def resolve_stats(self, now: Optional[datetime] = None) -> schemas.RepositoryStats:
        now = now or datetime.now(timezone.utc)
        return self._resolve(
            "stats",
            lambda db: repository_records.get_repository_stats(db, now=now),
            lambda records: aggregate_evaluator.aggregate(records, now=now),
        )

    def _resolve(
        self,
        operation: str,
        from_store: Callable[[Session], T],
        from_records: Callable[[Sequence[schemas.RepositoryRecord]], T],
    ) -> T:
        if not self.store_configured:
            logger.debug("store_not_configured: operation=%s, using synthetic dataset", operation)
            return self._fallback(from_records, FallbackReason.store_not_configured)

        try:
            with self._session_scope(self.store_url) as db:
                result = from_store(db)
        except Exception as exc:
            logger.warning(
                "store_query_failed: operation=%s error=%s; falling back to synthetic dataset",
                operation,
                exc,
            )
            return self._fallback(from_records, FallbackReason.store_unavailable)

        self.mode = BackendMode.store
        self.fallback_reason = None
        return result

    def _fallback(self, from_records, reason: FallbackReason):
        self.mode = BackendMode.fallback
        self.fallback_reason = reason
        return from_records(self._dataset_provider())
