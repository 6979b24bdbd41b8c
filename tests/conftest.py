from datetime import datetime, timezone

import pytest

from repostats.db import models
from repostats.db.database import dispose_engines, get_engine, get_session_factory
from repostats.utils.settings import refresh_settings_cache

from tests.factories import seeded_rows

SQLITE_MEMORY_URL = "sqlite+pysqlite:///:memory:"

_SERVICE_ENV_VARS = (
    "POSTGRES_URL",
    "DATABASE_URL",
    "REPOSITORIES_DEFAULT_LIMIT",
    "REPOSITORIES_MAX_LIMIT",
    "CORS_ALLOWED_ORIGINS",
)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Start every test with no store configured and default paging."""
    for name in _SERVICE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    refresh_settings_cache()
    yield
    refresh_settings_cache()


@pytest.fixture
def fixed_now():
    return datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def sqlite_store():
    """In-memory SQLite store with the schema created; yields its URL."""
    engine = get_engine(SQLITE_MEMORY_URL)
    models.Base.metadata.create_all(bind=engine)
    yield SQLITE_MEMORY_URL
    dispose_engines()


@pytest.fixture
def seed_store(sqlite_store):
    """Return a helper that inserts ORM rows into the SQLite store."""

    def _seed(rows):
        session = get_session_factory(sqlite_store)()
        try:
            session.add_all(rows)
            session.commit()
        finally:
            session.close()
        return sqlite_store

    return _seed


@pytest.fixture
def seeded_store(seed_store, fixed_now):
    return seed_store(seeded_rows(fixed_now))
