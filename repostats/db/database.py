"""
Database engine and session management.

The repository store is optional. Engines are built lazily, once per
connection URL, and sessions are scoped to a single request through
`store_session`, which always releases the session and never lets a failing
release escape.
"""
import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

_ENGINES: Dict[str, Engine] = {}
_SESSION_FACTORIES: Dict[str, sessionmaker] = {}
_LOCK = threading.Lock()


def _normalize_url(url: str) -> str:
    # Hosted Postgres providers still hand out postgres:// which SQLAlchemy rejects
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url:
            # In-memory SQLite with StaticPool so the schema persists across connections
            kwargs["poolclass"] = StaticPool
        return kwargs
    return {"pool_pre_ping": True}


def get_engine(url: str) -> Engine:
    """Return the engine bound to ``url``, creating it on first use."""
    with _LOCK:
        engine = _ENGINES.get(url)
        if engine is None:
            normalized = _normalize_url(url)
            engine = create_engine(normalized, **_engine_kwargs(normalized))
            logger.info("store_engine_created: dialect=%s", engine.dialect.name)
            _ENGINES[url] = engine
        return engine


def get_session_factory(url: str) -> sessionmaker:
    factory = _SESSION_FACTORIES.get(url)
    if factory is None:
        factory = sessionmaker(autoflush=False, bind=get_engine(url))
        _SESSION_FACTORIES[url] = factory
    return factory


def release_session(session: Session) -> None:
    """Close ``session``; a failure here is logged and never propagated."""
    try:
        session.close()
    except Exception as exc:
        logger.warning("store_release_failed: %s", exc)


@contextmanager
def store_session(url: str) -> Iterator[Session]:
    """Yield a session for one request and release it on every exit path."""
    session = get_session_factory(url)()
    try:
        yield session
    finally:
        release_session(session)


def dispose_engines() -> None:
    """Dispose every cached engine and forget it (shutdown and tests)."""
    with _LOCK:
        engines = list(_ENGINES.values())
        _ENGINES.clear()
        _SESSION_FACTORIES.clear()
    for engine in engines:
        try:
            engine.dispose()
        except Exception as exc:
            logger.warning("store_engine_dispose_failed: %s", exc)
