"""Environment-backed service settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple


DEFAULT_PAGE_LIMIT = 30
DEFAULT_MAX_PAGE_LIMIT = 1000

_DEFAULT_CORS_ORIGINS: Tuple[str, ...] = (
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:8000",
)


def _env_str(name: str) -> Optional[str]:
    """Return a stripped environment value, treating blanks as unset."""
    raw = os.getenv(name)
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    """Return an integer sourced from the environment when available."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if value < minimum:
        return default
    return value


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    items = tuple(item.strip() for item in raw.split(",") if item.strip())
    return items or default


@dataclass(frozen=True)
class ServiceSettings:
    """Runtime configuration for the repository service."""

    store_url: Optional[str]
    default_limit: int
    max_limit: int
    cors_origins: Tuple[str, ...]
    log_level: str

    @property
    def store_configured(self) -> bool:
        return self.store_url is not None


def _resolve_store_url() -> Optional[str]:
    # POSTGRES_URL wins; DATABASE_URL is honoured for platforms that only set that.
    return _env_str("POSTGRES_URL") or _env_str("DATABASE_URL")


@lru_cache(maxsize=None)
def get_settings() -> ServiceSettings:
    """Return the cached settings sourced from the environment."""
    max_limit = _env_int("REPOSITORIES_MAX_LIMIT", DEFAULT_MAX_PAGE_LIMIT)
    default_limit = min(_env_int("REPOSITORIES_DEFAULT_LIMIT", DEFAULT_PAGE_LIMIT), max_limit)
    return ServiceSettings(
        store_url=_resolve_store_url(),
        default_limit=default_limit,
        max_limit=max_limit,
        cors_origins=_env_list("CORS_ALLOWED_ORIGINS", _DEFAULT_CORS_ORIGINS),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )


def refresh_settings_cache() -> None:
    """Invalidate cached settings (useful for tests)."""
    get_settings.cache_clear()
