"""Custom SQLAlchemy types used by the persistence layer."""
from __future__ import annotations

from typing import Iterable, List

from sqlalchemy import String
from sqlalchemy.dialects import postgresql
from sqlalchemy.types import JSON, TypeDecorator


class SourceTags(TypeDecorator[List[str]]):
    """Store provenance tags as a PostgreSQL text array.

    Falls back to JSON storage on dialects without array support
    (e.g. SQLite during unit tests).
    """

    cache_ok = True
    impl = JSON

    def load_dialect_impl(self, dialect):  # type: ignore[override]
        if dialect.name == "postgresql":
            return dialect.type_descriptor(postgresql.ARRAY(String))
        return dialect.type_descriptor(JSON(none_as_null=True))

    def process_bind_param(self, value, dialect):  # type: ignore[override]
        if value is None:
            return None
        if isinstance(value, str):
            return [value]
        if not isinstance(value, Iterable):
            raise TypeError(f"SourceTags expects an iterable of strings, got {type(value)!r}")
        return [str(tag) for tag in value]

    def process_result_value(self, value, dialect):  # type: ignore[override]
        if value is None:
            return []
        return [str(tag) for tag in value]
