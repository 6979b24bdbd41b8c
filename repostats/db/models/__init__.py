"""
SQLAlchemy models for the repository store.

Exposes `Base`, `now_utc`, and the ORM classes.
"""

from .base import Base, now_utc  # re-export
from .repository import Repository

__all__ = [
    "Base",
    "now_utc",
    "Repository",
]
