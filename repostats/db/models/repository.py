from sqlalchemy import Column, String, Text, DateTime, Integer, Index

from .base import Base, now_utc
from repostats.db.types import SourceTags


class Repository(Base):
    __tablename__ = 'repositories'
    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(512), nullable=False)
    name = Column(String(255), nullable=False)
    owner = Column(String(255), nullable=False)
    url = Column(Text, nullable=False)
    homepage = Column(Text, nullable=True)
    stars = Column(Integer, nullable=False, default=0)
    forks = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc)
    last_seen = Column(DateTime(timezone=True), default=now_utc)
    saved_at = Column(DateTime(timezone=True), default=now_utc)
    # Soft delete marker; rows with a value are hidden from listings and aggregates
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    source = Column(SourceTags(), nullable=False, default=list)

    __table_args__ = (
        Index('idx_repositories_full_name', 'full_name'),
        Index('idx_repositories_owner', 'owner'),
        Index('idx_repositories_stars', 'stars'),
        Index('idx_repositories_saved_at', 'saved_at'),
        Index('idx_repositories_deleted_at', 'deleted_at'),
    )
