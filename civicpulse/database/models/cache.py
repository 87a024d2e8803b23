"""
Stored geocoding answers.
"""
from datetime import datetime

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from civicpulse.database.connection import Base, utcnow


class CacheEntry(Base):
    """One provider answer, keyed by provider, operation and normalized params.

    ``data`` is the candidate list as JSON; an empty list caches a "no match".
    """

    __tablename__ = "cache_entries"

    key: Mapped[str] = mapped_column(String(500), primary_key=True)
    data: Mapped[list] = mapped_column(JSON, nullable=False)
    provider: Mapped[str] = mapped_column(String(50), index=True)
    operation: Mapped[str] = mapped_column(String(50), index=True)
    params: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    hit_count: Mapped[int] = mapped_column(default=0)

    __table_args__ = (
        Index("idx_cache_operation_expires", "operation", "expires_at"),
    )
