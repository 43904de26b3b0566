"""GeocodingCacheEntry model: caches raw geocoding responses by normalized query."""

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, Integer, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from laundromat_ops.models.base import Base, JSONDocument


class GeocodingCacheEntry(Base):
    """Cached provider payload keyed by the exact query string."""

    __tablename__ = "geocoding_cache"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    query: Mapped[str] = mapped_column(Text, nullable=False)
    result: Mapped[Any] = mapped_column(JSONDocument, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    last_used_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("query", name="uq_geocoding_cache_query"),
        Index("geocoding_cache_query_idx", "query"),
    )
