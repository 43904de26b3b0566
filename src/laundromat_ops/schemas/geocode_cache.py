"""Pydantic v2 schemas for geocode cache reporting."""

from datetime import datetime

from pydantic import BaseModel, Field


class CacheStatistics(BaseModel):
    """Summary of geocode cache size and recent usage."""

    total: int = Field(ge=0)
    recently_used: int = Field(ge=0, description="Entries used within the recency window")
    recent_usage_ratio: int = Field(ge=0, le=100, description="recently_used / total as a whole percentage")
    oldest_entry: datetime | None = Field(default=None, description="Earliest created_at, None when empty")

    @classmethod
    def empty(cls) -> "CacheStatistics":
        """Neutral statistics reported when the cache is empty or unavailable."""
        return cls(total=0, recently_used=0, recent_usage_ratio=0, oldest_entry=None)
