"""Geocode result cache.

Public API:
    - GeocodeCache: lookup / store / statistics / prune over the geocoding_cache table
    - DEFAULT_MAX_AGE_DAYS: default prune threshold in days
    - RECENT_WINDOW_DAYS: default recency window in days
"""

from laundromat_ops.lib.geocode_cache.cache import (
    DEFAULT_MAX_AGE_DAYS,
    RECENT_WINDOW_DAYS,
    GeocodeCache,
    utcnow,
)

__all__ = [
    "DEFAULT_MAX_AGE_DAYS",
    "RECENT_WINDOW_DAYS",
    "GeocodeCache",
    "utcnow",
]
