"""ORM model registry: import all models so metadata discovers them."""

from laundromat_ops.models.geocoding_cache import GeocodingCacheEntry
from laundromat_ops.models.laundromat import Laundromat

__all__ = [
    "GeocodingCacheEntry",
    "Laundromat",
]
