"""Geocoder library: Google Maps provider and cache key helpers.

Public API:
    - BaseGeocoder: Abstract provider interface returning raw payloads
    - GeocodingProviderError: Provider transport/service failure
    - GoogleMapsGeocoder: Google Maps provider
    - ResolvedAddress: Address components parsed from a Google payload
    - normalize_query / reverse_geocode_query: Cache key builders
"""

from laundromat_ops.lib.geocoder.address import (
    PLACEHOLDER_MARKER,
    ResolvedAddress,
    normalize_query,
    reverse_geocode_query,
)
from laundromat_ops.lib.geocoder.base import BaseGeocoder, GeocodingProviderError
from laundromat_ops.lib.geocoder.google_maps import GoogleMapsGeocoder

__all__ = [
    "PLACEHOLDER_MARKER",
    "BaseGeocoder",
    "GeocodingProviderError",
    "GoogleMapsGeocoder",
    "ResolvedAddress",
    "normalize_query",
    "reverse_geocode_query",
]
