"""Cache-first geocoding: consult the cache, fall back to the provider, store on success."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from loguru import logger

from laundromat_ops.lib.geocode_cache import GeocodeCache
from laundromat_ops.lib.geocoder import BaseGeocoder, normalize_query, reverse_geocode_query


@dataclass
class GeocodeOutcome:
    """Payload for a geocoding request and whether it came from the cache."""

    payload: dict[str, Any] | None
    from_cache: bool = False


async def _resolve(
    cache: GeocodeCache,
    query: str,
    fetch: Callable[[], Awaitable[dict[str, Any] | None]],
) -> GeocodeOutcome:
    """Lookup ``query``; on miss await ``fetch()`` and store a non-empty payload.

    Cache failures degrade to a live provider call. Provider errors propagate.
    """
    cached = await cache.lookup(query)
    if not cached.is_ok:
        logger.warning(f"Geocode cache unavailable, calling provider: {cached}")
    payload = cached.unwrap_or(None)
    if payload is not None:
        return GeocodeOutcome(payload=payload, from_cache=True)

    payload = await fetch()
    if payload is not None:
        stored = await cache.store(query, payload)
        if not stored.is_ok:
            logger.warning(f"Failed to cache geocoding result for {query}: {stored}")
    return GeocodeOutcome(payload=payload, from_cache=False)


async def cached_geocode(cache: GeocodeCache, geocoder: BaseGeocoder, address: str) -> GeocodeOutcome:
    """Forward geocode ``address`` through the cache.

    Raises:
        GeocodingProviderError: If the cache misses and the provider fails.
    """
    query = normalize_query(address)
    if not query:
        return GeocodeOutcome(payload=None)
    return await _resolve(cache, query, lambda: geocoder.geocode(address))


async def cached_reverse_geocode(
    cache: GeocodeCache,
    geocoder: BaseGeocoder,
    latitude: float,
    longitude: float,
) -> GeocodeOutcome:
    """Reverse geocode a coordinate pair through the cache.

    Raises:
        GeocodingProviderError: If the cache misses and the provider fails.
    """
    query = reverse_geocode_query(latitude, longitude)
    return await _resolve(cache, query, lambda: geocoder.reverse_geocode(latitude, longitude))
