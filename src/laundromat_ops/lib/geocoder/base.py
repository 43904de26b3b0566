"""Abstract base geocoder interface and provider error type."""

from abc import ABC, abstractmethod
from typing import Any


class GeocodingProviderError(Exception):
    """Raised when a geocoding provider experiences a transport or service error.

    Distinguishes provider failures (timeout, HTTP error, connection error)
    from a successful response with no match (which returns None).

    Args:
        provider_name: Name of the failing provider.
        message: Human-readable error description.
        status_code: Optional HTTP status code from the provider.
    """

    def __init__(self, provider_name: str, message: str, status_code: int | None = None) -> None:
        self.provider_name = provider_name
        self.message = message
        self.status_code = status_code
        super().__init__(f"{provider_name}: {message}")


class BaseGeocoder(ABC):
    """Geocoder returning raw provider payloads, suitable for caching verbatim."""

    @abstractmethod
    async def geocode(self, address: str) -> dict[str, Any] | None:
        """Resolve an address to the provider's raw response, or None if no match."""

    @abstractmethod
    async def reverse_geocode(self, latitude: float, longitude: float) -> dict[str, Any] | None:
        """Resolve coordinates to the provider's raw response, or None if no match."""
