"""Google Maps Geocoding API provider.

Uses the Google Maps Geocoding API
(https://developers.google.com/maps/documentation/geocoding/)
for forward and reverse geocoding. Requires an API key.

Responses are returned unparsed so they can be cached as-is; see
:mod:`laundromat_ops.lib.geocoder.address` for component extraction.
"""

from typing import Any

import httpx
from loguru import logger

from laundromat_ops.lib.geocoder.base import BaseGeocoder, GeocodingProviderError

GOOGLE_API_URL = "https://maps.googleapis.com/maps/api/geocode/json"
DEFAULT_TIMEOUT = 10.0


class GoogleMapsGeocoder(BaseGeocoder):
    """Google Maps geocoder provider."""

    def __init__(
        self,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        region: str = "us",
    ) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._region = region

    async def geocode(self, address: str) -> dict[str, Any] | None:
        """Geocode an address.

        Args:
            address: Full address string.

        Returns:
            Raw API payload, or None if no match found.

        Raises:
            GeocodingProviderError: On transport, service, or API-specific errors.
        """
        return await self._request({"address": address, "region": self._region})

    async def reverse_geocode(self, latitude: float, longitude: float) -> dict[str, Any] | None:
        """Reverse geocode a coordinate pair.

        Returns:
            Raw API payload, or None if no match found.

        Raises:
            GeocodingProviderError: On transport, service, or API-specific errors.
        """
        return await self._request({"latlng": f"{latitude},{longitude}"})

    async def _request(self, params: dict[str, str]) -> dict[str, Any] | None:
        params = {**params, "key": self._api_key}

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(GOOGLE_API_URL, params=params)
                response.raise_for_status()

            data = response.json()
            return self._check_response(data)

        except httpx.TimeoutException as e:
            logger.warning("Google Maps geocoder timeout")
            raise GeocodingProviderError("google", "Geocoding request timed out") from e
        except httpx.HTTPStatusError as e:
            logger.warning(f"Google Maps geocoder HTTP error {e.response.status_code}")
            raise GeocodingProviderError(
                "google",
                f"Provider returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.ConnectError as e:
            logger.warning("Google Maps geocoder connection error")
            raise GeocodingProviderError("google", "Connection to geocoding provider failed") from e
        except GeocodingProviderError:
            raise
        except Exception as e:
            logger.exception("Google Maps geocoder unexpected error")
            raise GeocodingProviderError("google", f"Unexpected error: {e}") from e

    def _check_response(self, data: dict[str, Any]) -> dict[str, Any] | None:
        """Validate the API status and return the payload when it carries results.

        Raises:
            GeocodingProviderError: On API-specific error statuses.
        """
        api_status = data.get("status", "UNKNOWN")

        if api_status == "ZERO_RESULTS":
            return None

        if api_status in ("REQUEST_DENIED", "OVER_QUERY_LIMIT", "INVALID_REQUEST"):
            msg = data.get("error_message", api_status)
            raise GeocodingProviderError("google", f"API error: {msg}")

        if api_status != "OK":
            raise GeocodingProviderError("google", f"Unexpected API status: {api_status}")

        if not data.get("results"):
            return None

        return data
