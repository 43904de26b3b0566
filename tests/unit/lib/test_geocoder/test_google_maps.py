"""Unit tests for Google Maps geocoder provider."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from laundromat_ops.lib.geocoder.base import GeocodingProviderError
from laundromat_ops.lib.geocoder.google_maps import GOOGLE_API_URL, GoogleMapsGeocoder


def _make_response(status_code: int = 200, json_data: dict | None = None) -> httpx.Response:
    """Build a fake httpx.Response."""
    return httpx.Response(
        status_code=status_code,
        json=json_data if json_data is not None else {},
        request=httpx.Request("GET", GOOGLE_API_URL),
    )


class TestGoogleMapsResponseChecks:
    """Tests for Google Maps API status handling."""

    def setup_method(self) -> None:
        self.geocoder: GoogleMapsGeocoder = GoogleMapsGeocoder(api_key="test-key")

    def test_ok_returns_raw_payload(self, google_payload: dict) -> None:
        assert self.geocoder._check_response(google_payload) is google_payload

    def test_zero_results(self) -> None:
        assert self.geocoder._check_response({"status": "ZERO_RESULTS", "results": []}) is None

    def test_empty_results_returns_none(self) -> None:
        assert self.geocoder._check_response({"status": "OK", "results": []}) is None

    def test_request_denied_raises(self) -> None:
        data = {"status": "REQUEST_DENIED", "error_message": "Invalid API key"}
        with pytest.raises(GeocodingProviderError, match="API error: Invalid API key"):
            self.geocoder._check_response(data)

    def test_over_query_limit_raises(self) -> None:
        data = {"status": "OVER_QUERY_LIMIT"}
        with pytest.raises(GeocodingProviderError, match="API error: OVER_QUERY_LIMIT"):
            self.geocoder._check_response(data)

    def test_unknown_status_raises(self) -> None:
        with pytest.raises(GeocodingProviderError, match="Unexpected API status"):
            self.geocoder._check_response({"status": "UNKNOWN_ERROR"})


class TestGoogleMapsRequests:
    """Tests for request parameters sent to the API."""

    async def test_reverse_geocode_sends_latlng(self, google_payload: dict) -> None:
        geocoder = GoogleMapsGeocoder(api_key="test-key")
        with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = _make_response(json_data=google_payload)
            result = await geocoder.reverse_geocode(30.2672, -97.7431)

        assert result == google_payload
        params = mock_get.call_args.kwargs["params"]
        assert params == {"latlng": "30.2672,-97.7431", "key": "test-key"}

    async def test_geocode_sends_address_and_region(self, google_payload: dict) -> None:
        geocoder = GoogleMapsGeocoder(api_key="test-key", region="us")
        with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = _make_response(json_data=google_payload)
            result = await geocoder.geocode("123 Main St, Austin, TX")

        assert result == google_payload
        params = mock_get.call_args.kwargs["params"]
        assert params["address"] == "123 Main St, Austin, TX"
        assert params["region"] == "us"
        assert params["key"] == "test-key"


class TestGoogleMapsGeocoderErrors:
    """Tests for GoogleMapsGeocoder error differentiation."""

    async def test_timeout_raises_provider_error(self) -> None:
        geocoder = GoogleMapsGeocoder(api_key="test-key", timeout=0.1)
        with (
            patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get,
            pytest.raises(GeocodingProviderError, match="timed out"),
        ):
            mock_get.side_effect = httpx.TimeoutException("Connection timed out")
            await geocoder.reverse_geocode(30.0, -97.0)

    async def test_connection_error_raises_provider_error(self) -> None:
        geocoder = GoogleMapsGeocoder(api_key="test-key")
        with (
            patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get,
            pytest.raises(GeocodingProviderError, match="Connection"),
        ):
            mock_get.side_effect = httpx.ConnectError("Connection refused")
            await geocoder.geocode("123 MAIN ST")

    async def test_http_error_carries_status_code(self) -> None:
        geocoder = GoogleMapsGeocoder(api_key="test-key")
        with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = _make_response(status_code=503)
            with pytest.raises(GeocodingProviderError) as exc_info:
                await geocoder.reverse_geocode(30.0, -97.0)

        assert exc_info.value.status_code == 503
        assert exc_info.value.provider_name == "google"

    async def test_api_error_status_propagates(self) -> None:
        geocoder = GoogleMapsGeocoder(api_key="test-key")
        with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = _make_response(json_data={"status": "REQUEST_DENIED"})
            with pytest.raises(GeocodingProviderError, match="API error"):
                await geocoder.reverse_geocode(30.0, -97.0)
