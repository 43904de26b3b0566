"""Cache key normalization and address extraction from Google payloads."""

import re
from dataclasses import dataclass, field
from typing import Any

PLACEHOLDER_MARKER = "Placeholder"

_WHITESPACE = re.compile(r"\s+")


def normalize_query(text: str) -> str:
    """Normalize a freeform geocoding query into a cache key.

    Upper-cases, trims, and collapses internal whitespace so that trivially
    different spellings of the same address share one cache entry.
    """
    return _WHITESPACE.sub(" ", text.strip()).upper()


def reverse_geocode_query(latitude: float, longitude: float) -> str:
    """Build the cache key for a reverse geocoding request (six decimal places)."""
    return f"LATLNG:{latitude:.6f},{longitude:.6f}"


@dataclass
class ResolvedAddress:
    """Address components extracted from the best match of a geocoding response."""

    street_number: str = ""
    street: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    postal_code: str = ""
    formatted_address: str = ""
    place_id: str = ""
    types: list[str] = field(default_factory=list)

    @property
    def full_address(self) -> str:
        """Standard "<number> <street>, city, state, zip" form, skipping blanks."""
        street_line = f"{self.street_number} {self.street}" if self.street_number and self.street else ""
        parts = [street_line, self.city, self.state, self.postal_code]
        return ", ".join(p for p in parts if p)

    @classmethod
    def from_google_payload(cls, payload: dict[str, Any]) -> "ResolvedAddress | None":
        """Extract components from the first result of a Google Geocoding payload.

        Args:
            payload: Raw Google Geocoding API response.

        Returns:
            ResolvedAddress, or None if the payload has no results.
        """
        results = payload.get("results") or []
        if not results:
            return None

        best = results[0]
        resolved = cls(
            formatted_address=best.get("formatted_address", ""),
            place_id=best.get("place_id", ""),
            types=list(best.get("types", [])),
        )

        for component in best.get("address_components", []):
            types = component.get("types", [])
            if "street_number" in types:
                resolved.street_number = component.get("long_name", "")
            elif "route" in types:
                resolved.street = component.get("long_name", "")
            elif "locality" in types:
                resolved.city = component.get("long_name", "")
            elif "administrative_area_level_1" in types:
                # Two-letter abbreviation (e.g. CA)
                resolved.state = component.get("short_name", "")
            elif "country" in types:
                resolved.country = component.get("short_name", "")
            elif "postal_code" in types:
                resolved.postal_code = component.get("long_name", "")

        return resolved
