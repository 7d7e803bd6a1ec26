"""Mock Google Geocoding API bodies shared by the test modules."""

from __future__ import annotations

from address_to_utm.query import GOOGLE_GEOCODE_URL

GEOCODE_URL = GOOGLE_GEOCODE_URL

OSLO = (59.9, 10.7)
BERGEN = (60.39, 5.32)
CAPE_TOWN = (-33.92, 18.42)


def google_hit(lat: float, lng: float, *extra: tuple[float, float]) -> dict:
    """Build a mock Google Geocoding ``OK`` response."""
    locations = [(lat, lng), *extra]
    return {
        "status": "OK",
        "results": [
            {
                "formatted_address": f"Result {i}",
                "geometry": {"location": {"lat": la, "lng": ln}},
            }
            for i, (la, ln) in enumerate(locations)
        ],
    }


def google_status(status: str, error_message: str | None = None) -> dict:
    """Build a mock Google Geocoding non-``OK`` response."""
    body: dict = {"status": status, "results": []}
    if error_message is not None:
        body["error_message"] = error_message
    return body
