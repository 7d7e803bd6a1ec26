"""
Geocode Client
==============
Sends one :class:`~address_to_utm.query.GeocodeQuery` to the Google Maps
Geocoding API and parses the JSON body into a :class:`GeocodeResult`.

Service-level outcomes (``ZERO_RESULTS``, ``OVER_QUERY_LIMIT`` …) come back
as ordinary results carrying a status string; deciding what to do with them
is :mod:`address_to_utm.classifier`'s job.  Transport-level failures —
timeouts, connection errors, non-2xx HTTP statuses, non-JSON bodies — are
raised as :class:`~address_to_utm.shared.exceptions.GeocodingTransportError`
and are never retried.

Reference:
    https://developers.google.com/maps/documentation/geocoding
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

from address_to_utm.projection import LatLon
from address_to_utm.query import GeocodeQuery, redact_key
from address_to_utm.shared.exceptions import GeocodingError, GeocodingTransportError

logger = logging.getLogger("address_to_utm.client")

DEFAULT_TIMEOUT = 10.0


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GeocodeResult:
    """Parsed geocoding response.

    Attributes:
        status: Service status string (``"OK"``, ``"ZERO_RESULTS"`` …).
        error_message: Optional explanation supplied by the service.
        candidates: Locations returned, in service order.  Only the first
                    is ever used.
    """

    status: str
    error_message: str | None = None
    candidates: tuple[LatLon, ...] = ()

    @property
    def first(self) -> LatLon | None:
        """The first candidate, or ``None`` when there are none."""
        return self.candidates[0] if self.candidates else None

    @classmethod
    def from_json(cls, body: dict[str, Any]) -> "GeocodeResult":
        """Build a result from a decoded Geocoding API response body.

        Raises:
            GeocodingError: If a result entry lacks
                ``geometry.location.lat``/``lng``.
        """
        candidates = []
        for entry in body.get("results") or []:
            try:
                location = entry["geometry"]["location"]
                candidates.append(
                    LatLon(latitude=float(location["lat"]), longitude=float(location["lng"]))
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise GeocodingError(
                    f"Unexpected result shape in geocoding response: {entry!r}"
                ) from exc

        return cls(
            status=str(body.get("status", "")),
            error_message=body.get("error_message"),
            candidates=tuple(candidates),
        )


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class GoogleGeocodeClient:
    """Synchronous client for the Google Maps Geocoding API.

    Args:
        timeout: HTTP request timeout in seconds.  Applied to every call so
                 a stalled connection cannot hang the batch.
        session: Optional pre-configured :class:`requests.Session`.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.timeout = timeout
        self._session = session or requests.Session()

    def fetch(self, query: GeocodeQuery) -> dict[str, Any]:
        """Issue one GET for *query* and return the decoded JSON body.

        Raises:
            GeocodingTransportError: On any network, HTTP or decode failure.
        """
        logger.debug("GET %s", query.redacted_url)
        try:
            response = self._session.get(query.url, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as exc:
            raise GeocodingTransportError(query.redacted_url, redact_key(str(exc))) from exc

        if not isinstance(body, dict):
            raise GeocodingTransportError(
                query.redacted_url, f"expected a JSON object, got {type(body).__name__}"
            )
        return body

    def geocode(self, query: GeocodeQuery) -> GeocodeResult:
        """Fetch and parse *query*.

        Logs (without failing) when the service returns more than one
        candidate.
        """
        result = GeocodeResult.from_json(self.fetch(query))
        if len(result.candidates) > 1:
            logger.debug(
                "Record %d: %d candidates returned, using the first.",
                query.record_index, len(result.candidates),
            )
        return result

    def close(self) -> None:
        self._session.close()
