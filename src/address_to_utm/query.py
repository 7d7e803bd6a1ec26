"""
Geocode Request Builder
=======================
Turns one :class:`~address_to_utm.records.Record` into the Google
Geocoding API request for it.  Pure string work; no network access.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import quote_plus

from address_to_utm.records import Record

GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

_KEY_PARAM = re.compile(r"(key=)[^&\s'\"]*")


@dataclass(frozen=True)
class GeocodeQuery:
    """A fully-formed geocode request for one record.

    Attributes:
        record_index: Ordinal of the record this query was built from.
        parameters: Encoded query string
                    (``address=…&components=country:…&key=…``).
        url: Endpoint joined with :attr:`parameters`.
    """

    record_index: int
    parameters: str
    url: str

    @property
    def redacted_url(self) -> str:
        """:attr:`url` with the API key masked, safe for log output."""
        return redact_key(self.url)


def redact_key(text: str) -> str:
    """Mask every ``key=…`` query parameter in *text*."""
    return _KEY_PARAM.sub(r"\1***", text)


def _encode(value: str) -> str:
    return quote_plus(value.replace('"', ""))


def build_query(
    record: Record,
    api_key: str,
    endpoint: str = GOOGLE_GEOCODE_URL,
) -> GeocodeQuery:
    """Build the geocode request for *record*.

    Embedded double quotes are removed from the address and country before
    form-style percent encoding (spaces become ``+``).  The same record and
    key always produce the same request string.

    Example::

        build_query(record, "KEY").parameters
        # 'address=Karl+Johans+gate+1&components=country:NO&key=KEY'
    """
    parameters = (
        f"address={_encode(record.address)}"
        f"&components=country:{_encode(record.country)}"
        f"&key={api_key}"
    )
    return GeocodeQuery(
        record_index=record.index,
        parameters=parameters,
        url=f"{endpoint}?{parameters}",
    )
