"""
Address to UTM
==============
Geocodes a delimited list of postal addresses through the Google Maps
Geocoding API and appends UTM easting/northing/zone to every row.

Public API::

    from address_to_utm import AddressToUtm, AddressToUtmConfig, to_utm
"""

from address_to_utm.classifier import Decision, classify
from address_to_utm.client import GeocodeResult, GoogleGeocodeClient
from address_to_utm.pacing import RequestPacer
from address_to_utm.pipeline import AddressToUtm, AddressToUtmConfig, RunSummary
from address_to_utm.projection import LatLon, UtmCoordinate, to_latlon, to_utm
from address_to_utm.query import GeocodeQuery, build_query
from address_to_utm.records import Record, RecordStore

__all__ = [
    "AddressToUtm",
    "AddressToUtmConfig",
    "RunSummary",
    "Record",
    "RecordStore",
    "GeocodeQuery",
    "build_query",
    "GeocodeResult",
    "GoogleGeocodeClient",
    "Decision",
    "classify",
    "RequestPacer",
    "LatLon",
    "UtmCoordinate",
    "to_utm",
    "to_latlon",
]
__version__ = "1.0.0"
