"""
UTM Projector
=============
Projects WGS84 latitude/longitude pairs to Universal Transverse Mercator
easting/northing with :mod:`pyproj`.

Zone selection:
    * Natural zone — ``floor((lon + 180) / 6) + 1`` with the Norway
      (zone 32 widened) and Svalbard (zones 31/33/35/37) exceptions.
    * Forced zone — a caller-supplied designator such as ``"31V"`` or
      ``"31"``.  The same lat/lon is projected onto that zone's central
      meridian instead of the natural one.

Hemisphere:
    Northing uses the EPSG 326xx (north) or 327xx (south, 10 000 000 m
    false northing) definition.  For natural zones and bare forced zone
    numbers the latitude picks the hemisphere; a forced band letter picks
    it explicitly so that the returned designator always describes the
    CRS the coordinate was projected into.

Usage::

    from address_to_utm.projection import to_utm

    utm = to_utm(59.9, 10.7)          # UtmCoordinate(easting=…, zone='32V')
    forced = to_utm(59.9, 10.7, "31V")
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from functools import lru_cache

import pyproj

from address_to_utm.shared.exceptions import ProjectionError

logger = logging.getLogger("address_to_utm.projection")

MIN_LATITUDE = -80.0
MAX_LATITUDE = 84.0

# Latitude bands C..X, 8° each from −80°, skipping I and O.  X spans 72..84.
BANDS = "CDEFGHJKLMNPQRSTUVWX"

_ZONE_PATTERN = re.compile(r"^(\d{1,2})([A-Z])?$")

_WGS84 = "EPSG:4326"


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LatLon:
    """A WGS84 coordinate in decimal degrees."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class UtmCoordinate:
    """A projected UTM coordinate.

    Attributes:
        easting: Metres east of the zone's false origin.
        northing: Metres north of the equator (plus 10 000 000 m in the
                  southern hemisphere).
        zone: Zone designator — zone number followed by the latitude band
              (e.g. ``"32V"``).
    """

    easting: float
    northing: float
    zone: str

    @property
    def zone_number(self) -> int:
        return parse_zone(self.zone)[0]

    @property
    def band(self) -> str:
        return self.zone[-1]

    @property
    def southern(self) -> bool:
        return self.band < "N"


# ---------------------------------------------------------------------------
# Zone helpers
# ---------------------------------------------------------------------------


def latitude_band(latitude: float) -> str:
    """Return the UTM latitude band letter for *latitude*."""
    _check_latitude(latitude)
    index = int((latitude - MIN_LATITUDE) // 8)
    return BANDS[min(index, len(BANDS) - 1)]


def natural_zone_number(latitude: float, longitude: float) -> int:
    """Return the UTM zone number the coordinate falls in."""
    _check_longitude(longitude)
    zone = int(math.floor((longitude + 180.0) / 6.0)) + 1
    zone = min(zone, 60)

    # Norway: zone 32 is widened to 3°E..12°E between 56°N and 64°N.
    if 56.0 <= latitude < 64.0 and 3.0 <= longitude < 12.0:
        return 32

    # Svalbard: zones 32, 34 and 36 are not used above 72°N.
    if 72.0 <= latitude <= MAX_LATITUDE:
        if 0.0 <= longitude < 9.0:
            return 31
        if 9.0 <= longitude < 21.0:
            return 33
        if 21.0 <= longitude < 33.0:
            return 35
        if 33.0 <= longitude < 42.0:
            return 37

    return zone


def parse_zone(designator: str) -> tuple[int, str | None]:
    """Split a zone designator into ``(number, band)``.

    Accepts ``"32"`` or ``"32V"`` in any case, surrounding whitespace
    ignored.  ``band`` is ``None`` for a bare zone number.

    Raises:
        ProjectionError: If the number is not 1..60 or the band letter is
            not a valid UTM band.
    """
    match = _ZONE_PATTERN.match(designator.strip().upper())
    if match is None:
        raise ProjectionError(f"Invalid UTM zone designator: {designator!r}")

    number = int(match.group(1))
    band = match.group(2)
    if not 1 <= number <= 60:
        raise ProjectionError(
            f"Invalid UTM zone designator: {designator!r} (zone must be 1..60)"
        )
    if band is not None and band not in BANDS:
        raise ProjectionError(
            f"Invalid UTM zone designator: {designator!r} "
            f"(band must be one of {BANDS})"
        )
    return number, band


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------


def to_utm(
    latitude: float,
    longitude: float,
    forced_zone: str | None = None,
) -> UtmCoordinate:
    """Project a WGS84 coordinate to UTM.

    Args:
        latitude: Degrees, −80..84.
        longitude: Degrees, −180..180.
        forced_zone: Optional designator (``"31V"`` or ``"31"``) that
                     overrides the natural zone.

    Returns:
        A :class:`UtmCoordinate` with full-precision easting/northing.

    Raises:
        ProjectionError: If the coordinate is outside the UTM domain, the
            forced zone cannot be parsed, or pyproj yields a non-finite
            result.
    """
    _check_latitude(latitude)
    _check_longitude(longitude)

    if forced_zone:
        number, band = parse_zone(forced_zone)
        if band is None:
            band = latitude_band(latitude)
        elif band != latitude_band(latitude):
            logger.debug(
                "Forced band %s differs from natural band %s for (%.6f, %.6f)",
                band, latitude_band(latitude), latitude, longitude,
            )
        southern = band < "N"
    else:
        number = natural_zone_number(latitude, longitude)
        band = latitude_band(latitude)
        southern = latitude < 0

    easting, northing = _forward(number, southern).transform(longitude, latitude)
    if not (math.isfinite(easting) and math.isfinite(northing)):
        raise ProjectionError(
            f"Projection of ({latitude}, {longitude}) into zone {number}{band} "
            "produced a non-finite result."
        )

    return UtmCoordinate(easting=float(easting), northing=float(northing), zone=f"{number}{band}")


def to_latlon(easting: float, northing: float, zone: str) -> LatLon:
    """Inverse of :func:`to_utm`.

    Args:
        easting: Metres.
        northing: Metres.
        zone: Designator including the band letter, which decides the
              hemisphere.

    Raises:
        ProjectionError: If *zone* has no band letter or is invalid.
    """
    number, band = parse_zone(zone)
    if band is None:
        raise ProjectionError(
            f"Zone {zone!r} needs a latitude band letter to decide the hemisphere."
        )
    longitude, latitude = _inverse(number, band < "N").transform(easting, northing)
    return LatLon(latitude=float(latitude), longitude=float(longitude))


def _epsg_code(zone_number: int, southern: bool) -> str:
    return f"EPSG:{(32700 if southern else 32600) + zone_number}"


@lru_cache(maxsize=None)
def _forward(zone_number: int, southern: bool) -> pyproj.Transformer:
    return pyproj.Transformer.from_crs(_WGS84, _epsg_code(zone_number, southern), always_xy=True)


@lru_cache(maxsize=None)
def _inverse(zone_number: int, southern: bool) -> pyproj.Transformer:
    return pyproj.Transformer.from_crs(_epsg_code(zone_number, southern), _WGS84, always_xy=True)


def _check_latitude(latitude: float) -> None:
    if not MIN_LATITUDE <= latitude <= MAX_LATITUDE:
        raise ProjectionError(
            f"Latitude {latitude} is outside the UTM range "
            f"[{MIN_LATITUDE}, {MAX_LATITUDE}]."
        )


def _check_longitude(longitude: float) -> None:
    if not -180.0 <= longitude <= 180.0:
        raise ProjectionError(
            f"Longitude {longitude} is outside the range [-180, 180]."
        )
