"""
address-to-utm — Shared Foundation
===================================
Re-exports the base tool class, exception hierarchy, and validator
utilities so the tool modules can import from a single location::

    from address_to_utm.shared import GeoTool, Validators
    from address_to_utm.shared.exceptions import ProjectionError
"""

from address_to_utm.shared.base_tool import GeoTool
from address_to_utm.shared.exceptions import (
    AddressToUtmError,
    ColumnNotFoundError,
    GeocodingError,
    GeocodingTransportError,
    InputValidationError,
    InvalidZoneError,
    MalformedRowError,
    OutputWriteError,
    ProjectionError,
)
from address_to_utm.shared.validators import Validators

__all__ = [
    "GeoTool",
    "Validators",
    "AddressToUtmError",
    "InputValidationError",
    "ColumnNotFoundError",
    "MalformedRowError",
    "InvalidZoneError",
    "GeocodingError",
    "GeocodingTransportError",
    "ProjectionError",
    "OutputWriteError",
]
