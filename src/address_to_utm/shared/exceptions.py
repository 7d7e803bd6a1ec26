"""
address-to-utm — Custom Exception Hierarchy
============================================
Every module in the package raises exceptions from this module so callers
can catch them at the right level of granularity.

Hierarchy::

    AddressToUtmError                    ← catch-all base
    ├── InputValidationError             ← bad files, missing columns, etc.
    │   ├── ColumnNotFoundError          ← required header column missing
    │   ├── MalformedRowError            ← row field count ≠ header count
    │   └── InvalidZoneError             ← unparseable forced-zone value
    ├── GeocodingError                   ← geocoder API / parse failures
    │   └── GeocodingTransportError      ← network, HTTP or body decode failure
    ├── ProjectionError                  ← lat/lon out of range, bad UTM zone
    └── OutputWriteError                 ← cannot write to output path

Usage::

    from address_to_utm.shared.exceptions import ProjectionError

    raise ProjectionError(f"Latitude {lat} outside UTM range")
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


class AddressToUtmError(Exception):
    """Base exception for the address-to-utm tool.

    Catch this to handle any tool-specific error without caring about
    the exact subtype.

    Args:
        message: Human-readable description of the error.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message: str = message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


class InputValidationError(AddressToUtmError):
    """Raised when the tool's inputs fail pre-processing validation.

    This is the parent class for more specific input problems.
    """


class ColumnNotFoundError(InputValidationError):
    """Raised when an expected column is absent from the input header.

    Args:
        column: The name of the missing column.
        available: List of column names that ARE present, used to
                   generate a helpful error message.

    Example::

        raise ColumnNotFoundError("address", ["street", "country"])
    """

    def __init__(self, column: str, available: list[str]) -> None:
        available_str = ", ".join(f"'{c}'" for c in available)
        super().__init__(
            f"Column '{column}' not found. Available columns: {available_str}"
        )
        self.column: str = column
        self.available: list[str] = available


class MalformedRowError(InputValidationError):
    """Raised when a data row does not have as many fields as the header.

    Args:
        line_number: Physical line number of the row in the input file.
        expected: Number of columns declared by the header.
        actual: Number of fields found on the row.
    """

    def __init__(self, line_number: int, expected: int, actual: int) -> None:
        super().__init__(
            f"Malformed row on line {line_number}: expected {expected} "
            f"field(s) but found {actual}."
        )
        self.line_number: int = line_number
        self.expected: int = expected
        self.actual: int = actual


class InvalidZoneError(InputValidationError):
    """Raised when a row's forced-zone column holds an unusable designator.

    Args:
        line_number: Physical line number of the row in the input file.
        value: The designator as written in the file.
        reason: Why it was rejected.
    """

    def __init__(self, line_number: int, value: str, reason: str) -> None:
        super().__init__(f"Invalid UTM zone on line {line_number}: {reason}")
        self.line_number: int = line_number
        self.value: str = value
        self.reason: str = reason


# ---------------------------------------------------------------------------
# Geocoding
# ---------------------------------------------------------------------------


class GeocodingError(AddressToUtmError):
    """Raised when a geocoding operation fails for any reason.

    Subclass this for provider-specific errors.
    """


class GeocodingTransportError(GeocodingError):
    """Raised when the geocoding endpoint cannot be reached or answers
    with something other than a JSON body.

    Covers timeouts, connection errors, non-2xx HTTP statuses and
    undecodable bodies.  Service-level statuses such as ``ZERO_RESULTS``
    arrive inside a successful HTTP response and never raise this.

    Args:
        url: The request URL (API key already redacted).
        reason: Underlying ``requests`` error message.
    """

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Geocoding request to {url} failed: {reason}")
        self.url: str = url
        self.reason: str = reason


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------


class ProjectionError(AddressToUtmError):
    """Raised when a coordinate cannot be projected to UTM.

    Common causes: latitude outside −80..84, longitude outside −180..180,
    or an unparseable forced zone designator.
    """


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class OutputWriteError(AddressToUtmError):
    """Raised when the tool cannot write its output to disk.

    Args:
        output_path: String representation of the path that failed.
        reason: Underlying OS error message.

    Example::

        raise OutputWriteError("/read-only/dir/out.csv", "Permission denied")
    """

    def __init__(self, output_path: str, reason: str) -> None:
        super().__init__(
            f"Failed to write output to '{output_path}': {reason}"
        )
        self.output_path: str = output_path
        self.reason: str = reason
