"""
Record Store
============
Reads the ``;``-delimited address list into immutable :class:`Record`
objects keyed by their ordinal position.

The header line fixes the column set.  Every data row is matched to it
positionally, so a row with a missing trailing field is a schema error,
not a silently shorter record.

Short-row policy:
    By default a row with fewer fields than the header raises
    :class:`~address_to_utm.shared.exceptions.MalformedRowError`.  With
    ``pad_short_rows=True`` the missing trailing fields are filled with
    ``""`` and a warning is logged.  Extra fields are tolerated only when
    they are empty (a trailing delimiter); any other extra field raises.

    A non-empty forced-zone value must be a valid designator such as
    ``"32"`` or ``"32V"``; anything else raises
    :class:`~address_to_utm.shared.exceptions.InvalidZoneError` while the
    file is read.

Usage::

    store = RecordStore.from_path(Path("addresses.csv"))
    for record in store:
        print(record.index, record.address, record.country)
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from address_to_utm.projection import parse_zone
from address_to_utm.shared.exceptions import (
    ColumnNotFoundError,
    InputValidationError,
    InvalidZoneError,
    MalformedRowError,
    ProjectionError,
)

logger = logging.getLogger("address_to_utm.records")

ADDRESS_COLUMN = "address"
COUNTRY_COLUMN = "country"
ZONE_COLUMN = "utm_zone"
REQUIRED_COLUMNS = (ADDRESS_COLUMN, COUNTRY_COLUMN)

_QUOTE = '"'


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Record:
    """One input row.

    Attributes:
        index: 1-based ordinal (input line number minus the header line).
        values: Column name (lowercase) → trimmed value, in header order.
        zone_column: Name of the optional forced-zone column.
    """

    index: int
    values: dict[str, str]
    zone_column: str = ZONE_COLUMN

    @property
    def address(self) -> str:
        return self.values[ADDRESS_COLUMN]

    @property
    def country(self) -> str:
        return self.values[COUNTRY_COLUMN]

    @property
    def zone_override(self) -> str | None:
        """The forced UTM zone for this row, or ``None`` when absent/blank."""
        value = self.values.get(self.zone_column, "")
        return value or None

    def get(self, column: str, default: str = "") -> str:
        """Look up a pass-through or optional column (case-insensitive)."""
        return self.values.get(column.strip().lower(), default)

    def select(self, columns: Iterable[str]) -> list[str]:
        """Return the values for *columns*, in the order given."""
        return [self.values[c] for c in columns]


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def clean_value(raw: str) -> str:
    """Trim whitespace and strip one pair of surrounding double quotes."""
    value = raw.strip()
    if len(value) >= 2 and value.startswith(_QUOTE) and value.endswith(_QUOTE):
        value = value[1:-1].strip()
    return value


def parse_header(fields: Sequence[str]) -> list[str]:
    """Turn the header fields into lowercase, trimmed column names.

    Raises:
        ColumnNotFoundError: If ``address`` or ``country`` is missing.
    """
    header = [clean_value(f).lower() for f in fields]
    # A trailing delimiter on the header line yields one empty name.
    while header and not header[-1]:
        header.pop()
    for column in REQUIRED_COLUMNS:
        if column not in header:
            raise ColumnNotFoundError(column, header)
    return header


def parse_row(
    fields: Sequence[str],
    header: Sequence[str],
    index: int,
    *,
    line_number: int | None = None,
    pad_short_rows: bool = False,
    zone_column: str = ZONE_COLUMN,
) -> Record:
    """Build a :class:`Record` from one row by positional correspondence.

    Args:
        fields: Raw field strings as split by the reader.
        header: Column names from :func:`parse_header`.
        index: Ordinal assigned to the record.
        line_number: Physical line for error messages; defaults to
                     ``index + 1``.
        pad_short_rows: Pad missing trailing fields with ``""`` instead of
                        raising.
        zone_column: Name of the forced-zone column.

    Raises:
        MalformedRowError: If the field count does not match the header
            (subject to the short-row policy above).
        InvalidZoneError: If the forced-zone value is not a valid
            designator.
    """
    line = line_number if line_number is not None else index + 1
    expected = len(header)
    values = [clean_value(f) for f in fields]

    if len(values) > expected:
        extra = values[expected:]
        if any(extra):
            raise MalformedRowError(line, expected, len(values))
        values = values[:expected]

    if len(values) < expected:
        if not pad_short_rows:
            raise MalformedRowError(line, expected, len(values))
        logger.warning(
            "Line %d has %d of %d field(s); padding with empty values.",
            line, len(values), expected,
        )
        values.extend([""] * (expected - len(values)))

    record = Record(index=index, values=dict(zip(header, values)), zone_column=zone_column)
    if record.zone_override is not None:
        try:
            parse_zone(record.zone_override)
        except ProjectionError as exc:
            raise InvalidZoneError(line, record.zone_override, exc.message) from exc
    return record


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class RecordStore:
    """All records of one input file, held in memory in ordinal order.

    Args:
        header: Lowercase column names.
        records: Records keyed by ordinal.
        zone_column: Name of the forced-zone column, excluded from output.
    """

    def __init__(
        self,
        header: list[str],
        records: dict[int, Record],
        zone_column: str = ZONE_COLUMN,
    ) -> None:
        self.header = header
        self.records = records
        self.zone_column = zone_column

    @classmethod
    def from_path(
        cls,
        path: Path,
        delimiter: str = ";",
        *,
        pad_short_rows: bool = False,
        zone_column: str = ZONE_COLUMN,
        encoding: str = "utf-8-sig",
    ) -> "RecordStore":
        """Read and parse the whole file.

        Quoted fields may contain the delimiter.  Blank lines are skipped.
        The default ``utf-8-sig`` encoding drops a leading byte order mark.

        Raises:
            InputValidationError: If the file is empty.
            ColumnNotFoundError: If a required column is missing.
            MalformedRowError: On a row that breaks the short-row policy.
            InvalidZoneError: On a row with an unusable forced zone.
        """
        with open(path, newline="", encoding=encoding) as fh:
            return cls.from_lines(
                fh,
                delimiter,
                pad_short_rows=pad_short_rows,
                zone_column=zone_column,
            )

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        delimiter: str = ";",
        *,
        pad_short_rows: bool = False,
        zone_column: str = ZONE_COLUMN,
    ) -> "RecordStore":
        """Parse an already-open line source (see :meth:`from_path`)."""
        reader = csv.reader(lines, delimiter=delimiter, quotechar=_QUOTE, skipinitialspace=True)
        try:
            header = parse_header(next(reader))
        except StopIteration:
            raise InputValidationError("Input file is empty; a header row is required.") from None

        zone_column = zone_column.strip().lower()
        records: dict[int, Record] = {}
        for fields in reader:
            if not any(f.strip() for f in fields):
                continue
            index = reader.line_num - 1
            records[index] = parse_row(
                fields,
                header,
                index,
                line_number=reader.line_num,
                pad_short_rows=pad_short_rows,
                zone_column=zone_column,
            )

        logger.debug("Read %d record(s) with columns %s", len(records), header)
        return cls(header, records, zone_column=zone_column)

    @property
    def output_columns(self) -> list[str]:
        """Header columns carried to the output (forced-zone column removed)."""
        return [c for c in self.header if c != self.zone_column]

    def __iter__(self) -> Iterator[Record]:
        for index in sorted(self.records):
            yield self.records[index]

    def __len__(self) -> int:
        return len(self.records)
