"""
Address to UTM — Pipeline Driver
=================================
Reads a ``;``-delimited address list, geocodes every row through the Google
Maps Geocoding API, projects the first match to UTM, and writes one output
row per resolved address.

Architecture:
    Two-phase: the whole input is parsed into a
    :class:`~address_to_utm.records.RecordStore` (input errors surface before
    any network call), then records are processed strictly in ordinal order:

    1. build the query (:func:`~address_to_utm.query.build_query`)
    2. pace (:class:`~address_to_utm.pacing.RequestPacer`)
    3. geocode (:class:`~address_to_utm.client.GoogleGeocodeClient`)
    4. classify (:func:`~address_to_utm.classifier.classify`)
    5. project (:func:`~address_to_utm.projection.to_utm`)
    6. write the output row

Output format:
    Header = input columns (forced-zone column removed, upper-cased) +
    ``UTM_EAST;UTM_NORTH;UTM_ZONE``.  Pass-through values that contain the
    delimiter, a double quote or a line break are wrapped in double quotes
    with embedded quotes doubled; other values are written bare.  The zone
    is always quoted, easting/northing never are.

Usage::

    from pathlib import Path
    from address_to_utm.pipeline import AddressToUtm, AddressToUtmConfig

    AddressToUtm(
        input_path=Path("addresses.csv"),
        output_path=Path("addresses_utm.csv"),
        config=AddressToUtmConfig(api_key="..."),
    ).run()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import pandas as pd

from address_to_utm.classifier import STATUS_OK, STATUS_ZERO_RESULTS, Decision, classify
from address_to_utm.client import DEFAULT_TIMEOUT, GoogleGeocodeClient
from address_to_utm.pacing import DEFAULT_BATCH_SIZE, DEFAULT_PAUSE_SECONDS, RequestPacer
from address_to_utm.projection import UtmCoordinate, to_utm
from address_to_utm.query import GOOGLE_GEOCODE_URL, build_query
from address_to_utm.records import REQUIRED_COLUMNS, ZONE_COLUMN, Record, RecordStore
from address_to_utm.shared.base_tool import GeoTool
from address_to_utm.shared.exceptions import (
    InputValidationError,
    OutputWriteError,
    ProjectionError,
)
from address_to_utm.shared.validators import Validators

logger = logging.getLogger("address_to_utm.pipeline")

UTM_EAST = "UTM_EAST"
UTM_NORTH = "UTM_NORTH"
UTM_ZONE = "UTM_ZONE"

_QUOTE = '"'


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class AddressToUtmConfig:
    """Configuration bundle for :class:`AddressToUtm`.

    Attributes:
        api_key: Google Maps Geocoding API key.
        endpoint: Geocoding endpoint URL.
        delimiter: Field delimiter for both input and output.
        zone_column: Input column that forces the UTM zone for a row.
        batch_size: Pause before every ``batch_size``-th request.
        pause_seconds: Length of that pause.
        timeout: HTTP timeout per request, in seconds.
        pad_short_rows: Pad rows with missing trailing fields instead of
                        rejecting the file.
        encoding: Text encoding of the input file.  ``utf-8-sig`` also
                  reads files saved with a byte order mark.
        output_encoding: Text encoding of the output file.
    """

    api_key: str
    endpoint: str = GOOGLE_GEOCODE_URL
    delimiter: str = ";"
    zone_column: str = ZONE_COLUMN
    batch_size: int = DEFAULT_BATCH_SIZE
    pause_seconds: float = DEFAULT_PAUSE_SECONDS
    timeout: float = DEFAULT_TIMEOUT
    pad_short_rows: bool = False
    encoding: str = "utf-8-sig"
    output_encoding: str = "utf-8"


@dataclass(frozen=True)
class RunSummary:
    """Outcome of one pipeline run.

    Attributes:
        records_read: Records parsed from the input.
        requests_issued: Geocoding calls made.
        rows_written: Output rows written.
        rows_skipped: Records dropped after a recoverable service status.
        halted_by: Status that stopped the batch, or ``None`` if every
                   record was processed.
    """

    records_read: int
    requests_issued: int
    rows_written: int
    rows_skipped: int
    halted_by: str | None = None

    @property
    def halted(self) -> bool:
        return self.halted_by is not None

    @property
    def rows_unprocessed(self) -> int:
        return self.records_read - self.requests_issued

    def summary(self) -> str:
        """Return a human-readable summary string for logging or display."""
        text = (
            f"Geocoded {self.rows_written}/{self.records_read} records "
            f"({self.rows_skipped} skipped, {self.requests_issued} requests)"
        )
        if self.halted:
            text += f" | halted by {self.halted_by}, {self.rows_unprocessed} not processed"
        return text


# ---------------------------------------------------------------------------
# Output formatting
# ---------------------------------------------------------------------------


def escape_value(value: str, delimiter: str = ";") -> str:
    """Quote *value* if it contains the delimiter, a quote or a line break."""
    if delimiter in value or _QUOTE in value or "\n" in value or "\r" in value:
        return _QUOTE + value.replace(_QUOTE, _QUOTE * 2) + _QUOTE
    return value


def format_header(columns: Sequence[str], delimiter: str = ";") -> str:
    """Output header line: upper-cased *columns* followed by the UTM columns."""
    return delimiter.join([c.upper() for c in columns] + [UTM_EAST, UTM_NORTH, UTM_ZONE])


def format_row(values: Sequence[str], utm: UtmCoordinate, delimiter: str = ";") -> str:
    """Output data line: escaped pass-through *values* followed by *utm*."""
    fields = [escape_value(v, delimiter) for v in values]
    fields += [str(utm.easting), str(utm.northing), f'"{utm.zone}"']
    return delimiter.join(fields)


# ---------------------------------------------------------------------------
# Main tool class
# ---------------------------------------------------------------------------


class AddressToUtm(GeoTool):
    """Geocode every address in a delimited file and write UTM coordinates.

    Rows the service cannot resolve are logged and left out of the output.
    ``OVER_QUERY_LIMIT`` halts the batch; rows written before the halt are
    kept.  Transport and projection errors propagate and end the run.

    Args:
        input_path: Path to the input file.
        output_path: Path for the output file.
        config: An :class:`AddressToUtmConfig`.
        client: Geocoding client; one is built from *config* if omitted.
        pacer: Request pacer; one is built from *config* if omitted.
        verbose: Enable DEBUG-level logging.
    """

    def __init__(
        self,
        input_path: Path,
        output_path: Path,
        config: AddressToUtmConfig,
        *,
        client: GoogleGeocodeClient | None = None,
        pacer: RequestPacer | None = None,
        verbose: bool = False,
    ) -> None:
        super().__init__(input_path, output_path, verbose=verbose)
        self.config: AddressToUtmConfig = config
        self._client = client
        self._pacer = pacer

        self._summary: RunSummary | None = None

    # ------------------------------------------------------------------
    # GeoTool abstract method implementations
    # ------------------------------------------------------------------

    def validate_inputs(self) -> None:
        """Validate the input file and configuration before any request.

        Raises:
            InputValidationError: If the file is missing or empty, or the API
                key is blank.
            ColumnNotFoundError: If ``address`` or ``country`` is missing
                from the header.
            OutputWriteError: If the output directory cannot be created.
        """
        Validators.assert_file_exists(self.input_path)
        Validators.assert_not_blank(self.config.api_key, "API key")
        Validators.assert_output_dir_writable(self.output_path)

        # Peek at the header row to confirm the required columns exist
        try:
            df_peek = pd.read_csv(
                self.input_path,
                sep=self.config.delimiter,
                nrows=0,
                dtype=str,
                encoding=self.config.encoding,
            )
        except pd.errors.EmptyDataError as exc:
            raise InputValidationError(
                f"Input file '{self.input_path}' is empty; a header row is required."
            ) from exc
        df_peek.columns = [str(c).strip().lower() for c in df_peek.columns]
        Validators.assert_columns_exist(df_peek, REQUIRED_COLUMNS)

        logger.debug("Inputs validated successfully.")

    def process(self) -> None:
        """Geocode and project every record, writing rows as they resolve.

        Raises:
            MalformedRowError: If a row breaks the short-row policy.
            InvalidZoneError: If a row forces an unusable UTM zone.
            GeocodingTransportError: If a request fails at network level.
            ProjectionError: If a resolved coordinate cannot be projected.
            OutputWriteError: If the output file cannot be opened.
        """
        store = RecordStore.from_path(
            self.input_path,
            self.config.delimiter,
            pad_short_rows=self.config.pad_short_rows,
            zone_column=self.config.zone_column,
            encoding=self.config.encoding,
        )
        logger.info("Geocoding %d record(s) from %s", len(store), self.input_path)

        client = self._client or GoogleGeocodeClient(timeout=self.config.timeout)
        pacer = self._pacer or RequestPacer(self.config.batch_size, self.config.pause_seconds)
        try:
            self._summary = self._process_records(store, client, pacer)
        finally:
            if self._client is None:
                client.close()

        if self._summary.halted:
            logger.warning(self._summary.summary())
        else:
            logger.info(self._summary.summary())

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _process_records(
        self,
        store: RecordStore,
        client: GoogleGeocodeClient,
        pacer: RequestPacer,
    ) -> RunSummary:
        delimiter = self.config.delimiter
        columns = store.output_columns
        written = skipped = 0
        halted_by: str | None = None

        try:
            fh = open(self.output_path, "w", encoding=self.config.output_encoding)
        except OSError as exc:
            raise OutputWriteError(str(self.output_path), str(exc)) from exc

        requests_before = pacer.requests_issued
        with fh:
            fh.write(format_header(columns, delimiter) + "\n")

            for record in store:
                query = build_query(record, self.config.api_key, self.config.endpoint)
                pacer.before_request()
                result = client.geocode(query)

                status = result.status
                if status == STATUS_OK and result.first is None:
                    status = STATUS_ZERO_RESULTS
                decision = classify(status, result.error_message, query.redacted_url)

                if decision is Decision.STOP:
                    halted_by = status
                    break
                if decision is Decision.CONTINUE:
                    skipped += 1
                    continue

                location = result.first
                utm = self._project(record, location.latitude, location.longitude)  # type: ignore[union-attr]
                fh.write(format_row(record.select(columns), utm, delimiter) + "\n")
                fh.flush()
                written += 1
                logger.debug(
                    "  ✓ record %d → (%.3f, %.3f, %s)",
                    record.index, utm.easting, utm.northing, utm.zone,
                )

        return RunSummary(
            records_read=len(store),
            requests_issued=pacer.requests_issued - requests_before,
            rows_written=written,
            rows_skipped=skipped,
            halted_by=halted_by,
        )

    def _project(self, record: Record, latitude: float, longitude: float) -> UtmCoordinate:
        """Project one record's coordinate, honouring its forced zone."""
        try:
            return to_utm(latitude, longitude, record.zone_override)
        except ProjectionError as exc:
            raise ProjectionError(f"Record {record.index}: {exc.message}") from exc

    @property
    def summary(self) -> RunSummary | None:
        """The :class:`RunSummary` from the last :meth:`run` call.

        Returns ``None`` if :meth:`run` has not completed yet.
        """
        return self._summary
