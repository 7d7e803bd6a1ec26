"""
Tests — Address to UTM Pipeline
================================
Integration tests for :class:`~address_to_utm.pipeline.AddressToUtm`.

All HTTP calls are mocked via the ``responses`` library.  Responses are
registered in input order; the pipeline consumes them strictly in order.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Callable

import pytest
import requests
import responses as rsps_lib

from address_to_utm.pacing import RequestPacer
from address_to_utm.pipeline import (
    AddressToUtm,
    AddressToUtmConfig,
    escape_value,
    format_header,
    format_row,
)
from address_to_utm.projection import UtmCoordinate, to_utm
from address_to_utm.shared.exceptions import (
    ColumnNotFoundError,
    GeocodingTransportError,
    InputValidationError,
    InvalidZoneError,
    MalformedRowError,
    ProjectionError,
)

from helpers import BERGEN, CAPE_TOWN, GEOCODE_URL, OSLO, google_hit, google_status

WriteInput = Callable[..., Path]


def _tool(input_path: Path, output_path: Path, pacer: RequestPacer | None = None, **config) -> AddressToUtm:
    cfg = AddressToUtmConfig(api_key="KEY", **config)
    return AddressToUtm(
        input_path,
        output_path,
        cfg,
        pacer=pacer or RequestPacer(pause_seconds=0),
    )


def _read_lines(path: Path) -> list[str]:
    return path.read_text(encoding="utf-8").splitlines()


def _read_rows(path: Path) -> list[list[str]]:
    with open(path, newline="", encoding="utf-8") as fh:
        return list(csv.reader(fh, delimiter=";"))


# ---------------------------------------------------------------------------
# Output formatting
# ---------------------------------------------------------------------------


class TestOutputFormatting:
    def test_header(self) -> None:
        assert format_header(["address", "country", "id"]) == (
            "ADDRESS;COUNTRY;ID;UTM_EAST;UTM_NORTH;UTM_ZONE"
        )

    def test_row_zone_quoted_numbers_bare(self) -> None:
        utm = UtmCoordinate(easting=1234.125, northing=2345.5, zone="32V")
        assert format_row(["Storgata 1", "NO", "1"], utm) == 'Storgata 1;NO;1;1234.125;2345.5;"32V"'

    def test_escape_delimiter(self) -> None:
        assert escape_value("Storgata 1; Oslo") == '"Storgata 1; Oslo"'

    def test_escape_embedded_quote(self) -> None:
        assert escape_value('The "Old" Mill') == '"The ""Old"" Mill"'

    def test_plain_value_untouched(self) -> None:
        assert escape_value("Storgata 1") == "Storgata 1"

    def test_custom_delimiter(self) -> None:
        assert escape_value("a;b", delimiter=",") == "a;b"
        assert escape_value("a,b", delimiter=",") == '"a,b"'


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestAddressToUtmHappyPath:
    @rsps_lib.activate
    def test_header_and_passthrough_columns(self, tmp_path: Path, write_input: WriteInput) -> None:
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_hit(*OSLO), status=200)
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_hit(*BERGEN), status=200)
        source = write_input([
            "ADDRESS;COUNTRY;ID",
            '"Karl Johans gate 1";"NO";1',
            '"Bryggen 2";"NO";2',
        ])
        output = tmp_path / "out.csv"
        _tool(source, output).run()

        lines = _read_lines(output)
        assert lines[0] == "ADDRESS;COUNTRY;ID;UTM_EAST;UTM_NORTH;UTM_ZONE"
        rows = _read_rows(output)[1:]
        assert [r[2] for r in rows] == ["1", "2"]
        assert [r[0] for r in rows] == ["Karl Johans gate 1", "Bryggen 2"]
        assert lines[1].endswith(';"32V"')

    @rsps_lib.activate
    def test_coordinates_match_projection(self, tmp_path: Path, write_input: WriteInput) -> None:
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_hit(*CAPE_TOWN), status=200)
        source = write_input(["address;country", "Adderley St;ZA"])
        output = tmp_path / "out.csv"
        _tool(source, output).run()

        row = _read_rows(output)[1]
        expected = to_utm(*CAPE_TOWN)
        assert float(row[2]) == pytest.approx(expected.easting)
        assert float(row[3]) == pytest.approx(expected.northing)
        assert row[4] == "34H"

    @rsps_lib.activate
    def test_zone_override_column(self, tmp_path: Path, write_input: WriteInput) -> None:
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_hit(*OSLO), status=200)
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_hit(*OSLO), status=200)
        source = write_input([
            "address;country;utm_zone;id",
            "Karl Johans gate 1;NO;31V;1",
            "Karl Johans gate 1;NO;;2",
        ])
        output = tmp_path / "out.csv"
        _tool(source, output).run()

        lines = _read_lines(output)
        assert lines[0] == "ADDRESS;COUNTRY;ID;UTM_EAST;UTM_NORTH;UTM_ZONE"
        forced, natural = _read_rows(output)[1:]
        assert forced[:3] == ["Karl Johans gate 1", "NO", "1"]
        assert forced[5] == "31V"
        assert natural[5] == "32V"
        assert float(forced[3]) != float(natural[3])

    @rsps_lib.activate
    def test_quoted_delimiter_requoted_in_output(self, tmp_path: Path, write_input: WriteInput) -> None:
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_hit(*OSLO), status=200)
        source = write_input(["address;country;id", '"Storgata 1; 0155 Oslo";NO;7'])
        output = tmp_path / "out.csv"
        _tool(source, output).run()

        line = _read_lines(output)[1]
        assert line.startswith('"Storgata 1; 0155 Oslo";NO;7;')
        row = _read_rows(output)[1]
        assert len(row) == 6
        assert row[0] == "Storgata 1; 0155 Oslo"

    @rsps_lib.activate
    def test_summary_populated(self, tmp_path: Path, write_input: WriteInput) -> None:
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_hit(*OSLO), status=200)
        source = write_input(["address;country", "Karl Johans gate 1;NO"])
        tool = _tool(source, tmp_path / "out.csv")
        assert tool.summary is None
        tool.run()
        assert tool.summary is not None
        assert tool.summary.rows_written == 1
        assert tool.summary.halted is False


# ---------------------------------------------------------------------------
# Service statuses
# ---------------------------------------------------------------------------


class TestAddressToUtmStatuses:
    @rsps_lib.activate
    def test_zero_results_skipped_and_processing_continues(
        self, tmp_path: Path, write_input: WriteInput
    ) -> None:
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_status("ZERO_RESULTS"), status=200)
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_hit(*BERGEN), status=200)
        source = write_input(["address;country;id", "Nowhere 0;NO;1", "Bryggen 2;NO;2"])
        output = tmp_path / "out.csv"
        tool = _tool(source, output)
        tool.run()

        rows = _read_rows(output)[1:]
        assert [r[2] for r in rows] == ["2"]
        assert len(rsps_lib.calls) == 2
        assert tool.summary is not None
        assert tool.summary.rows_skipped == 1

    @pytest.mark.parametrize("status", ["REQUEST_DENIED", "INVALID_REQUEST", "UNKNOWN_ERROR", "NEW_STATUS"])
    @rsps_lib.activate
    def test_recoverable_statuses_skip_row(
        self, tmp_path: Path, write_input: WriteInput, status: str
    ) -> None:
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_status(status, "details"), status=200)
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_hit(*OSLO), status=200)
        source = write_input(["address;country;id", "A;NO;1", "B;NO;2"])
        output = tmp_path / "out.csv"
        _tool(source, output).run()

        assert [r[2] for r in _read_rows(output)[1:]] == ["2"]

    @rsps_lib.activate
    def test_ok_without_results_skipped(self, tmp_path: Path, write_input: WriteInput) -> None:
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json={"status": "OK", "results": []}, status=200)
        source = write_input(["address;country", "A;NO"])
        output = tmp_path / "out.csv"
        _tool(source, output).run()

        assert len(_read_lines(output)) == 1

    @rsps_lib.activate
    def test_over_query_limit_halts(self, tmp_path: Path, write_input: WriteInput) -> None:
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_hit(*OSLO), status=200)
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_status("ZERO_RESULTS"), status=200)
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_status("OVER_QUERY_LIMIT"), status=200)
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_hit(*BERGEN), status=200)
        source = write_input(["address;country;id", "A;NO;1", "B;NO;2", "C;NO;3", "D;NO;4"])
        output = tmp_path / "out.csv"
        tool = _tool(source, output)
        tool.run()

        assert [r[2] for r in _read_rows(output)[1:]] == ["1"]
        assert len(rsps_lib.calls) == 3
        summary = tool.summary
        assert summary is not None
        assert summary.halted_by == "OVER_QUERY_LIMIT"
        assert summary.rows_unprocessed == 1
        assert "halted by OVER_QUERY_LIMIT" in summary.summary()


# ---------------------------------------------------------------------------
# Fatal errors
# ---------------------------------------------------------------------------


class TestAddressToUtmFatalErrors:
    @rsps_lib.activate
    def test_transport_error_aborts_and_keeps_partial_output(
        self, tmp_path: Path, write_input: WriteInput
    ) -> None:
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_hit(*OSLO), status=200)
        rsps_lib.add(
            rsps_lib.GET, GEOCODE_URL,
            body=requests.exceptions.ConnectionError("network unreachable"),
        )
        source = write_input(["address;country;id", "A;NO;1", "B;NO;2", "C;NO;3"])
        output = tmp_path / "out.csv"
        with pytest.raises(GeocodingTransportError):
            _tool(source, output).run()

        assert [r[2] for r in _read_rows(output)[1:]] == ["1"]
        assert len(rsps_lib.calls) == 2

    @rsps_lib.activate
    def test_out_of_range_coordinate_is_fatal(self, tmp_path: Path, write_input: WriteInput) -> None:
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_hit(86.0, 10.0), status=200)
        source = write_input(["address;country", "North Pole;NO"])
        with pytest.raises(ProjectionError) as exc_info:
            _tool(source, tmp_path / "out.csv").run()
        assert "Record 1" in exc_info.value.message



# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


class TestAddressToUtmValidation:
    @rsps_lib.activate
    def test_malformed_row_aborts_before_network(self, tmp_path: Path, write_input: WriteInput) -> None:
        source = write_input(["address;country;id", "A;NO;1", "B;NO"])
        with pytest.raises(MalformedRowError):
            _tool(source, tmp_path / "out.csv").run()
        assert len(rsps_lib.calls) == 0

    @rsps_lib.activate
    def test_invalid_zone_aborts_before_network(self, tmp_path: Path, write_input: WriteInput) -> None:
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_hit(*OSLO), status=200)
        source = write_input(["address;country;utm_zone", "A;NO;32V", "B;NO;32V", "C;NO;99Z"])
        with pytest.raises(InvalidZoneError) as exc_info:
            _tool(source, tmp_path / "out.csv").run()
        assert exc_info.value.line_number == 4
        assert len(rsps_lib.calls) == 0

    @rsps_lib.activate
    def test_byte_order_mark_header_accepted(self, tmp_path: Path) -> None:
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_hit(*OSLO), status=200)
        source = tmp_path / "excel.csv"
        source.write_text("\ufeffADDRESS;COUNTRY\nKarl Johans gate 1;NO\n", encoding="utf-8")
        output = tmp_path / "out.csv"
        _tool(source, output).run()
        assert _read_lines(output)[0] == "ADDRESS;COUNTRY;UTM_EAST;UTM_NORTH;UTM_ZONE"
        assert len(_read_lines(output)) == 2

    @rsps_lib.activate
    def test_pad_short_rows_policy(self, tmp_path: Path, write_input: WriteInput) -> None:
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_hit(*OSLO), status=200)
        source = write_input(["address;country;id", "B;NO"])
        output = tmp_path / "out.csv"
        _tool(source, output, pad_short_rows=True).run()
        assert _read_rows(output)[1][:3] == ["B", "NO", ""]

    def test_missing_input_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(InputValidationError):
            _tool(tmp_path / "no_file.csv", tmp_path / "out.csv").run()

    def test_missing_country_column_raises(self, tmp_path: Path, write_input: WriteInput) -> None:
        source = write_input(["address;id", "A;1"])
        with pytest.raises(ColumnNotFoundError):
            _tool(source, tmp_path / "out.csv").run()

    def test_header_case_insensitive(self, tmp_path: Path, write_input: WriteInput) -> None:
        source = write_input(["Address ; COUNTRY"])
        tool = _tool(source, tmp_path / "out.csv")
        tool.validate_inputs()

    def test_empty_input_raises(self, tmp_path: Path) -> None:
        source = tmp_path / "empty.csv"
        source.write_text("", encoding="utf-8")
        with pytest.raises(InputValidationError):
            _tool(source, tmp_path / "out.csv").run()

    def test_blank_api_key_raises(self, tmp_path: Path, write_input: WriteInput) -> None:
        source = write_input(["address;country", "A;NO"])
        tool = AddressToUtm(source, tmp_path / "out.csv", AddressToUtmConfig(api_key="  "))
        with pytest.raises(InputValidationError):
            tool.run()

    def test_output_directory_created(self, tmp_path: Path, write_input: WriteInput) -> None:
        source = write_input(["address;country"])
        output = tmp_path / "nested" / "dir" / "out.csv"
        _tool(source, output).run()
        assert _read_lines(output) == ["ADDRESS;COUNTRY;UTM_EAST;UTM_NORTH;UTM_ZONE"]


# ---------------------------------------------------------------------------
# Pacing
# ---------------------------------------------------------------------------


class TestAddressToUtmPacing:
    @rsps_lib.activate
    def test_pause_before_fiftieth_request(self, tmp_path: Path, write_input: WriteInput) -> None:
        # Last registered response repeats for every further call.
        rsps_lib.add(rsps_lib.GET, GEOCODE_URL, json=google_hit(*OSLO), status=200)
        calls_at_sleep: list[int] = []

        def _sleep(seconds: float) -> None:
            calls_at_sleep.append(len(rsps_lib.calls))

        lines = ["address;country;id"] + [f"Street {i};NO;{i}" for i in range(1, 56)]
        source = write_input(lines)
        output = tmp_path / "out.csv"
        _tool(source, output, pacer=RequestPacer(sleep=_sleep)).run()

        assert calls_at_sleep == [49]
        assert len(_read_rows(output)) == 56
