"""
Address to UTM — CLI Entry Point
=================================
Installed as the ``address-to-utm`` command via ``pyproject.toml``.

Usage:
    address-to-utm --input data/addresses.csv --output output/addresses_utm.csv \\
                   --api-key "$GOOGLE_MAPS_API_KEY"

Run ``address-to-utm --help`` for a full list of options.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from address_to_utm.client import DEFAULT_TIMEOUT
from address_to_utm.pacing import DEFAULT_BATCH_SIZE, DEFAULT_PAUSE_SECONDS
from address_to_utm.pipeline import AddressToUtm, AddressToUtmConfig
from address_to_utm.shared.exceptions import AddressToUtmError


@click.command(
    name="address-to-utm",
    help=(
        "Geocode a delimited list of addresses and append UTM coordinates.\n\n"
        "The input needs ADDRESS and COUNTRY columns; an optional UTM_ZONE "
        "column forces the projection zone for that row.  Other columns are "
        "passed through unchanged."
    ),
)
@click.option(
    "--input", "-i", "input_path",
    required=True,
    type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path),
    help="Path to the input file.",
)
@click.option(
    "--output", "-o", "output_path",
    required=True,
    type=click.Path(file_okay=True, dir_okay=False, path_type=Path),
    help="Path for the output file. Parent directories are created if absent.",
)
@click.option(
    "--api-key",
    required=True,
    envvar="GOOGLE_MAPS_API_KEY",
    help="Google Maps Geocoding API key. "
         "Can also be set via the GOOGLE_MAPS_API_KEY environment variable.",
)
@click.option(
    "--delimiter",
    default=";",
    show_default=True,
    help="Field delimiter of the input and output files.",
)
@click.option(
    "--batch-size",
    default=DEFAULT_BATCH_SIZE,
    show_default=True,
    type=click.IntRange(min=1),
    help="Pause before every Nth geocoding request.",
)
@click.option(
    "--pause",
    "pause_seconds",
    default=DEFAULT_PAUSE_SECONDS,
    show_default=True,
    type=click.FloatRange(min=0),
    help="Seconds to pause at each batch boundary.",
)
@click.option(
    "--timeout",
    default=DEFAULT_TIMEOUT,
    show_default=True,
    type=click.FloatRange(min=0, min_open=True),
    help="HTTP timeout per geocoding request, in seconds.",
)
@click.option(
    "--pad-short-rows",
    is_flag=True,
    default=False,
    help="Pad rows with missing trailing fields with empty values instead of failing.",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def main(
    input_path: Path,
    output_path: Path,
    api_key: str,
    delimiter: str,
    batch_size: int,
    pause_seconds: float,
    timeout: float,
    pad_short_rows: bool,
    verbose: bool,
) -> None:
    """CLI entry point — wires Click options into AddressToUtm."""
    config = AddressToUtmConfig(
        api_key=api_key,
        delimiter=delimiter,
        batch_size=batch_size,
        pause_seconds=pause_seconds,
        timeout=timeout,
        pad_short_rows=pad_short_rows,
    )

    tool = AddressToUtm(
        input_path=input_path,
        output_path=output_path,
        config=config,
        verbose=verbose,
    )

    try:
        tool.run()
    except AddressToUtmError as exc:
        # User-facing errors: print a clean message, no stack trace
        click.echo(f"Error: {exc.message}", err=True)
        sys.exit(1)

    summary = tool.summary
    click.echo(f"\nOutput written to: {output_path}")
    if summary is not None:
        click.echo(summary.summary())
        if summary.halted:
            click.echo(
                f"Stopped early ({summary.halted_by}); rows written so far are kept.",
                err=True,
            )


if __name__ == "__main__":
    main()
