"""Shared pytest fixtures for the address-to-utm test suite."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import pytest


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers GeoTool attached so streams from one test never leak into the next."""
    yield
    package_logger = logging.getLogger("address_to_utm")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)


@pytest.fixture()
def write_input(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper that writes ``lines`` to an input file and returns its path."""

    def _write(lines: list[str], name: str = "addresses.csv") -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
