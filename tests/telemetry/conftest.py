"""Shared fixtures for telemetry tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from floatcmd.cache.store import TelemetryCache

if TYPE_CHECKING:
    from pathlib import Path

SAMPLE_TEXT = """\
N0001 18-Sep-2024 10:32:05 -15.4401 -146.3312 0.0 0.00 15022 82345 1034 4120 2 17 1 2
N0001 19-Sep-2024 10:35:41 -15.4987 -146.2101 0.0 -0.12 15010 82301 1036 4132 2 18 1 3

N0001 20-Sep-2024 10:30:12 -15.5522 -146.0877 0.0 0.05 14998 82299 1031 4145 3 19 2 2
this row is garbage
N0001 21-Sep-2024 10:29:59 -15.60 -145.97 0.0 0.00 14990 oops 1030 4151 3 20 1 2
"""


@pytest.fixture()
def sample_text() -> str:
    """Device file body with three valid rows, a blank line and two bad rows."""
    return SAMPLE_TEXT


@pytest.fixture()
def cache(tmp_path: Path) -> TelemetryCache:
    return TelemetryCache(tmp_path / "telemetry.db")
