"""Float telemetry: row parsing, device discovery, fetch-or-cache and playback."""

from __future__ import annotations

from floatcmd.telemetry.parser import (
    format_record,
    parse_record,
    parse_record_strict,
    parse_rows,
    split_rows,
)
from floatcmd.telemetry.scanner import DirectoryScanner, device_name_from_filename
from floatcmd.telemetry.sync import FetchResult, TelemetrySync
from floatcmd.telemetry.timeline import (
    latest_positions,
    playback_times,
    records_until,
    smooth_path,
    track_path,
    unwrap_longitudes,
)

__all__ = [
    "DirectoryScanner",
    "FetchResult",
    "TelemetrySync",
    "device_name_from_filename",
    "format_record",
    "latest_positions",
    "parse_record",
    "parse_record_strict",
    "parse_rows",
    "playback_times",
    "records_until",
    "smooth_path",
    "split_rows",
    "track_path",
    "unwrap_longitudes",
]
