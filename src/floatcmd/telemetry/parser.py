"""Parse whitespace-delimited float telemetry rows.

Each row of a device file carries 15 columns::

    N0001 18-Sep-2024 10:32:05 -15.4401 -146.3312 0.0 0.00 15022 82345 1034 4120 2 17 1 2
    |     |           |        |        |         |   |    |     |     |    |    | |  | |
    name  date        time     lat      lon       alt vspd batt  pint  pext dist avg net hdop vdop

Dates use English month abbreviations and are always UTC.  Parsing is
all-or-nothing: one bad column rejects the whole row.
"""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from floatcmd.api.errors import MalformedRecordError
from floatcmd.models.telemetry import RAW_FIELD_COUNT, TelemetryRecord

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

_MONTHS = {
    name: index
    for index, name in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"),
        start=1,
    )
}
_MONTH_NAMES = {index: name.capitalize() for name, index in _MONTHS.items()}

_DATE_RE = re.compile(r"^(\d{1,2})-([A-Za-z]{3})-(\d{4})$")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2}):(\d{2})$")
_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")

_FLOAT_COLUMNS = ("latitude", "longitude", "altitude", "vertical_speed")
_INT_COLUMNS = (
    "battery_level",
    "internal_pressure",
    "external_pressure",
    "distance_travelled",
    "average_speed",
    "net_displacement",
    "gps_accuracy_hdop",
    "gps_accuracy_vdop",
)


def parse_timestamp(date_str: str, time_str: str) -> datetime:
    """Parse ``"18-Sep-2024"`` + ``"10:32:05"`` into an aware UTC datetime.

    Month names are matched case-insensitively against the English
    abbreviations, independent of the process locale.

    Raises:
        ValueError: If either part does not match the expected format.
    """
    date_match = _DATE_RE.match(date_str)
    time_match = _TIME_RE.match(time_str)
    if date_match is None or time_match is None:
        raise ValueError(f"unrecognised date/time {date_str} {time_str}")

    day, month_name, year = date_match.groups()
    month = _MONTHS.get(month_name.lower())
    if month is None:
        raise ValueError(f"unknown month {month_name!r}")

    hour, minute, second = (int(part) for part in time_match.groups())
    return datetime(int(year), month, int(day), hour, minute, second, tzinfo=UTC)


def format_timestamp(ts: datetime) -> tuple[str, str]:
    """Inverse of :func:`parse_timestamp` (converts to UTC first)."""
    ts = ts.astimezone(UTC)
    return (
        f"{ts.day:02d}-{_MONTH_NAMES[ts.month]}-{ts.year:04d}",
        f"{ts.hour:02d}:{ts.minute:02d}:{ts.second:02d}",
    )


def _parse_int(value: str) -> int:
    if not _INT_RE.match(value):
        raise ValueError(f"not an integer: {value!r}")
    return int(value)


def _parse_float(value: str) -> float:
    if not _FLOAT_RE.match(value):
        raise ValueError(f"not a decimal number: {value!r}")
    return float(value)


def parse_record_strict(fields: Sequence[str]) -> TelemetryRecord:
    """Build a :class:`TelemetryRecord` from exactly 15 raw columns.

    No range checks are applied; an out-of-range latitude is accepted
    as-is.

    Raises:
        MalformedRecordError: Wrong column count or an unparseable column.
    """
    if len(fields) != RAW_FIELD_COUNT:
        raise MalformedRecordError(
            f"expected {RAW_FIELD_COUNT} fields, got {len(fields)}", fields
        )

    try:
        timestamp = parse_timestamp(fields[1], fields[2])
    except ValueError as exc:
        raise MalformedRecordError(str(exc), fields) from exc

    values: dict[str, float | int] = {}
    try:
        for name, raw in zip(_FLOAT_COLUMNS, fields[3:7], strict=True):
            values[name] = _parse_float(raw)
        for name, raw in zip(_INT_COLUMNS, fields[7:15], strict=True):
            values[name] = _parse_int(raw)
    except ValueError as exc:
        raise MalformedRecordError(str(exc), fields) from exc

    return TelemetryRecord(device_name=fields[0], timestamp=timestamp, **values)


def parse_record(fields: Sequence[str]) -> TelemetryRecord | None:
    """Like :func:`parse_record_strict` but returns ``None`` on bad input."""
    try:
        return parse_record_strict(fields)
    except MalformedRecordError as exc:
        logger.debug("Skipping row: %s (%s)", exc.reason, " ".join(fields))
        return None


def split_rows(text: str) -> list[list[str]]:
    """Split a file body into non-empty rows of whitespace-separated columns."""
    return [line.split() for line in text.splitlines() if line.strip()]


def parse_rows(text: str) -> list[TelemetryRecord]:
    """Parse every well-formed row of *text*; malformed rows are dropped."""
    rows = split_rows(text)
    records = [rec for rec in (parse_record(row) for row in rows) if rec is not None]
    skipped = len(rows) - len(records)
    if skipped:
        logger.info("Parsed %d records, skipped %d malformed rows", len(records), skipped)
    return records


def format_record(record: TelemetryRecord) -> list[str]:
    """Return the 15 raw columns for *record*.

    ``parse_record(format_record(r)) == r`` for every record, since floats
    are written with :func:`repr` precision.
    """
    date_str, time_str = format_timestamp(record.timestamp)
    return [
        record.device_name,
        date_str,
        time_str,
        *(repr(getattr(record, name)) for name in _FLOAT_COLUMNS),
        *(str(getattr(record, name)) for name in _INT_COLUMNS),
    ]
