"""Timeline helpers for replaying a device's track over time.

These back the ``track`` and ``latest`` commands: pick the records visible
at a point in time, unwrap longitudes across the date line so a path
does not jump across the whole map, and densify it with midpoints.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence
    from datetime import datetime

    from floatcmd.models.telemetry import Device, TelemetryRecord

Point = tuple[float, float]  # (latitude, longitude)

PLAYBACK_DURATION = 30.0
PLAYBACK_INTERVAL = 0.2


def records_until(
    records: Iterable[TelemetryRecord], when: datetime | None = None
) -> list[TelemetryRecord]:
    """Return records at or before *when* (all if ``None``), oldest first."""
    selected = [r for r in records if when is None or r.timestamp <= when]
    return sorted(selected, key=lambda r: r.timestamp)


def latest_positions(devices: Iterable[Device]) -> list[TelemetryRecord]:
    """Return the most recent record of each device that has any data."""
    return [d.latest for d in devices if d.latest is not None]


def unwrap_longitudes(points: Sequence[Point]) -> list[Point]:
    """Shift longitudes by 360 degrees wherever a step crosses the date line.

    Each point is compared against the previous *adjusted* point, so a
    track that keeps heading east past 180 continues at 181, 182, ...
    """
    adjusted: list[Point] = []
    for lat, lon in points:
        if adjusted:
            prev_lon = adjusted[-1][1]
            if abs(lon - prev_lon) > 180:
                lon = lon - 360 if lon > prev_lon else lon + 360
        adjusted.append((lat, lon))
    return adjusted


def smooth_path(points: Sequence[Point]) -> list[Point]:
    """Insert the midpoint between every pair of consecutive points."""
    if len(points) < 2:
        return list(points)
    smoothed: list[Point] = []
    for (lat0, lon0), (lat1, lon1) in zip(points, points[1:]):
        smoothed.append((lat0, lon0))
        smoothed.append(((lat0 + lat1) / 2, (lon0 + lon1) / 2))
    smoothed.append(points[-1])
    return smoothed


def track_path(
    records: Iterable[TelemetryRecord], until: datetime | None = None
) -> list[Point]:
    """Build the drawable path for *records* up to *until*."""
    visible = records_until(records, until)
    return smooth_path(unwrap_longitudes([(r.latitude, r.longitude) for r in visible]))


def playback_times(
    start: datetime,
    end: datetime,
    *,
    duration: float = PLAYBACK_DURATION,
    interval: float = PLAYBACK_INTERVAL,
) -> Iterator[datetime]:
    """Yield slider positions for an animated replay from *start* to *end*.

    The span is covered in ``duration / interval`` equal steps; the final
    value is clamped to *end*.
    """
    if end <= start:
        yield end
        return

    step = (end - start) / (duration / interval)
    if step <= timedelta(0):
        yield end
        return

    current = start
    while current < end:
        yield current
        current += step
    yield end
