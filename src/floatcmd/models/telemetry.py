from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

RAW_FIELD_COUNT = 15


class TelemetryRecord(BaseModel):
    """One row of float telemetry.

    Field order mirrors the raw text columns; see
    :func:`floatcmd.telemetry.parser.parse_record`.
    """

    model_config = ConfigDict(frozen=True)

    device_name: str
    timestamp: datetime
    latitude: float
    longitude: float
    altitude: float
    vertical_speed: float
    battery_level: int  # mV
    internal_pressure: int  # Pa
    external_pressure: int  # mbar
    distance_travelled: int  # km
    average_speed: int  # km/h
    net_displacement: int  # km
    gps_accuracy_hdop: int
    gps_accuracy_vdop: int


class Device(BaseModel):
    """A buoy and its telemetry history.

    Two devices are equal when both the name and the full record list
    match, but hashing only looks at the name so a device can be looked
    up by identity in sets and dict keys.
    """

    name: str
    records: list[TelemetryRecord] = Field(default_factory=list)

    def __hash__(self) -> int:
        return hash(self.name)

    def sorted_records(self) -> list[TelemetryRecord]:
        """Return the records in ascending timestamp order."""
        return sorted(self.records, key=lambda r: r.timestamp)

    @property
    def latest(self) -> TelemetryRecord | None:
        """The most recent record, or ``None`` when there is no data."""
        if not self.records:
            return None
        return max(self.records, key=lambda r: r.timestamp)

    @property
    def time_range(self) -> tuple[datetime, datetime] | None:
        if not self.records:
            return None
        stamps = [r.timestamp for r in self.records]
        return min(stamps), max(stamps)
