"""SQLite telemetry cache keyed by device name."""

from floatcmd.cache.store import TelemetryCache

__all__ = ["TelemetryCache"]
