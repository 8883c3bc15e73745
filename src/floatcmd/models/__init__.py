from __future__ import annotations

from floatcmd.models.config import DEFAULT_BASE_URL, AppSettings
from floatcmd.models.telemetry import RAW_FIELD_COUNT, Device, TelemetryRecord

__all__ = [
    # config
    "DEFAULT_BASE_URL",
    "AppSettings",
    # telemetry
    "RAW_FIELD_COUNT",
    "Device",
    "TelemetryRecord",
]
