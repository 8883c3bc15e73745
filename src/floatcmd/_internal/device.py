"""Device name resolution for CLI commands."""

from __future__ import annotations

import os


def resolve_device(
    device_positional: str | None = None, device_flag: str | None = None
) -> str | None:
    """Resolve the device name from multiple sources in priority order.

    Resolution: positional arg > --device flag > FLOAT_DEVICE env > None.
    Names are upper-cased, matching the published file names (``N0001``).
    """
    device = device_positional or device_flag or os.environ.get("FLOAT_DEVICE")
    return device.strip().upper() if device else None
