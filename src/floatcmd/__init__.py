"""floatcmd: fetch, cache and replay Adopt-A-Float ocean buoy telemetry."""

__version__ = "0.1.0"
