"""HTTP access to the float data server."""

from floatcmd.api.client import FloatDataClient
from floatcmd.api.errors import (
    CacheWriteError,
    ConfigError,
    FloatError,
    MalformedRecordError,
    NetworkError,
    NetworkTimeoutError,
)

__all__ = [
    "CacheWriteError",
    "ConfigError",
    "FloatDataClient",
    "FloatError",
    "MalformedRecordError",
    "NetworkError",
    "NetworkTimeoutError",
]
