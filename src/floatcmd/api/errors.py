"""Exception hierarchy for floatcmd."""

from __future__ import annotations

from collections.abc import Sequence


class FloatError(Exception):
    """Base class for every error raised by floatcmd."""

    def __init__(self, message: str = "", *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedRecordError(FloatError):
    """A raw row could not be turned into a telemetry record.

    Callers skip the row and carry on; this error never aborts a fetch.
    """

    def __init__(self, reason: str, fields: Sequence[str] = ()) -> None:
        super().__init__(f"Malformed record: {reason}")
        self.reason = reason
        self.fields = list(fields)


class NetworkError(FloatError):
    """A remote fetch failed (transport error or HTTP error status)."""

    def __init__(
        self, message: str, *, url: str | None = None, status_code: int | None = None
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.url = url


class NetworkTimeoutError(NetworkError):
    """A remote fetch did not complete within the configured timeout."""


class ConfigError(FloatError):
    """Required configuration (e.g. the data base URL) is missing or invalid."""


class CacheWriteError(FloatError):
    """The local telemetry cache could not commit a replacement."""

    def __init__(self, message: str, *, device_name: str | None = None) -> None:
        super().__init__(message)
        self.device_name = device_name
