"""Shared helpers for building the client, cache and sync objects."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from floatcmd._internal.device import resolve_device
from floatcmd.api.client import FloatDataClient
from floatcmd.api.errors import ConfigError, NetworkError
from floatcmd.cache import TelemetryCache
from floatcmd.models.config import AppSettings
from floatcmd.telemetry.scanner import DirectoryScanner
from floatcmd.telemetry.sync import TelemetrySync

if TYPE_CHECKING:
    from floatcmd.cli.main import AppContext


def get_cache() -> TelemetryCache:
    """Build a :class:`TelemetryCache` at the configured path."""
    settings = AppSettings()
    return TelemetryCache(settings.cache_path)


def get_client() -> FloatDataClient:
    """Build a :class:`FloatDataClient` with the configured timeout."""
    settings = AppSettings()
    return FloatDataClient(timeout=settings.timeout)


def get_sync(client: FloatDataClient) -> TelemetrySync:
    """Build a :class:`TelemetrySync` over the configured cache."""
    settings = AppSettings()
    return TelemetrySync(
        client,
        get_cache(),
        freshness=timedelta(hours=settings.freshness_hours),
    )


def get_scanner(client: FloatDataClient) -> DirectoryScanner:
    """Build a :class:`DirectoryScanner` for the configured file suffix."""
    settings = AppSettings()
    return DirectoryScanner(
        client,
        file_suffix=settings.file_suffix,
        pattern=settings.device_pattern,
    )


def require_device(device_positional: str | None, app_ctx: AppContext) -> str:
    """Resolve the device name or raise :class:`ConfigError`."""
    device = resolve_device(device_positional, app_ctx.device or AppSettings().device)
    if not device:
        raise ConfigError(
            "No device specified. Pass it as a positional argument, use --device,"
            " or set FLOAT_DEVICE."
        )
    return device


async def discover_devices(client: FloatDataClient) -> list[str]:
    """Return device names from the directory listing.

    Raises :class:`ConfigError` when no base URL is configured, and
    :class:`~floatcmd.api.errors.NetworkError` when the listing cannot
    be fetched (an empty list only ever means "no devices").
    """
    settings = AppSettings()
    base_url = settings.require_base_url()
    devices = await get_scanner(client).list_devices(base_url)
    if devices is None:
        raise NetworkError(f"Could not fetch the directory listing at {base_url}", url=base_url)
    return devices
