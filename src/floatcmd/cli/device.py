"""CLI commands for float devices (list, records, latest, track, replay)."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import click

from floatcmd._internal.async_utils import run_async
from floatcmd.cli._client import (
    discover_devices,
    get_client,
    get_sync,
    require_device,
)
from floatcmd.cli._options import global_options
from floatcmd.models.config import AppSettings
from floatcmd.telemetry.timeline import (
    latest_positions,
    playback_times,
    records_until,
    track_path,
)

if TYPE_CHECKING:
    from floatcmd.cli.main import AppContext
    from floatcmd.telemetry.sync import FetchResult

device_group = click.Group("device", help="Float device telemetry")


def _parse_until(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> datetime | None:
    """Parse an ISO-8601 ``--until`` value; naive values are taken as UTC."""
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise click.BadParameter(f"not an ISO-8601 date/time: {value!r}") from exc
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


async def _fetch_one(app_ctx: AppContext, device: str) -> FetchResult:
    settings = AppSettings()
    async with get_client() as client:
        sync = get_sync(client)
        return await sync.fetch(device, settings.device_url(device), force=app_ctx.no_cache)


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


@device_group.command("list")
@global_options
def list_cmd(app_ctx: AppContext) -> None:
    """List devices published on the data server."""
    run_async(_cmd_list(app_ctx))


async def _cmd_list(app_ctx: AppContext) -> None:
    formatter = app_ctx.formatter
    async with get_client() as client:
        devices = await discover_devices(client)

    if formatter.format == "json":
        formatter.output(devices, command="device.list")
    elif not devices:
        formatter.rich.info("[yellow]No device files found in the directory listing.[/yellow]")
    else:
        formatter.rich.device_list(devices, source=AppSettings().require_base_url())


# ---------------------------------------------------------------------------
# records
# ---------------------------------------------------------------------------


@device_group.command("records")
@click.argument("device_positional", required=False, default=None, metavar="DEVICE")
@click.option("--until", callback=_parse_until, default=None, help="Only rows at or before")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Show the last N rows")
@global_options
def records_cmd(
    app_ctx: AppContext,
    device_positional: str | None,
    until: datetime | None,
    limit: int | None,
) -> None:
    """Show telemetry rows for a device (served from cache when fresh)."""
    run_async(_cmd_records(app_ctx, device_positional, until, limit))


async def _cmd_records(
    app_ctx: AppContext,
    device_positional: str | None,
    until: datetime | None,
    limit: int | None,
) -> None:
    formatter = app_ctx.formatter
    device = require_device(device_positional, app_ctx)
    result = await _fetch_one(app_ctx, device)

    rows = records_until(result.records, until)
    if limit is not None:
        rows = rows[-limit:]

    if formatter.format == "json":
        formatter.output(
            {"device": device, "source": result.source, "records": rows},
            command="device.records",
        )
    else:
        formatter.rich.records(result, rows)


# ---------------------------------------------------------------------------
# latest
# ---------------------------------------------------------------------------


@device_group.command("latest")
@click.argument("devices", nargs=-1, metavar="[DEVICE]...")
@global_options
def latest_cmd(app_ctx: AppContext, devices: tuple[str, ...]) -> None:
    """Show the most recent position of each device (all devices by default)."""
    run_async(_cmd_latest(app_ctx, devices))


async def _cmd_latest(app_ctx: AppContext, devices: tuple[str, ...]) -> None:
    formatter = app_ctx.formatter
    settings = AppSettings()
    async with get_client() as client:
        names = [d.upper() for d in devices] or await discover_devices(client)
        sync = get_sync(client)
        loaded = await sync.load_devices(
            settings.require_base_url(),
            names,
            file_suffix=settings.file_suffix,
            force=app_ctx.no_cache,
        )

    latest = latest_positions(loaded)
    if formatter.format == "json":
        formatter.output(latest, command="device.latest")
    else:
        formatter.rich.latest_positions(latest)


# ---------------------------------------------------------------------------
# track
# ---------------------------------------------------------------------------


@device_group.command("track")
@click.argument("device_positional", required=False, default=None, metavar="DEVICE")
@click.option("--until", callback=_parse_until, default=None, help="Path up to this time")
@global_options
def track_cmd(app_ctx: AppContext, device_positional: str | None, until: datetime | None) -> None:
    """Print the drawable path of a device (date-line unwrapped, smoothed)."""
    run_async(_cmd_track(app_ctx, device_positional, until))


async def _cmd_track(
    app_ctx: AppContext, device_positional: str | None, until: datetime | None
) -> None:
    formatter = app_ctx.formatter
    device = require_device(device_positional, app_ctx)
    result = await _fetch_one(app_ctx, device)
    points = track_path(result.records, until)

    if formatter.format == "json":
        formatter.output(
            {"device": device, "points": [list(p) for p in points]},
            command="device.track",
        )
    else:
        formatter.rich.track(device, points)


# ---------------------------------------------------------------------------
# replay
# ---------------------------------------------------------------------------


@device_group.command("replay")
@click.argument("device_positional", required=False, default=None, metavar="DEVICE")
@click.option("--duration", type=float, default=30.0, show_default=True, help="Replay length (s)")
@click.option("--interval", type=float, default=0.2, show_default=True, help="Frame spacing (s)")
@global_options
def replay_cmd(
    app_ctx: AppContext, device_positional: str | None, duration: float, interval: float
) -> None:
    """List the playback frames for a device's full history."""
    if duration <= 0 or interval <= 0:
        raise click.BadParameter("--duration and --interval must be positive")
    run_async(_cmd_replay(app_ctx, device_positional, duration, interval))


async def _cmd_replay(
    app_ctx: AppContext, device_positional: str | None, duration: float, interval: float
) -> None:
    formatter = app_ctx.formatter
    device = require_device(device_positional, app_ctx)
    result = await _fetch_one(app_ctx, device)
    ordered = records_until(result.records)

    frames: list[dict[str, Any]] = []
    if ordered:
        start, end = ordered[0].timestamp, ordered[-1].timestamp
        for when in playback_times(start, end, duration=duration, interval=interval):
            visible = records_until(ordered, when)
            last = visible[-1]
            frames.append(
                {
                    "time": when,
                    "visible": len(visible),
                    "latitude": last.latitude,
                    "longitude": last.longitude,
                }
            )

    if formatter.format == "json":
        formatter.output({"device": device, "frames": frames}, command="device.replay")
        return

    formatter.rich.info(f"[bold]{device}[/bold]  {len(frames)} frames")
    for frame in frames:
        formatter.rich.info(
            f"{frame['time']:%Y-%m-%d %H:%M}  {frame['visible']:>4} pts"
            f"  {frame['latitude']:.4f}, {frame['longitude']:.4f}"
        )
