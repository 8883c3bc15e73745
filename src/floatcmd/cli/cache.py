"""CLI commands for cache management."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from floatcmd._internal.device import resolve_device
from floatcmd.cli._client import get_cache
from floatcmd.cli._options import global_options

if TYPE_CHECKING:
    from floatcmd.cli.main import AppContext

cache_group = click.Group("cache", help="Local telemetry cache management")


@cache_group.command("clear")
@global_options
def clear_cmd(app_ctx: AppContext) -> None:
    """Delete cached telemetry.

    If --device is given on the command line, clears only that device's
    rows.  Otherwise clears the whole cache; FLOAT_DEVICE does not narrow it.
    """
    formatter = app_ctx.formatter
    cache = get_cache()
    target = (
        resolve_device(device_flag=app_ctx.device)
        if app_ctx.device and app_ctx.device_from_cli
        else None
    )
    removed = cache.clear(target)

    if formatter.format == "json":
        formatter.output({"cleared": removed, "device": target}, command="cache.clear")
    elif target:
        formatter.rich.info(f"Cleared {removed} cached records for {target}.")
    else:
        formatter.rich.info(f"Cleared {removed} cached records.")


@cache_group.command("status")
@global_options
def status_cmd(app_ctx: AppContext) -> None:
    """Show cache statistics."""
    formatter = app_ctx.formatter
    info = get_cache().status()

    if formatter.format == "json":
        formatter.output(info, command="cache.status")
    else:
        formatter.rich.cache_status(info)
