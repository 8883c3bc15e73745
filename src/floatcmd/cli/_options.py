"""Shared CLI decorator that propagates global options to leaf commands."""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Any

import click

from floatcmd.output.formatter import FORMATS

if TYPE_CHECKING:
    from collections.abc import Callable

    from floatcmd.cli.main import AppContext

# Applied bottom-up, so --device is listed first in --help.
_LOCAL_OPTIONS: tuple[Callable[[Any], Any], ...] = (
    click.option("--no-cache", "--fresh", "opt_no_cache", is_flag=True, help="Bypass the cache"),
    click.option("--verbose", "opt_verbose", is_flag=True, help="Enable verbose logging"),
    click.option("--quiet", "opt_quiet", is_flag=True, help="Suppress normal output"),
    click.option(
        "--format",
        "opt_format",
        type=click.Choice(FORMATS),
        default=None,
        help="Output format (default: auto-detect)",
    ),
    click.option("--device", "opt_device", default=None, help="Float device name"),
)


def _apply_overrides(app_ctx: AppContext, opts: dict[str, Any]) -> None:
    if opts["opt_device"] is not None:
        app_ctx.device = opts["opt_device"]
        app_ctx.device_from_cli = True
    if opts["opt_format"] is not None or opts["opt_quiet"]:
        if opts["opt_format"] is not None:
            app_ctx.output_format = opts["opt_format"]
        app_ctx.quiet = app_ctx.quiet or opts["opt_quiet"]
        app_ctx._formatter = None
    if opts["opt_verbose"] and not app_ctx.verbose:
        from floatcmd.cli.main import configure_logging

        app_ctx.verbose = True
        configure_logging(verbose=True)
    app_ctx.no_cache = app_ctx.no_cache or opts["opt_no_cache"]


def global_options(f: Any) -> Any:
    """Accept the root options after the subcommand name as well.

    ``floatcmd device records N0001 --fresh --format json`` behaves like
    ``floatcmd --fresh --format json device records N0001``; values given
    on the leaf command take precedence over the root group's.
    """

    @functools.wraps(f)
    @click.pass_obj
    def wrapper(app_ctx: AppContext, /, **kwargs: Any) -> Any:
        opts = {name: kwargs.pop(name) for name in list(kwargs) if name.startswith("opt_")}
        _apply_overrides(app_ctx, opts)
        return f(app_ctx, **kwargs)

    for option in _LOCAL_OPTIONS:
        wrapper = option(wrapper)
    return wrapper
