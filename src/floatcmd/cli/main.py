"""CLI entry-point: Click command group and dispatch."""

from __future__ import annotations

import dataclasses
import logging

import click

from floatcmd.api.errors import CacheWriteError, ConfigError, NetworkError
from floatcmd.output.formatter import FORMATS, OutputFormatter

# ---------------------------------------------------------------------------
# Application context (stored in ctx.obj)
# ---------------------------------------------------------------------------


@dataclasses.dataclass
class AppContext:
    """Shared state passed to every Click command via ``@click.pass_obj``."""

    device: str | None
    output_format: str | None
    quiet: bool
    verbose: bool
    no_cache: bool = False
    device_from_cli: bool = False
    _formatter: OutputFormatter | None = dataclasses.field(default=None, repr=False)

    @property
    def formatter(self) -> OutputFormatter:
        if self._formatter is None:
            force = "quiet" if self.quiet else self.output_format
            self._formatter = OutputFormatter(force_format=force)
        return self._formatter


def configure_logging(verbose: bool) -> None:
    """Route ``floatcmd`` (and ``httpx``) log records to stderr through Rich.

    Re-running replaces the handler installed by a previous call.
    """
    from rich.console import Console
    from rich.logging import RichHandler

    level = logging.DEBUG if verbose else logging.WARNING
    for name in ("floatcmd", "httpx"):
        log = logging.getLogger(name)
        for handler in [h for h in log.handlers if isinstance(h, RichHandler)]:
            log.removeHandler(handler)
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        log.addHandler(handler)
        log.setLevel(level)


# ---------------------------------------------------------------------------
# Root Click group
# ---------------------------------------------------------------------------


@click.group()
@click.option("--device", default=None, envvar="FLOAT_DEVICE", help="Float device name")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(FORMATS),
    default=None,
    help="Output format (default: auto-detect)",
)
@click.option("--quiet", is_flag=True, default=False, help="Suppress normal output")
@click.option("--verbose", is_flag=True, default=False, help="Enable verbose logging")
@click.option(
    "--no-cache", "--fresh", "no_cache", is_flag=True, default=False, help="Bypass the cache"
)
@click.pass_context
def cli(
    ctx: click.Context,
    device: str | None,
    output_format: str | None,
    quiet: bool,
    verbose: bool,
    no_cache: bool,
) -> None:
    """Fetch, cache and replay Adopt-A-Float buoy telemetry."""
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj = AppContext(
        device=device,
        output_format=output_format,
        quiet=quiet,
        verbose=verbose,
        no_cache=no_cache,
        device_from_cli=(
            ctx.get_parameter_source("device") is click.core.ParameterSource.COMMANDLINE
        ),
    )


# ---------------------------------------------------------------------------
# Subcommand groups
# ---------------------------------------------------------------------------


def _register_commands() -> None:
    """Import and attach all subcommand groups to the root CLI."""
    from floatcmd.cli.cache import cache_group
    from floatcmd.cli.device import device_group

    cli.add_command(cache_group)
    cli.add_command(device_group)


_register_commands()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

# (exception type, error code, hint) checked in order; first match wins.
_KNOWN_ERRORS: tuple[tuple[type[Exception], str, str], ...] = (
    (ConfigError, "config_missing", "Set FLOAT_BASE_URL (and FLOAT_DEVICE) in .env."),
    (
        NetworkError,
        "network_error",
        "Cached data is unchanged; retry when the data server is reachable.",
    ),
    (
        CacheWriteError,
        "cache_write_failed",
        "Check that the cache directory (FLOAT_CACHE_DIR) is writable.",
    ),
)


def main(argv: list[str] | None = None) -> None:
    """Run the CLI and turn uncaught errors into output plus an exit status."""
    try:
        cli(args=argv, standalone_mode=False)
    except click.exceptions.Exit as exc:
        raise SystemExit(exc.exit_code) from None
    except click.exceptions.Abort:
        raise SystemExit(1) from None
    except click.ClickException as exc:
        exc.show()
        raise SystemExit(exc.exit_code) from None
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except Exception as exc:
        app_ctx, cmd_name = _current_invocation()
        _report_error(exc, app_ctx.formatter if app_ctx else OutputFormatter(), cmd_name)
        raise SystemExit(1) from exc


# ---------------------------------------------------------------------------
# Helpers for error handling
# ---------------------------------------------------------------------------


def _current_invocation() -> tuple[AppContext | None, str]:
    """Return the active :class:`AppContext` and dotted command name, if any."""
    app_ctx: AppContext | None = None
    names: list[str] = []
    ctx = click.get_current_context(silent=True)
    while ctx is not None:
        if app_ctx is None and isinstance(ctx.obj, AppContext):
            app_ctx = ctx.obj
        if ctx.info_name and ctx.info_name != "cli":
            names.append(ctx.info_name)
        ctx = ctx.parent
    return app_ctx, ".".join(reversed(names)) or "unknown"


def _report_error(exc: Exception, formatter: OutputFormatter, cmd_name: str) -> None:
    for exc_type, code, hint in _KNOWN_ERRORS:
        if isinstance(exc, exc_type):
            break
    else:
        formatter.output_error(code=type(exc).__name__, message=str(exc), command=cmd_name)
        return

    if formatter.format == "json":
        formatter.output_error(code=code, message=f"{exc} {hint}", command=cmd_name)
        return
    formatter.rich.error(str(exc))
    formatter.rich.info(f"[dim]{hint}[/dim]")
