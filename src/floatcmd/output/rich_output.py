from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from rich.console import Console

    from floatcmd.models.telemetry import TelemetryRecord
    from floatcmd.telemetry.sync import FetchResult

_TS_FORMAT = "%Y-%m-%d %H:%M:%S UTC"


def _ts(value: datetime) -> str:
    return value.strftime(_TS_FORMAT)


class RichOutput:
    """Rich-based terminal output helpers for *floatcmd*."""

    def __init__(self, console: Console) -> None:
        self._con = console

    # ------------------------------------------------------------------
    # Device list
    # ------------------------------------------------------------------

    def device_list(self, devices: Sequence[str], *, source: str = "") -> None:
        """Print a table of discovered device names."""
        table = Table(title="Devices")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Device", style="cyan")

        for index, name in enumerate(devices, start=1):
            table.add_row(str(index), name)

        self._con.print(table)
        if source:
            self._con.print(f"Source: {source}", style="dim", soft_wrap=True)

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def records(self, result: FetchResult, records: Sequence[TelemetryRecord]) -> None:
        """Print a panel header and a table of telemetry rows."""
        origin = "cache" if result.from_cache else "download"
        self._con.print(
            Panel(
                f"[bold]{result.device_name}[/bold]  "
                f"[dim]{len(records)} records from {origin}[/dim]",
                expand=False,
            )
        )

        table = Table()
        table.add_column("Time (UTC)")
        table.add_column("Lat", justify="right")
        table.add_column("Lon", justify="right")
        table.add_column("Battery", justify="right")
        table.add_column("P int", justify="right")
        table.add_column("P ext", justify="right")
        table.add_column("Dist", justify="right")
        table.add_column("HDOP", justify="right")

        for r in records:
            table.add_row(
                _ts(r.timestamp),
                f"{r.latitude:.4f}",
                f"{r.longitude:.4f}",
                f"{r.battery_level} mV",
                f"{r.internal_pressure} Pa",
                f"{r.external_pressure} mbar",
                f"{r.distance_travelled} km",
                str(r.gps_accuracy_hdop),
            )

        self._con.print(table)

    def latest_positions(self, records: Sequence[TelemetryRecord]) -> None:
        """Print the most recent fix of each device."""
        table = Table(title="Latest positions")
        table.add_column("Device", style="cyan")
        table.add_column("Time (UTC)")
        table.add_column("Coordinates")
        table.add_column("Battery", justify="right")

        for r in records:
            table.add_row(
                r.device_name,
                _ts(r.timestamp),
                f"{r.latitude:.4f}, {r.longitude:.4f}",
                f"{r.battery_level} mV",
            )

        self._con.print(table)

    def track(self, device_name: str, points: Sequence[tuple[float, float]]) -> None:
        """Print the path points for a device track."""
        table = Table(title=f"Track {device_name}")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Lat", justify="right")
        table.add_column("Lon", justify="right")

        for index, (lat, lon) in enumerate(points):
            table.add_row(str(index), f"{lat:.4f}", f"{lon:.4f}")

        self._con.print(table)

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    def cache_status(self, info: dict[str, Any]) -> None:
        """Print cache location, size and per-device row counts."""
        self.info(f"Cache file:  {info['cache_path']}")
        self.info(f"Records:     {info['total']}")
        self.info(f"Disk usage:  {info['disk_bytes'] / 1024:.1f} KB")

        if not info["devices"]:
            return
        table = Table(title="Cached devices")
        table.add_column("Device", style="cyan")
        table.add_column("Records", justify="right")
        table.add_column("Latest")
        for entry in info["devices"]:
            table.add_row(entry["device"], str(entry["records"]), entry["latest"] or "")
        self._con.print(table)

    # ------------------------------------------------------------------
    # Generic helpers
    # ------------------------------------------------------------------

    def error(self, message: str) -> None:
        """Print a bold red error line."""
        self._con.print(f"[bold red]Error:[/bold red] {message}")

    def info(self, message: str) -> None:
        """Print an informational message (plain)."""
        self._con.print(message)
