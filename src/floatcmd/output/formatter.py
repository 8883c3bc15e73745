from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any

from rich.console import Console

from floatcmd.output.json_output import format_json_error, format_json_response
from floatcmd.output.rich_output import RichOutput

if TYPE_CHECKING:
    from io import TextIOBase

FORMATS = ("rich", "json", "quiet")


def _detect_format(stream: Any) -> str:
    isatty = getattr(stream, "isatty", None)
    return "rich" if isatty is not None and isatty() else "json"


class OutputFormatter:
    """Chooses between Rich tables and JSON envelopes for command output.

    An explicit *force_format* wins.  Otherwise a terminal gets ``"rich"``
    and a pipe or file gets ``"json"``, so ``floatcmd device list | jq``
    works without flags.  ``"quiet"`` sends the Rich console to stderr and
    leaves stdout empty.
    """

    def __init__(
        self,
        *,
        stream: TextIOBase | Any | None = None,
        force_format: str | None = None,
    ) -> None:
        self._stream = stream or sys.stdout
        self._format = force_format if force_format is not None else _detect_format(self._stream)

        if self._format == "quiet":
            console = Console(stderr=True)
        elif stream is not None:
            console = Console(file=stream)
        else:
            console = Console()
        self._rich = RichOutput(console)

    @property
    def format(self) -> str:  # noqa: A003
        """One of :data:`FORMATS`."""
        return self._format

    @property
    def rich(self) -> RichOutput:
        return self._rich

    def output(self, data: Any, *, command: str) -> None:
        """Print *data* as a JSON envelope, or as plain text in Rich mode.

        Commands with a dedicated table call :attr:`rich` directly instead.
        """
        if self._format != "json":
            self._rich.info(str(data))
            return
        print(  # noqa: T201
            format_json_response(data=data, command=command),
            file=self._stream,
        )

    def output_error(self, *, code: str, message: str, command: str) -> None:
        """Print an error envelope (JSON) or a red error line (Rich)."""
        if self._format != "json":
            self._rich.error(message)
            return
        print(  # noqa: T201
            format_json_error(code=code, message=message, command=command),
            file=self._stream,
        )
