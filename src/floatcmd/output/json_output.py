"""JSON envelopes for piped / scripted use of the CLI.

Every command prints exactly one object::

    {"ok": true,  "command": "device.records", "data": {...},  "timestamp": "..."}
    {"ok": false, "command": "device.records", "error": {...}, "timestamp": "..."}
"""

from __future__ import annotations

import dataclasses
import json
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel


def _serialize(obj: Any) -> Any:
    """Reduce records, results and containers to plain JSON values.

    Pydantic models are dumped in JSON mode (ISO timestamps, ``None``
    fields dropped); dataclasses such as ``FetchResult`` are walked field
    by field.  Anything left over is passed through for ``json.dumps``.
    """
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", exclude_none=True)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: _serialize(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, (list, tuple)):
        return [_serialize(item) for item in obj]
    if isinstance(obj, dict):
        return {key: _serialize(value) for key, value in obj.items()}
    if isinstance(obj, datetime):
        return obj.isoformat()
    return obj


def _envelope(ok: bool, command: str, key: str, payload: Any) -> str:
    body = {
        "ok": ok,
        "command": command,
        key: payload,
        "timestamp": datetime.now(UTC).isoformat(),
    }
    return json.dumps(body, indent=2, default=str)


def format_json_response(*, data: Any, command: str) -> str:
    """Serialise *data* into a success envelope for *command*."""
    return _envelope(True, command, "data", _serialize(data))


def format_json_error(*, code: str, message: str, command: str, **extra: Any) -> str:
    """Build a failure envelope; *extra* keys are merged into ``error``."""
    return _envelope(False, command, "error", {"code": code, "message": message, **extra})
