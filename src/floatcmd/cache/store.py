"""SQLite-backed telemetry cache.

One row per telemetry record, keyed (non-uniquely) by device name.  A
device's rows are only ever replaced as a whole, inside one transaction,
so a failed refresh leaves the previous rows in place.
"""

from __future__ import annotations

import contextlib
import logging
import sqlite3
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from floatcmd.api.errors import CacheWriteError
from floatcmd.models.telemetry import TelemetryRecord

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

logger = logging.getLogger(__name__)

_COLUMNS = (
    "device_name",
    "timestamp",
    "latitude",
    "longitude",
    "altitude",
    "vertical_speed",
    "battery_level",
    "internal_pressure",
    "external_pressure",
    "distance_travelled",
    "average_speed",
    "net_displacement",
    "gps_accuracy_hdop",
    "gps_accuracy_vdop",
)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS telemetry (
    device_name TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    latitude REAL NOT NULL,
    longitude REAL NOT NULL,
    altitude REAL NOT NULL,
    vertical_speed REAL NOT NULL,
    battery_level INTEGER NOT NULL,
    internal_pressure INTEGER NOT NULL,
    external_pressure INTEGER NOT NULL,
    distance_travelled INTEGER NOT NULL,
    average_speed INTEGER NOT NULL,
    net_displacement INTEGER NOT NULL,
    gps_accuracy_hdop INTEGER NOT NULL,
    gps_accuracy_vdop INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_telemetry_device ON telemetry (device_name);
"""

_INSERT = (
    f"INSERT INTO telemetry ({', '.join(_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in _COLUMNS)})"
)
_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM telemetry"


def _to_row(record: TelemetryRecord, device_name: str) -> tuple[Any, ...]:
    data = record.model_dump()
    data["device_name"] = device_name
    data["timestamp"] = record.timestamp.astimezone(UTC).isoformat()
    return tuple(data[col] for col in _COLUMNS)


def _from_row(row: sqlite3.Row | tuple[Any, ...]) -> TelemetryRecord:
    data = dict(zip(_COLUMNS, row, strict=True))
    data["timestamp"] = datetime.fromisoformat(data["timestamp"])
    return TelemetryRecord.model_validate(data)


class TelemetryCache:
    """Durable store of telemetry records grouped by device name.

    Connections are opened per operation so the store can be shared
    across threads; writes to the same device are serialized with a
    per-device lock.
    """

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._init_db()

    @property
    def db_path(self) -> Path:
        return self._db_path

    # -- internals -----------------------------------------------------------

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    @contextlib.contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection; commit on success, roll back on error, always close."""
        with contextlib.closing(self._connect()) as conn, conn:
            yield conn

    def _init_db(self) -> None:
        with contextlib.closing(self._connect()) as conn:
            conn.executescript(_SCHEMA)

    def _device_lock(self, device_name: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(device_name)
            if lock is None:
                lock = self._locks[device_name] = threading.Lock()
            return lock

    # -- reads ---------------------------------------------------------------

    def query(self, device_name: str) -> list[TelemetryRecord]:
        """Return every cached record for *device_name*.

        Order is not part of the contract; sort by timestamp before use.
        """
        with contextlib.closing(self._connect()) as conn:
            rows = conn.execute(
                f"{_SELECT} WHERE device_name = ? ORDER BY timestamp", (device_name,)
            ).fetchall()
        return [_from_row(row) for row in rows]

    def most_recent_timestamp(self, device_name: str) -> datetime | None:
        """Return the newest cached timestamp for *device_name*, or ``None``."""
        with contextlib.closing(self._connect()) as conn:
            (value,) = conn.execute(
                "SELECT MAX(timestamp) FROM telemetry WHERE device_name = ?", (device_name,)
            ).fetchone()
        return datetime.fromisoformat(value) if value is not None else None

    def count(self, device_name: str | None = None) -> int:
        """Return the number of cached rows (for one device, or in total)."""
        with contextlib.closing(self._connect()) as conn:
            if device_name is None:
                (n,) = conn.execute("SELECT COUNT(*) FROM telemetry").fetchone()
            else:
                (n,) = conn.execute(
                    "SELECT COUNT(*) FROM telemetry WHERE device_name = ?", (device_name,)
                ).fetchone()
        return int(n)

    def device_names(self) -> list[str]:
        """Return the names of all devices with cached rows, sorted."""
        with contextlib.closing(self._connect()) as conn:
            rows = conn.execute(
                "SELECT DISTINCT device_name FROM telemetry ORDER BY device_name"
            ).fetchall()
        return [name for (name,) in rows]

    # -- writes --------------------------------------------------------------

    def replace_all(self, device_name: str, records: Iterable[TelemetryRecord]) -> int:
        """Atomically swap the cached rows for *device_name* with *records*.

        Rows are stored under *device_name* whatever name the records carry,
        so a file whose name column differs in case still lands under the
        key it is queried by.

        Returns the number of rows written.

        Raises:
            CacheWriteError: The transaction failed; the previous rows are kept.
        """
        records = list(records)
        with self._device_lock(device_name):
            try:
                with self._transaction() as conn:
                    conn.execute("DELETE FROM telemetry WHERE device_name = ?", (device_name,))
                    conn.executemany(_INSERT, [_to_row(r, device_name) for r in records])
            except sqlite3.Error as exc:
                raise CacheWriteError(
                    f"Failed to store telemetry for {device_name}: {exc}",
                    device_name=device_name,
                ) from exc
        logger.debug("Cached %d records for %s", len(records), device_name)
        return len(records)

    def clear(self, device_name: str | None = None) -> int:
        """Delete cached rows for *device_name* (or everything). Returns rows removed."""
        try:
            with self._transaction() as conn:
                if device_name is None:
                    cur = conn.execute("DELETE FROM telemetry")
                else:
                    cur = conn.execute(
                        "DELETE FROM telemetry WHERE device_name = ?", (device_name,)
                    )
                removed = cur.rowcount
        except sqlite3.Error as exc:
            raise CacheWriteError(
                f"Failed to clear cache: {exc}", device_name=device_name
            ) from exc
        return removed

    # -- diagnostics ---------------------------------------------------------

    def status(self) -> dict[str, Any]:
        """Return summary statistics for ``cache status``."""
        with contextlib.closing(self._connect()) as conn:
            rows = conn.execute(
                "SELECT device_name, COUNT(*), MAX(timestamp) FROM telemetry"
                " GROUP BY device_name ORDER BY device_name"
            ).fetchall()

        devices = [
            {"device": name, "records": int(n), "latest": latest} for name, n, latest in rows
        ]
        disk_bytes = self._db_path.stat().st_size if self._db_path.exists() else 0
        return {
            "cache_path": str(self._db_path),
            "devices": devices,
            "total": sum(d["records"] for d in devices),
            "disk_bytes": disk_bytes,
        }
