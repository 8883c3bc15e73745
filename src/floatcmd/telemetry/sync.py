"""Fetch-or-cache orchestration for per-device telemetry files.

For each device the cache is consulted first.  When its newest record is
younger than the freshness window the cached rows are served without any
network traffic; otherwise the device file is downloaded, parsed, and
swapped into the cache in a single transaction.

The old rows are only replaced once the download has succeeded, so a
network failure never costs the caller its previously cached data.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Literal

from floatcmd.api.errors import NetworkError
from floatcmd.models.telemetry import Device, TelemetryRecord
from floatcmd.telemetry.parser import parse_rows

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from floatcmd.api.client import FloatDataClient
    from floatcmd.cache.store import TelemetryCache

logger = logging.getLogger(__name__)

DEFAULT_FRESHNESS = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _under_name(
    records: list[TelemetryRecord], device_name: str
) -> list[TelemetryRecord]:
    """Relabel *records* with the name they were fetched under."""
    return [
        r if r.device_name == device_name else r.model_copy(update={"device_name": device_name})
        for r in records
    ]


@dataclass(frozen=True)
class FetchResult:
    """Records for one device plus where they came from."""

    device_name: str
    records: list[TelemetryRecord]
    source: Literal["cache", "network"]

    @property
    def from_cache(self) -> bool:
        return self.source == "cache"


class TelemetrySync:
    """Serves device records from the cache, refreshing stale devices.

    Parameters:
        client: HTTP client used for device file downloads.
        cache: Durable record store.
        freshness: Maximum age of the newest cached record before a refresh.
        clock: Returns the current time as an aware UTC datetime.
    """

    def __init__(
        self,
        client: FloatDataClient,
        cache: TelemetryCache,
        *,
        freshness: timedelta = DEFAULT_FRESHNESS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._client = client
        self._cache = cache
        self._freshness = freshness
        self._clock = clock
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def freshness(self) -> timedelta:
        return self._freshness

    def is_stale(self, latest: datetime | None, now: datetime | None = None) -> bool:
        """Return ``True`` when *latest* is missing or older than the freshness window."""
        if latest is None:
            return True
        now = now or self._clock()
        return now - latest > self._freshness

    def _lock_for(self, device_name: str) -> asyncio.Lock:
        lock = self._locks.get(device_name)
        if lock is None:
            lock = self._locks[device_name] = asyncio.Lock()
        return lock

    async def fetch(
        self, device_name: str, source_url: str, *, force: bool = False
    ) -> FetchResult:
        """Return records for *device_name*, from the cache or from *source_url*.

        Concurrent calls for the same device are serialized, so the second
        caller sees the rows written by the first.
        Cache access runs in a worker thread, so fetching many devices with
        :meth:`load_devices` does not stall the event loop on SQLite.
        Records are returned and stored under *device_name*, whatever the
        name column of the downloaded file says.

        Raises:
            NetworkError: The refresh download failed (cache left untouched).
            CacheWriteError: The refreshed rows could not be committed.
        """
        async with self._lock_for(device_name):
            if not force:
                latest = await asyncio.to_thread(self._cache.most_recent_timestamp, device_name)
                if not self.is_stale(latest):
                    cached = await asyncio.to_thread(self._cache.query, device_name)
                    if cached:
                        logger.debug(
                            "Serving %d cached records for %s", len(cached), device_name
                        )
                        return FetchResult(device_name, cached, "cache")

            body = await self._client.get_text(source_url)
            records = _under_name(parse_rows(body), device_name)

            if not records and await asyncio.to_thread(self._cache.count, device_name):
                logger.warning(
                    "Download for %s held no valid rows; keeping cached data", device_name
                )
                return FetchResult(device_name, [], "network")

            await asyncio.to_thread(self._cache.replace_all, device_name, records)
            logger.info("Refreshed %s: %d records", device_name, len(records))
            return FetchResult(device_name, records, "network")

    async def get_records(
        self, device_name: str, source_url: str, *, force: bool = False
    ) -> list[TelemetryRecord]:
        """Shortcut for :meth:`fetch` that returns only the records."""
        result = await self.fetch(device_name, source_url, force=force)
        return result.records

    async def load_devices(
        self,
        base_url: str,
        device_names: Iterable[str],
        *,
        file_suffix: str = "_all",
        force: bool = False,
    ) -> list[Device]:
        """Fetch every device in *device_names* from ``{base_url}{name}{suffix}.txt``.

        Devices whose download fails are logged and left out of the result;
        cache write failures still propagate.
        """

        async def _one(name: str) -> Device | None:
            url = f"{base_url}{name}{file_suffix}.txt"
            try:
                records = await self.get_records(name, url, force=force)
            except NetworkError as exc:
                logger.warning("Skipping %s: %s", name, exc)
                return None
            return Device(name=name, records=records)

        devices = await asyncio.gather(*(_one(name) for name in device_names))
        return [d for d in devices if d is not None]
