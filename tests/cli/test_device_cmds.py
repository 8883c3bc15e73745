"""Execution tests for the ``device`` command group."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx
import pytest
from click.testing import CliRunner

from floatcmd.cache.store import TelemetryCache
from floatcmd.cli.main import cli, main
from floatcmd.models.telemetry import TelemetryRecord
from floatcmd.telemetry.parser import format_record

if TYPE_CHECKING:
    from pytest_httpx import HTTPXMock

BASE_URL = "https://floats.example.org/SOM/"
N0001_URL = f"{BASE_URL}N0001_all.txt"

LISTING = (
    '<a href="N0001_all.txt">N0001_all.txt</a>'
    '<a href="readme.txt">readme</a>'
    '<a href="P0006_all.txt">P0006_all.txt</a>'
)


def _record(
    ts: datetime, device: str = "N0001", lat: float = -15.0, lon: float = -146.0
) -> TelemetryRecord:
    return TelemetryRecord(
        device_name=device,
        timestamp=ts.replace(microsecond=0),
        latitude=lat,
        longitude=lon,
        altitude=0.0,
        vertical_speed=0.0,
        battery_level=15000,
        internal_pressure=82000,
        external_pressure=1030,
        distance_travelled=4100,
        average_speed=2,
        net_displacement=17,
        gps_accuracy_hdop=1,
        gps_accuracy_vdop=2,
    )


def _body(records: list[TelemetryRecord]) -> str:
    return "".join(" ".join(format_record(r)) + "\n" for r in records)


def _cache(env: dict[str, str]) -> TelemetryCache:
    return TelemetryCache(Path(env["FLOAT_CACHE_DIR"]) / "telemetry.db")


def _invoke_json(*args: str) -> dict[str, Any]:
    result = CliRunner().invoke(cli, ["--format", "json", *args], catch_exceptions=False)
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


class TestDeviceList:
    def test_lists_matching_files(self, cli_env: dict[str, str], httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=BASE_URL, text=LISTING)
        parsed = _invoke_json("device", "list")
        assert parsed["command"] == "device.list"
        assert parsed["data"] == ["N0001", "P0006"]

    def test_unreachable_listing_is_error(
        self,
        cli_env: dict[str, str],
        httpx_mock: HTTPXMock,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        httpx_mock.add_exception(httpx.ConnectError("down"), url=BASE_URL)
        with pytest.raises(SystemExit) as exc_info:
            main(["--format", "json", "device", "list"])
        assert exc_info.value.code == 1
        parsed = json.loads(capsys.readouterr().out)
        assert parsed["ok"] is False
        assert parsed["error"]["code"] == "network_error"


class TestDeviceRecords:
    def test_downloads_and_caches(self, cli_env: dict[str, str], httpx_mock: HTTPXMock) -> None:
        now = datetime.now(UTC)
        records = [_record(now - timedelta(hours=h)) for h in (3, 2, 1)]
        httpx_mock.add_response(url=N0001_URL, text=_body(records))

        parsed = _invoke_json("device", "records", "n0001")
        assert parsed["data"]["device"] == "N0001"
        assert parsed["data"]["source"] == "network"
        assert len(parsed["data"]["records"]) == 3

        # Second run is served from the now-fresh cache.
        again = _invoke_json("device", "records", "N0001")
        assert again["data"]["source"] == "cache"
        assert len(httpx_mock.get_requests()) == 1

    def test_fresh_cache_needs_no_network(
        self, cli_env: dict[str, str], httpx_mock: HTTPXMock
    ) -> None:
        now = datetime.now(UTC)
        _cache(cli_env).replace_all("N0001", [_record(now - timedelta(hours=1))])

        parsed = _invoke_json("device", "records", "--device", "N0001")
        assert parsed["data"]["source"] == "cache"
        assert httpx_mock.get_requests() == []

    def test_fresh_flag_forces_download(
        self, cli_env: dict[str, str], httpx_mock: HTTPXMock
    ) -> None:
        now = datetime.now(UTC)
        _cache(cli_env).replace_all("N0001", [_record(now - timedelta(hours=1))])
        httpx_mock.add_response(
            url=N0001_URL, text=_body([_record(now - timedelta(minutes=m)) for m in (20, 10)])
        )

        parsed = _invoke_json("device", "records", "N0001", "--fresh")
        assert parsed["data"]["source"] == "network"
        assert _cache(cli_env).count("N0001") == 2

    def test_until_and_limit(self, cli_env: dict[str, str], httpx_mock: HTTPXMock) -> None:
        now = datetime.now(UTC).replace(microsecond=0)
        records = [_record(now - timedelta(hours=h)) for h in (4, 3, 2, 1)]
        _cache(cli_env).replace_all("N0001", records)

        until = (now - timedelta(hours=2)).isoformat()
        parsed = _invoke_json("device", "records", "N0001", "--until", until, "--limit", "2")
        stamps = [datetime.fromisoformat(r["timestamp"]) for r in parsed["data"]["records"]]
        assert stamps == [now - timedelta(hours=3), now - timedelta(hours=2)]

    def test_bad_until_is_usage_error(self, cli_env: dict[str, str]) -> None:
        result = CliRunner().invoke(cli, ["device", "records", "N0001", "--until", "yesterday"])
        assert result.exit_code == 2
        assert "ISO-8601" in result.output

    def test_missing_device_is_config_error(
        self, cli_env: dict[str, str], capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit):
            main(["--format", "json", "device", "records"])
        parsed = json.loads(capsys.readouterr().out)
        assert parsed["error"]["code"] == "config_missing"

    def test_network_failure_keeps_stale_cache(
        self,
        cli_env: dict[str, str],
        httpx_mock: HTTPXMock,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        stale = [_record(datetime.now(UTC) - timedelta(days=3 + i)) for i in range(3)]
        _cache(cli_env).replace_all("N0001", stale)
        httpx_mock.add_response(url=N0001_URL, status_code=503)

        with pytest.raises(SystemExit) as exc_info:
            main(["--format", "json", "device", "records", "N0001"])

        assert exc_info.value.code == 1
        assert json.loads(capsys.readouterr().out)["error"]["code"] == "network_error"
        assert set(_cache(cli_env).query("N0001")) == set(stale)


class TestDeviceLatest:
    def test_named_devices(self, cli_env: dict[str, str], httpx_mock: HTTPXMock) -> None:
        now = datetime.now(UTC)
        httpx_mock.add_response(
            url=N0001_URL,
            text=_body([_record(now - timedelta(hours=2), lat=-15.0), _record(now, lat=-16.0)]),
        )
        httpx_mock.add_response(url=f"{BASE_URL}P0006_all.txt", status_code=404)

        parsed = _invoke_json("device", "latest", "N0001", "P0006")
        assert [r["device_name"] for r in parsed["data"]] == ["N0001"]
        assert parsed["data"][0]["latitude"] == -16.0

    def test_discovers_devices_when_none_given(
        self, cli_env: dict[str, str], httpx_mock: HTTPXMock
    ) -> None:
        now = datetime.now(UTC)
        httpx_mock.add_response(url=BASE_URL, text=LISTING)
        httpx_mock.add_response(url=N0001_URL, text=_body([_record(now)]))
        httpx_mock.add_response(
            url=f"{BASE_URL}P0006_all.txt", text=_body([_record(now, device="P0006")])
        )

        parsed = _invoke_json("device", "latest")
        assert sorted(r["device_name"] for r in parsed["data"]) == ["N0001", "P0006"]


class TestDeviceTrack:
    def test_path_is_unwrapped_and_smoothed(
        self, cli_env: dict[str, str], httpx_mock: HTTPXMock
    ) -> None:
        now = datetime.now(UTC)
        _cache(cli_env).replace_all(
            "N0001",
            [
                _record(now - timedelta(hours=2), lat=0.0, lon=179.0),
                _record(now - timedelta(hours=1), lat=2.0, lon=-179.0),
            ],
        )

        parsed = _invoke_json("device", "track", "N0001")
        assert parsed["data"]["points"] == [[0.0, 179.0], [1.0, 180.0], [2.0, 181.0]]


class TestDeviceReplay:
    def test_frames(self, cli_env: dict[str, str], httpx_mock: HTTPXMock) -> None:
        now = datetime.now(UTC).replace(microsecond=0)
        _cache(cli_env).replace_all(
            "N0001",
            [
                _record(now - timedelta(hours=4), lat=1.0),
                _record(now - timedelta(hours=2), lat=2.0),
                _record(now, lat=3.0),
            ],
        )

        parsed = _invoke_json(
            "device", "replay", "N0001", "--duration", "1", "--interval", "0.25"
        )
        frames = parsed["data"]["frames"]
        assert [f["visible"] for f in frames] == [1, 1, 2, 2, 3]
        assert frames[-1]["latitude"] == 3.0

    def test_rejects_non_positive_interval(self, cli_env: dict[str, str]) -> None:
        result = CliRunner().invoke(cli, ["device", "replay", "N0001", "--interval", "0"])
        assert result.exit_code == 2
