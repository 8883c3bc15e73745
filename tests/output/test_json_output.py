from __future__ import annotations

import json
from datetime import UTC, datetime
from io import StringIO

from floatcmd.models.telemetry import Device, TelemetryRecord
from floatcmd.output.formatter import OutputFormatter
from floatcmd.output.json_output import format_json_error, format_json_response
from floatcmd.telemetry.sync import FetchResult

TS = datetime(2024, 9, 18, 10, 32, 5, tzinfo=UTC)


def _record() -> TelemetryRecord:
    return TelemetryRecord(
        device_name="N0001",
        timestamp=TS,
        latitude=-15.4401,
        longitude=-146.3312,
        altitude=0.0,
        vertical_speed=0.0,
        battery_level=15022,
        internal_pressure=82345,
        external_pressure=1034,
        distance_travelled=4120,
        average_speed=2,
        net_displacement=17,
        gps_accuracy_hdop=1,
        gps_accuracy_vdop=2,
    )


class TestFormatJsonResponse:
    """Tests for :func:`format_json_response`."""

    def test_with_model(self) -> None:
        raw = format_json_response(data=_record(), command="device.records")
        parsed = json.loads(raw)

        assert parsed["ok"] is True
        assert parsed["command"] == "device.records"
        assert parsed["data"]["device_name"] == "N0001"
        assert parsed["data"]["timestamp"] == "2024-09-18T10:32:05Z"
        assert parsed["data"]["battery_level"] == 15022
        assert "timestamp" in parsed

    def test_with_nested_device(self) -> None:
        device = Device(name="N0001", records=[_record()])
        parsed = json.loads(format_json_response(data=[device], command="device.latest"))

        assert parsed["data"][0]["name"] == "N0001"
        assert parsed["data"][0]["records"][0]["latitude"] == -15.4401

    def test_with_dataclass(self) -> None:
        result = FetchResult("N0001", [_record()], "cache")
        parsed = json.loads(format_json_response(data=result, command="device.records"))

        assert parsed["data"]["device_name"] == "N0001"
        assert parsed["data"]["source"] == "cache"
        assert parsed["data"]["records"][0]["net_displacement"] == 17

    def test_with_dict_and_datetime(self) -> None:
        parsed = json.loads(
            format_json_response(data={"time": TS, "count": 2}, command="device.replay")
        )
        assert parsed["data"] == {"time": "2024-09-18T10:32:05+00:00", "count": 2}


class TestFormatJsonError:
    def test_envelope(self) -> None:
        raw = format_json_error(
            code="network_error", message="HTTP 404", command="device.records"
        )
        parsed = json.loads(raw)

        assert parsed["ok"] is False
        assert parsed["command"] == "device.records"
        assert parsed["error"] == {"code": "network_error", "message": "HTTP 404"}

    def test_extra_fields(self) -> None:
        raw = format_json_error(
            code="cache_write_failed", message="disk full", command="x", device="N0001"
        )
        assert json.loads(raw)["error"]["device"] == "N0001"


class TestOutputFormatter:
    def test_non_tty_stream_is_json(self) -> None:
        buf = StringIO()
        formatter = OutputFormatter(stream=buf)
        assert formatter.format == "json"

        formatter.output(["N0001"], command="device.list")
        assert json.loads(buf.getvalue())["data"] == ["N0001"]

    def test_forced_format(self) -> None:
        assert OutputFormatter(stream=StringIO(), force_format="rich").format == "rich"

    def test_output_error_json(self) -> None:
        buf = StringIO()
        OutputFormatter(stream=buf).output_error(
            code="config_missing", message="no url", command="device.list"
        )
        assert json.loads(buf.getvalue())["error"]["code"] == "config_missing"
