# tests/sinks/test_console_sink.py
"""Tests for ConsoleSink."""

import json
from datetime import UTC, datetime

import pytest

TS = datetime(2024, 1, 1, tzinfo=UTC)


class TestConsoleSinkConfig:
    """Configuration validation."""

    def test_has_name(self) -> None:
        from pcapmetrics.sinks.console import ConsoleSink

        assert ConsoleSink.name == "console"

    def test_implements_protocol(self) -> None:
        from pcapmetrics.contracts.sink import ConfigurableSink, MetricSink
        from pcapmetrics.sinks.console import ConsoleSink

        sink = ConsoleSink()
        assert isinstance(sink, MetricSink)
        assert isinstance(sink, ConfigurableSink)

    @pytest.mark.parametrize(
        ("config", "match"),
        [
            ({"format": "xml"}, "Invalid format 'xml'"),
            ({"format": 1}, "'format' must be a string"),
            ({"output": "file"}, "Invalid output 'file'"),
            ({"output": None}, "'output' must be a string"),
        ],
    )
    def test_invalid_config(self, config: dict, match: str) -> None:
        from pcapmetrics.contracts.errors import SinkConfigError
        from pcapmetrics.sinks.console import ConsoleSink

        with pytest.raises(SinkConfigError, match=match):
            ConsoleSink().configure(config)


class TestConsoleSinkOutput:
    """Metrics written to the configured stream."""

    def test_line_protocol_to_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        from pcapmetrics.sinks.console import ConsoleSink

        sink = ConsoleSink()
        sink.configure({})
        sink.add_fields("pcap", {"bytes": 1500}, {"src": "10.0.0.1"}, TS)
        sink.close()

        captured = capsys.readouterr()
        assert captured.out == "pcap,src=10.0.0.1 bytes=1500i 1704067200000000000\n"
        assert sink.written == 1

    def test_json_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        from pcapmetrics.sinks.console import ConsoleSink

        sink = ConsoleSink()
        sink.configure({"format": "json", "output": "stderr"})
        sink.add_fields("pcap", {"ok": True}, {}, TS)

        captured = capsys.readouterr()
        assert captured.out == ""
        assert json.loads(captured.err) == {
            "measurement": "pcap",
            "tags": {},
            "fields": {"ok": True},
            "timestamp": "2024-01-01T00:00:00+00:00",
        }

    def test_metric_without_fields_dropped(self, capsys: pytest.CaptureFixture[str]) -> None:
        from pcapmetrics.sinks.console import ConsoleSink

        sink = ConsoleSink()
        sink.configure({})
        sink.add_fields("pcap", {}, {"src": "srcip"}, TS)

        assert capsys.readouterr().out == ""
        assert sink.dropped == 1
        assert sink.written == 0

    def test_errors_counted_not_written(self, capsys: pytest.CaptureFixture[str]) -> None:
        from pcapmetrics.contracts.errors import FieldDecodeError
        from pcapmetrics.sinks.console import ConsoleSink

        sink = ConsoleSink()
        sink.configure({})
        sink.add_error(FieldDecodeError("bytes", "x", "int", "invalid syntax"))

        assert capsys.readouterr().out == ""
        assert sink.errors == 1

    def test_json_leaves_out_non_finite_floats(self, capsys: pytest.CaptureFixture[str]) -> None:
        from pcapmetrics.sinks.console import ConsoleSink

        sink = ConsoleSink()
        sink.configure({"format": "json"})
        sink.add_fields("pcap", {"rtt": float("nan"), "bytes": 60}, {}, TS)
        sink.add_fields("pcap", {"rtt": float("inf")}, {}, TS)

        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["fields"] == {"bytes": 60}
        assert "NaN" not in lines[0]
        assert sink.written == 1
        assert sink.dropped == 1
