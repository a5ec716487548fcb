# tests/sinks/test_memory_sink.py
"""Tests for MetricAccumulator."""

from datetime import UTC, datetime

import pytest

TS = datetime(2024, 1, 1, tzinfo=UTC)


class TestMetricAccumulator:
    """In-memory collection of metrics and diagnostics."""

    def test_collects_in_order(self) -> None:
        from pcapmetrics.sinks.memory import MetricAccumulator

        sink = MetricAccumulator()
        sink.add_fields("pcap", {"n": 1}, {}, TS)
        sink.add_fields("pcap", {"n": 2}, {"src": "a"}, TS)

        assert [m.fields["n"] for m in sink.metrics] == [1, 2]
        assert sink.metrics[1].tags["src"] == "a"

    def test_drops_metrics_without_fields(self) -> None:
        from pcapmetrics.sinks.memory import MetricAccumulator

        sink = MetricAccumulator()
        sink.add_fields("pcap", {}, {"src": "a"}, TS)

        assert sink.metrics == []
        assert sink.dropped == 1

    def test_keep_empty(self) -> None:
        from pcapmetrics.sinks.memory import MetricAccumulator

        sink = MetricAccumulator()
        sink.configure({"keep_empty": True})
        sink.add_fields("pcap", {}, {"src": "a"}, TS)

        assert len(sink.metrics) == 1
        assert sink.dropped == 0

    def test_invalid_keep_empty(self) -> None:
        from pcapmetrics.contracts.errors import SinkConfigError
        from pcapmetrics.sinks.memory import MetricAccumulator

        with pytest.raises(SinkConfigError, match="'keep_empty' must be a bool"):
            MetricAccumulator().configure({"keep_empty": "yes"})

    def test_errors_and_clear(self) -> None:
        from pcapmetrics.sinks.memory import MetricAccumulator

        sink = MetricAccumulator()
        error = ValueError("x")
        sink.add_error(error)
        sink.add_fields("pcap", {"n": 1}, {}, TS)
        sink.add_fields("pcap", {}, {}, TS)

        assert sink.errors == [error]
        sink.clear()
        assert (sink.metrics, sink.errors, sink.dropped) == ([], [], 0)

    def test_stored_events_are_immutable(self) -> None:
        from pcapmetrics.sinks.memory import MetricAccumulator

        fields = {"n": 1}
        sink = MetricAccumulator()
        sink.add_fields("pcap", fields, {}, TS)
        fields["n"] = 2

        assert sink.metrics[0].fields["n"] == 1
