# src/pcapmetrics/sinks/console.py
"""Console sink for metric events.

Writes metrics to stdout or stderr as InfluxDB line protocol or JSON lines,
so the output of a pass can be piped into any line-protocol consumer.
Diagnostics are logged, not written to the metric stream.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any, Literal, TextIO, TypeGuard

import structlog

from pcapmetrics.contracts.errors import SinkConfigError
from pcapmetrics.contracts.metrics import MetricEvent
from pcapmetrics.sinks.line_protocol import finite_fields, format_line

if TYPE_CHECKING:
    from pcapmetrics.contracts.metrics import FieldValue

logger = structlog.get_logger(__name__)


def _is_valid_format(v: str) -> TypeGuard[Literal["line", "json"]]:
    """TypeGuard for format validation - enables mypy type narrowing."""
    return v in {"line", "json"}


def _is_valid_output(v: str) -> TypeGuard[Literal["stdout", "stderr"]]:
    """TypeGuard for output validation - enables mypy type narrowing."""
    return v in {"stdout", "stderr"}


class ConsoleSink:
    """Write metric events to stdout/stderr.

    Supports two output formats:
    - line: InfluxDB line protocol, one metric per line (default)
    - json: One JSON object per line

    Configuration options:
        format: Output format - "line" (default) or "json"
        output: Output stream - "stdout" (default) or "stderr"

    NaN and infinite floats are left out in both formats (neither can carry
    them). Metrics left without fields are not written and are counted in
    `dropped`.
    """

    name = "console"

    _VALID_FORMATS: frozenset[str] = frozenset({"line", "json"})
    _VALID_OUTPUTS: frozenset[str] = frozenset({"stdout", "stderr"})

    def __init__(self) -> None:
        """Initialize unconfigured sink (line protocol on stdout)."""
        self._format: Literal["line", "json"] = "line"
        self._output: Literal["stdout", "stderr"] = "stdout"
        self._stream: TextIO = sys.stdout
        self.written = 0
        self.dropped = 0
        self.errors = 0

    def configure(self, config: dict[str, Any]) -> None:
        """Configure the sink.

        Args:
            config: Sink-specific options

        Raises:
            SinkConfigError: If configuration values are invalid
        """
        format_value = config.get("format", "line")
        if not isinstance(format_value, str):
            raise SinkConfigError(self.name, f"'format' must be a string, got {type(format_value).__name__}")
        if _is_valid_format(format_value):
            self._format = format_value
        else:
            raise SinkConfigError(
                self.name,
                f"Invalid format '{format_value}'. Must be one of: {', '.join(sorted(self._VALID_FORMATS))}",
            )

        output_value = config.get("output", "stdout")
        if not isinstance(output_value, str):
            raise SinkConfigError(self.name, f"'output' must be a string, got {type(output_value).__name__}")
        if _is_valid_output(output_value):
            self._output = output_value
        else:
            raise SinkConfigError(
                self.name,
                f"Invalid output '{output_value}'. Must be one of: {', '.join(sorted(self._VALID_OUTPUTS))}",
            )
        self._stream = sys.stdout if self._output == "stdout" else sys.stderr

        logger.debug("Console sink configured", format=self._format, output=self._output)

    def add_fields(
        self,
        measurement: str,
        fields: Mapping[str, FieldValue],
        tags: Mapping[str, str],
        timestamp: datetime,
    ) -> None:
        event = MetricEvent(measurement=measurement, tags=tags, fields=fields, timestamp=timestamp)
        if not event.has_fields:
            self.dropped += 1
            return

        line = self._serialize_json(event) if self._format == "json" else format_line(event)
        if line is None:
            self.dropped += 1
            return

        try:
            print(line, file=self._stream)
        except OSError as e:
            logger.warning("Failed to write metric", sink=self.name, measurement=measurement, error=str(e))
            return
        self.written += 1

    def add_error(self, error: Exception) -> None:
        self.errors += 1
        logger.warning("Capture diagnostic", error_type=type(error).__name__, error=str(error))

    def close(self) -> None:
        """Flush the output stream. Safe to call more than once."""
        try:
            self._stream.flush()
        except (OSError, ValueError) as e:
            logger.warning("Failed to flush console sink", error=str(e))

    def _serialize_json(self, event: MetricEvent) -> str | None:
        fields = finite_fields(event.fields)
        if not fields:
            return None
        return json.dumps(
            {
                "measurement": event.measurement,
                "tags": dict(event.tags),
                "fields": fields,
                "timestamp": event.timestamp.isoformat(),
            }
        )
