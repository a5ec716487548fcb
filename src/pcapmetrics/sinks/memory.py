# src/pcapmetrics/sinks/memory.py
"""In-memory accumulator sink.

Collects every metric and diagnostic of a pass. Like a monitoring agent's
accumulator, it refuses metrics that carry no fields: a record whose every
field failed to convert (or a header line) produces nothing.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

import structlog

from pcapmetrics.contracts.errors import SinkConfigError
from pcapmetrics.contracts.metrics import FieldValue, MetricEvent

logger = structlog.get_logger(__name__)


class MetricAccumulator:
    """Collect metric events and diagnostics in memory.

    Configuration options:
        keep_empty: Keep metrics without fields (default: False)

    Attributes:
        metrics: Accepted events, in arrival order
        errors: Reported diagnostics, in arrival order
        dropped: Number of metrics refused for having no fields
    """

    name = "memory"

    def __init__(self) -> None:
        self.metrics: list[MetricEvent] = []
        self.errors: list[Exception] = []
        self.dropped = 0
        self._keep_empty = False

    def configure(self, config: dict[str, Any]) -> None:
        keep_empty = config.get("keep_empty", False)
        if not isinstance(keep_empty, bool):
            raise SinkConfigError(self.name, f"'keep_empty' must be a bool, got {type(keep_empty).__name__}")
        self._keep_empty = keep_empty

    def add_fields(
        self,
        measurement: str,
        fields: Mapping[str, FieldValue],
        tags: Mapping[str, str],
        timestamp: datetime,
    ) -> None:
        if not fields and not self._keep_empty:
            self.dropped += 1
            logger.debug("Dropping metric without fields", measurement=measurement, tags=dict(tags))
            return
        self.metrics.append(MetricEvent(measurement=measurement, tags=tags, fields=fields, timestamp=timestamp))

    def add_error(self, error: Exception) -> None:
        self.errors.append(error)

    def close(self) -> None:
        pass

    def clear(self) -> None:
        """Forget everything collected so far."""
        self.metrics.clear()
        self.errors.clear()
        self.dropped = 0
