"""Shared contracts: schema, metric events, sink protocol and errors.

Leaf module with no dependencies on the rest of pcapmetrics.
"""

from pcapmetrics.contracts.errors import (
    CaptureMissingError,
    FieldDecodeError,
    HandoffError,
    PCAPConfigError,
    PCAPMetricsError,
    RecordShapeError,
    SinkConfigError,
    TabularParseError,
    TempDirError,
    TimestampParseError,
    ToolInvocationError,
)
from pcapmetrics.contracts.metrics import FieldValue, MetricEvent, field_kind
from pcapmetrics.contracts.schema import CaptureSchema, ColumnType
from pcapmetrics.contracts.sink import ConfigurableSink, MetricSink

__all__ = [
    "CaptureMissingError",
    "CaptureSchema",
    "ColumnType",
    "ConfigurableSink",
    "FieldDecodeError",
    "FieldValue",
    "HandoffError",
    "MetricEvent",
    "MetricSink",
    "PCAPConfigError",
    "PCAPMetricsError",
    "RecordShapeError",
    "SinkConfigError",
    "TabularParseError",
    "TempDirError",
    "TimestampParseError",
    "ToolInvocationError",
    "field_kind",
]
