# src/pcapmetrics/sinks/line_protocol.py
"""InfluxDB line protocol rendering of metric events.

    <measurement>[,<tag>=<value>...] <field>=<value>[,<field>=<value>...] <timestamp_ns>

Tags are sorted by key and empty tag values are dropped. NaN and infinite
floats have no line-protocol representation and are dropped as well. An
event left without fields renders as None.
"""

import math
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import cast

from pcapmetrics.contracts.metrics import FieldValue, MetricEvent, field_kind

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_MEASUREMENT_ESCAPES = str.maketrans({",": r"\,", " ": r"\ ", "\n": r"\n"})
_KEY_ESCAPES = str.maketrans({",": r"\,", "=": r"\=", " ": r"\ ", "\n": r"\n"})
_STRING_ESCAPES = str.maketrans({'"': r"\"", "\\": "\\\\"})


def finite_fields(fields: Mapping[str, FieldValue]) -> dict[str, FieldValue]:
    """Copy of fields without NaN or infinite floats."""
    return {
        key: value
        for key, value in fields.items()
        if field_kind(value) != "float" or math.isfinite(cast(float, value))
    }


def _format_value(value: FieldValue) -> str:
    match field_kind(value):
        case "bool":
            return "true" if value else "false"
        case "int":
            return f"{value}i"
        case "float":
            return repr(value)
        case _:
            return '"' + str(value).translate(_STRING_ESCAPES) + '"'


def timestamp_ns(timestamp: datetime) -> int:
    """Nanoseconds since the Unix epoch (microsecond resolution)."""
    return (timestamp - _EPOCH) // timedelta(microseconds=1) * 1000


def format_fields(fields: Mapping[str, FieldValue]) -> str:
    return ",".join(f"{key.translate(_KEY_ESCAPES)}={_format_value(value)}" for key, value in finite_fields(fields).items())


def format_line(event: MetricEvent) -> str | None:
    """Render one event, or None if it has no representable fields."""
    field_set = format_fields(event.fields)
    if not field_set:
        return None

    series = event.measurement.translate(_MEASUREMENT_ESCAPES)
    for key in sorted(event.tags):
        value = event.tags[key]
        if value:
            series += f",{key.translate(_KEY_ESCAPES)}={value.translate(_KEY_ESCAPES)}"

    return f"{series} {field_set} {timestamp_ns(event.timestamp)}"
