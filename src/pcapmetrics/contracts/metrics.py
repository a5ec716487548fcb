# src/pcapmetrics/contracts/metrics.py
"""Metric event model.

A MetricEvent is built from exactly one tool-output record and is never
mutated afterwards. Field values are the scalar variant FieldValue; sinks
dispatch over it with field_kind(), which checks bool before int (bool
subclasses int).
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import TypeAlias, assert_never

FieldValue: TypeAlias = int | float | bool | str


def field_kind(value: FieldValue) -> str:
    """Name the variant held by a field value.

    Returns:
        One of "bool", "int", "float", "string".
    """
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    assert_never(value)


@dataclass(frozen=True, slots=True)
class MetricEvent:
    """One decoded record, ready for the sink.

    tags and fields are stored as read-only mappings; frozen=True alone
    would still allow the dicts themselves to be mutated.
    """

    measurement: str
    tags: Mapping[str, str]
    fields: Mapping[str, FieldValue]
    timestamp: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", MappingProxyType(dict(self.tags)))
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @property
    def has_fields(self) -> bool:
        return bool(self.fields)
