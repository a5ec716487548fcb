# src/pcapmetrics/contracts/schema.py
"""Column schema for decoding tshark tabular output.

The schema is built once per run from settings and is read-only afterwards.
Tag membership, declared types and the timestamp position are resolved into
positional tables at construction so that decoding a row never does a name
lookup.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum


class ColumnType(StrEnum):
    """Declared type of a field column."""

    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    STRING = "string"

    @classmethod
    def parse(cls, name: str) -> "ColumnType":
        """Resolve a configured type name, case-insensitively.

        Unrecognized names mean STRING: the raw cell value is kept as-is.
        """
        try:
            return cls(name.lower())
        except ValueError:
            return cls.STRING


@dataclass(frozen=True, slots=True)
class CaptureSchema:
    """Expected layout of one row of tool output.

    Attributes:
        measurement: Name given to every emitted metric event
        columns: Ordered column names, unique
        types: Declared type per column, parallel to columns
        tag_columns: Names of columns stored as string tags
        timestamp_column: Column holding the event time, or None
        timestamp_format: Format used to parse timestamp_column
    """

    measurement: str
    columns: tuple[str, ...]
    types: tuple[ColumnType, ...]
    tag_columns: frozenset[str] = frozenset()
    timestamp_column: str | None = None
    timestamp_format: str = ""
    _tag_mask: tuple[bool, ...] = field(init=False, repr=False, compare=False)
    _timestamp_index: int | None = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.columns) != len(self.types):
            raise ValueError(f"column names and column types differ in length: {len(self.columns)} names, {len(self.types)} types")
        duplicates = sorted({name for name in self.columns if self.columns.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate column names: {', '.join(duplicates)}")

        object.__setattr__(self, "_tag_mask", tuple(name in self.tag_columns for name in self.columns))
        timestamp_index = self.columns.index(self.timestamp_column) if self.timestamp_column in self.columns else None
        object.__setattr__(self, "_timestamp_index", timestamp_index)

    @classmethod
    def build(
        cls,
        *,
        measurement: str,
        columns: Sequence[str],
        types: Sequence[str],
        tag_columns: Iterable[str] = (),
        timestamp_column: str | None = None,
        timestamp_format: str = "",
    ) -> "CaptureSchema":
        """Build a schema from configured (string) type names."""
        return cls(
            measurement=measurement,
            columns=tuple(columns),
            types=tuple(ColumnType.parse(t) for t in types),
            tag_columns=frozenset(tag_columns),
            timestamp_column=timestamp_column or None,
            timestamp_format=timestamp_format,
        )

    def is_tag(self, column_name: str) -> bool:
        return column_name in self.tag_columns

    def column_count(self) -> int:
        return len(self.columns)

    def is_tag_at(self, index: int) -> bool:
        return self._tag_mask[index]

    def type_at(self, index: int) -> ColumnType:
        return self.types[index]

    @property
    def timestamp_index(self) -> int | None:
        """Position of the timestamp column, or None if it is not a configured column."""
        return self._timestamp_index
