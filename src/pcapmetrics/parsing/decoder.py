# src/pcapmetrics/parsing/decoder.py
"""Schema-driven decoding of raw records into metric events.

Failures are isolated at the smallest scope that still makes sense:

- wrong cell count: the whole record is rejected, nothing is emitted
- unparsable timestamp: the event keeps the wall-clock time read at the start
  of the decode
- unparsable field: that field is omitted, the rest of the event survives

Every failure is reported through the callback; none is raised.
"""

from collections.abc import Callable
from datetime import datetime

from pcapmetrics.contracts.errors import FieldDecodeError, RecordShapeError, TimestampParseError
from pcapmetrics.contracts.metrics import FieldValue, MetricEvent
from pcapmetrics.contracts.schema import CaptureSchema
from pcapmetrics.core.clock import DEFAULT_CLOCK, Clock
from pcapmetrics.parsing.fields import CONVERTERS
from pcapmetrics.parsing.tabular import RawRecord
from pcapmetrics.parsing.timestamps import TimestampParser


class RecordDecoder:
    """Converts RawRecords to MetricEvents for one schema.

    Per-column decisions (tag, timestamp, converter) are resolved once here,
    so decode() only walks positions.
    """

    def __init__(self, schema: CaptureSchema, *, clock: Clock = DEFAULT_CLOCK) -> None:
        self._schema = schema
        self._clock = clock
        self._timestamp_parser = TimestampParser(schema.timestamp_format) if schema.timestamp_index is not None else None
        self._converters = tuple(CONVERTERS[schema.type_at(i)] for i in range(schema.column_count()))

    @property
    def schema(self) -> CaptureSchema:
        return self._schema

    def decode(
        self,
        record: RawRecord,
        report: Callable[[Exception], None],
        *,
        source: str = "<unknown>",
    ) -> MetricEvent | None:
        """Decode one record.

        Args:
            record: Cells of one line of tool output
            report: Receives every diagnostic raised while decoding
            source: Name of the capture the record came from (for diagnostics)

        Returns:
            The decoded event (possibly without fields), or None when the
            record's cell count does not match the schema.
        """
        schema = self._schema
        expected = schema.column_count()
        if len(record) != expected:
            report(RecordShapeError(source, record.line, expected, len(record)))
            return None

        timestamp: datetime = self._clock.now()
        tags: dict[str, str] = {}
        fields: dict[str, FieldValue] = {}

        for i, (column, value) in enumerate(zip(schema.columns, record.values, strict=True)):
            if schema.is_tag_at(i):
                tags[column] = value
                continue

            if i == schema.timestamp_index:
                timestamp = self._decode_timestamp(column, value, timestamp, report)
                continue

            converter, type_name = self._converters[i]
            try:
                fields[column] = converter(value)
            except ValueError as e:
                report(FieldDecodeError(column, value, type_name, str(e)))

        return MetricEvent(
            measurement=schema.measurement,
            tags=tags,
            fields=fields,
            timestamp=timestamp,
        )

    def _decode_timestamp(
        self,
        column: str,
        value: str,
        fallback: datetime,
        report: Callable[[Exception], None],
    ) -> datetime:
        # timestamp_index is only set when a parser was built
        assert self._timestamp_parser is not None
        try:
            return self._timestamp_parser.parse(value)
        except ValueError as e:
            report(TimestampParseError(column, value, self._schema.timestamp_format, str(e)))
            return fallback

