# tests/property/test_record_shape_properties.py
"""Property-based tests for record framing and shape checking.

- Every well-formed line of tool output becomes exactly one record, in order
- A record is emitted if and only if its width equals the schema width
- Rejected records are reported with their line index
"""

from __future__ import annotations

import csv
import io
from datetime import UTC, datetime

from hypothesis import given
from hypothesis import strategies as st

from pcapmetrics.contracts.errors import RecordShapeError
from pcapmetrics.contracts.schema import CaptureSchema
from pcapmetrics.core.clock import MockClock
from pcapmetrics.parsing.decoder import RecordDecoder
from pcapmetrics.parsing.tabular import TabularOutputParser

SCHEMA = CaptureSchema.build(measurement="pcap", columns=["a", "b", "c"], types=["string", "string", "string"])
CLOCK = MockClock(datetime(2030, 1, 1, tzinfo=UTC))

# Cells may contain delimiters, quotes and newlines: the writer quotes them
cell_st = st.text(alphabet=st.characters(blacklist_categories=("Cs",), blacklist_characters="\x00\r"), max_size=12)
row_st = st.lists(cell_st, min_size=1, max_size=5).filter(lambda row: row != [""])


def _encode(rows: list[list[str]]) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


class TestFraming:
    """Output written by a conforming CSV writer frames back exactly."""

    @given(rows=st.lists(row_st, max_size=10))
    def test_rows_frame_in_order(self, rows: list[list[str]]) -> None:
        diagnostics: list[Exception] = []

        records = list(TabularOutputParser().parse(_encode(rows), source="cap", report=diagnostics.append))

        assert [list(r.values) for r in records] == rows
        assert [r.line for r in records] == list(range(len(rows)))
        assert diagnostics == []


class TestShape:
    """Width mismatches reject whole records and nothing else."""

    @given(rows=st.lists(row_st, max_size=10))
    def test_emitted_iff_width_matches(self, rows: list[list[str]]) -> None:
        diagnostics: list[Exception] = []
        decoder = RecordDecoder(SCHEMA, clock=CLOCK)

        events = []
        for record in TabularOutputParser().parse(_encode(rows), source="cap", report=diagnostics.append):
            event = decoder.decode(record, diagnostics.append, source="cap")
            if event is not None:
                events.append(event)

        expected_ok = [row for row in rows if len(row) == 3]
        assert [[e.fields[c] for c in ("a", "b", "c")] for e in events] == expected_ok
        assert all(isinstance(d, RecordShapeError) for d in diagnostics)
        assert [d.line for d in diagnostics] == [i for i, row in enumerate(rows) if len(row) != 3]
