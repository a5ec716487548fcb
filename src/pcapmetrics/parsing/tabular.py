# src/pcapmetrics/parsing/tabular.py
"""Framing of tshark's delimited-text output into raw records.

The tool's output is buffered in full before parsing, so the parser works
on bytes in memory. csv.reader is used (rather than splitting lines) so that
quoted cells with embedded delimiters or newlines are kept intact.
"""

import csv
import io
from collections.abc import Callable, Iterator
from dataclasses import dataclass

import structlog

from pcapmetrics.contracts.errors import TabularParseError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RawRecord:
    """Cell values of one record, before any type conversion.

    Attributes:
        line: 0-based index of the record within the tool output
        values: Cell values in column order
    """

    line: int
    values: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.values)


class TabularOutputParser:
    """Turn a delimited-text byte stream into a lazy sequence of RawRecords.

    Malformed lines are reported through the callback and skipped; the
    sequence keeps going. Blank lines are ignored and do not consume a
    record index. The returned iterator is single-pass.
    """

    def __init__(self, delimiter: str = ",", encoding: str = "utf-8") -> None:
        self._delimiter = delimiter
        self._encoding = encoding

    def parse(
        self,
        data: bytes,
        *,
        source: str,
        report: Callable[[Exception], None],
    ) -> Iterator[RawRecord]:
        """Yield one RawRecord per non-empty line of data.

        Args:
            data: Complete output of one tool invocation
            source: Name of the capture the output belongs to (for diagnostics)
            report: Receives a TabularParseError for every malformed line
        """
        text = data.decode(self._encoding, errors="replace")
        # strict=True turns quoting mistakes into csv.Error instead of
        # silently gluing cells together
        reader = csv.reader(io.StringIO(text, newline=""), delimiter=self._delimiter, strict=True)

        line = 0
        while True:
            try:
                values = next(reader)
            except StopIteration:
                break
            except csv.Error as e:
                report(TabularParseError(source, line, str(e)))
                line += 1
                continue

            if not values:
                continue

            yield RawRecord(line=line, values=tuple(values))
            line += 1

        logger.debug("Tool output framed", source=source, records=line)
