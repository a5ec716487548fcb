"""Parsing of tool output: framing, field conversion, timestamps and decoding."""

from pcapmetrics.parsing.decoder import RecordDecoder
from pcapmetrics.parsing.tabular import RawRecord, TabularOutputParser
from pcapmetrics.parsing.timestamps import TimestampParser

__all__ = [
    "RawRecord",
    "RecordDecoder",
    "TabularOutputParser",
    "TimestampParser",
]
