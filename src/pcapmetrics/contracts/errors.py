# src/pcapmetrics/contracts/errors.py
"""Error taxonomy for the capture-to-metric pipeline.

Errors fall into four scopes:

- Fatal to the run (PCAPConfigError, TempDirError): raised out of
  CaptureProcessor.gather() before any capture file is touched.
- Fatal to one file (HandoffError, CaptureMissingError, ToolInvocationError):
  reported to the sink, processing moves on to the next file.
- Fatal to one record (TabularParseError, RecordShapeError): the line or
  record is skipped.
- Fatal to one field (FieldDecodeError, TimestampParseError): the field is
  omitted, or the timestamp falls back to the wall clock.

Everything except the fatal-to-run errors is delivered as a diagnostic via
MetricSink.add_error() and never stops the pass.
"""

from pathlib import Path


class PCAPMetricsError(Exception):
    """Base class for all pcapmetrics errors."""


class PCAPConfigError(PCAPMetricsError):
    """Raised when settings are missing or invalid."""


class TempDirError(PCAPMetricsError):
    """Raised when the processing directory cannot be created."""

    def __init__(self, tmp_dir: Path, reason: str) -> None:
        self.tmp_dir = tmp_dir
        self.reason = reason
        super().__init__(f"failed to create temporary directory {tmp_dir}: {reason}")


class HandoffError(PCAPMetricsError):
    """A capture file could not be claimed, recreated or released.

    Attributes:
        path: The file the failed operation was applied to
    """

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(message)


class CaptureMissingError(HandoffError):
    """The capture file was gone when we tried to claim it.

    Usually the producer rotated or cleaned it up; the file is skipped.
    """

    def __init__(self, path: Path) -> None:
        super().__init__(
            path,
            f"original PCAP file {path} does not exist, skipping. It might have been rotated or cleaned up.",
        )


class ToolInvocationError(PCAPMetricsError):
    """The analysis tool could not be started or exited non-zero.

    Attributes:
        processing_path: Capture file the tool was run against
        returncode: Exit status, or None if the process never started
        output: Captured standard output (may be partial)
        stderr: Captured standard error
    """

    def __init__(
        self,
        processing_path: Path,
        reason: str,
        *,
        returncode: int | None = None,
        output: bytes = b"",
        stderr: bytes = b"",
    ) -> None:
        self.processing_path = processing_path
        self.reason = reason
        self.returncode = returncode
        self.output = output
        self.stderr = stderr
        message = f"failed to execute `tshark` for {processing_path}: {reason}\nOutput: {output.decode('utf-8', errors='replace')}"
        if stderr:
            message += f"\nStderr: {stderr.decode('utf-8', errors='replace')}"
        super().__init__(message)


class TabularParseError(PCAPMetricsError):
    """A line of tool output violated the delimited-text grammar."""

    def __init__(self, source: str, line: int, reason: str) -> None:
        self.source = source
        self.line = line
        self.reason = reason
        super().__init__(f"failed to read CSV record from `tshark` output for {source} at line {line}: {reason}")


class RecordShapeError(PCAPMetricsError):
    """A record's cell count does not match the configured column count."""

    def __init__(self, source: str, line: int, expected: int, actual: int) -> None:
        self.source = source
        self.line = line
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"CSV record at line {line} has {actual} entries, but expected {expected} based on columns for {source}. Skipping..."
        )


class FieldDecodeError(PCAPMetricsError):
    """A single cell could not be converted to its declared type."""

    def __init__(self, column: str, value: str, type_name: str, reason: str) -> None:
        self.column = column
        self.value = value
        self.type_name = type_name
        self.reason = reason
        super().__init__(f"failed to parse {type_name} for column '{column}' value '{value}': {reason}")


class TimestampParseError(FieldDecodeError):
    """The timestamp cell did not match the configured format."""

    def __init__(self, column: str, value: str, fmt: str, reason: str) -> None:
        self.format = fmt
        super().__init__(column, value, "timestamp", reason)
        # Replace the generic message with one naming the format
        self.args = (f"failed to parse timestamp '{value}' with format '{fmt}' for column '{column}': {reason}",)


class SinkConfigError(PCAPMetricsError):
    """Raised when a sink is given invalid options.

    Attributes:
        sink_name: Name of the sink that rejected its configuration
        message: Human-readable error description
    """

    def __init__(self, sink_name: str, message: str) -> None:
        self.sink_name = sink_name
        self.message = message
        super().__init__(f"Sink '{sink_name}' failed: {message}")
