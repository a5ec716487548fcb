# src/pcapmetrics/contracts/sink.py
"""Protocol for the metric sink (the monitoring accumulator).

The pipeline needs exactly two operations from its host: accept a metric,
and accept a diagnostic. Diagnostics are annotations; the sink must never
turn them into a failure of the pass.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pcapmetrics.contracts.metrics import FieldValue


@runtime_checkable
class MetricSink(Protocol):
    """Receiver of decoded metric events and non-fatal diagnostics."""

    def add_fields(
        self,
        measurement: str,
        fields: Mapping[str, "FieldValue"],
        tags: Mapping[str, str],
        timestamp: datetime,
    ) -> None:
        """Accept one metric.

        The sink decides what to do with a metric that has no fields.
        """
        ...

    def add_error(self, error: Exception) -> None:
        """Record a non-fatal diagnostic. MUST NOT raise."""
        ...


@runtime_checkable
class ConfigurableSink(MetricSink, Protocol):
    """A MetricSink that can be discovered by name and configured from options.

    Lifecycle:
        1. Discovery: pcapmetrics_get_sinks hook returns sink classes
        2. Instantiation: no-argument constructor
        3. Configuration: configure() with sink-specific options
        4. Operation: add_fields()/add_error() for one or more passes
        5. Shutdown: close() (idempotent)
    """

    # Sink name used to select it (e.g. `--sink console`)
    name: str

    def configure(self, config: dict[str, Any]) -> None:
        """Apply sink-specific options.

        Raises:
            SinkConfigError: If an option is invalid
        """
        ...

    def close(self) -> None:
        """Flush and release resources. Safe to call more than once."""
        ...
