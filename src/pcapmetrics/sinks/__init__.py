"""Built-in metric sinks.

Sinks are discovered via pluggy hooks.

Available sinks:
- ConsoleSink: Write metrics to stdout/stderr as line protocol or JSON lines
- MetricAccumulator: Collect metrics and diagnostics in memory

Plugin registration:
    Sinks are registered via the pcapmetrics_get_sinks hook.
    BuiltinSinksPlugin in this module registers the built-in sinks.
"""

from pcapmetrics.plugins.hookspecs import hookimpl
from pcapmetrics.sinks.console import ConsoleSink
from pcapmetrics.sinks.memory import MetricAccumulator


class BuiltinSinksPlugin:
    """Plugin that registers the built-in sinks."""

    @hookimpl
    def pcapmetrics_get_sinks(self) -> list[type]:
        """Return built-in sink classes."""
        return [ConsoleSink, MetricAccumulator]


__all__ = [
    "BuiltinSinksPlugin",
    "ConsoleSink",
    "MetricAccumulator",
]
