# src/pcapmetrics/plugins/hookspecs.py
"""pluggy hook specifications for metric sinks.

Sink providers implement these hooks to register themselves. The
SinkManager calls them during discovery.

Usage (implementing a sink plugin):
    from pcapmetrics.plugins.hookspecs import hookimpl

    class MySinkPlugin:
        @hookimpl
        def pcapmetrics_get_sinks(self):
            return [MySink]
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from pcapmetrics.contracts.sink import ConfigurableSink

# Project name for pluggy
PROJECT_NAME = "pcapmetrics"

# Hook specification marker
hookspec = pluggy.HookspecMarker(PROJECT_NAME)

# Hook implementation marker (for plugins to use)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class PCAPMetricsSinkSpec:
    """Hook specifications for sink plugins."""

    @hookspec
    def pcapmetrics_get_sinks(self) -> list[type["ConfigurableSink"]]:  # type: ignore[empty-body]
        """Return sink classes (not instances).

        Each class must have a no-argument constructor and implement
        ConfigurableSink.
        """
