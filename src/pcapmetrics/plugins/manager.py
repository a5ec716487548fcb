# src/pcapmetrics/plugins/manager.py
"""Sink manager for discovery, registration, and lookup.

Uses pluggy for hook-based sink registration.
"""

from typing import Any

import pluggy
import structlog

from pcapmetrics.contracts.errors import SinkConfigError
from pcapmetrics.contracts.sink import ConfigurableSink
from pcapmetrics.plugins.hookspecs import PROJECT_NAME, PCAPMetricsSinkSpec

logger = structlog.get_logger(__name__)


class SinkManager:
    """Manages sink discovery, registration, and lookup.

    Usage:
        manager = SinkManager()
        manager.register_builtin_plugins()

        sink = manager.create_sink("console", {"format": "json"})
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(PCAPMetricsSinkSpec)

        # name -> sink class, for duplicate detection
        self._sinks: dict[str, type[ConfigurableSink]] = {}

    def register_builtin_plugins(self) -> None:
        """Register the sinks shipped with pcapmetrics.

        Call this once at startup to make built-in sinks discoverable.
        """
        from pcapmetrics.sinks import BuiltinSinksPlugin

        self.register(BuiltinSinksPlugin())

    def register(self, plugin: Any) -> None:
        """Register a plugin.

        Args:
            plugin: Plugin instance implementing hook methods

        Raises:
            ValueError: If a sink with the same name is already registered
        """
        self._pm.register(plugin)
        try:
            self._refresh_caches()
        except ValueError:
            # Leave the manager as it was before the bad plugin
            self._pm.unregister(plugin)
            raise

    def _refresh_caches(self) -> None:
        """Refresh the sink cache from hooks.

        Raises:
            ValueError: If two sinks share a name
        """
        new_sinks: dict[str, type[ConfigurableSink]] = {}

        for sinks in self._pm.hook.pcapmetrics_get_sinks():
            for cls in sinks:
                name = cls.name
                if name in new_sinks:
                    raise ValueError(f"Duplicate sink plugin name: '{name}'. Already registered by {new_sinks[name].__name__}")
                new_sinks[name] = cls

        self._sinks = new_sinks

    def get_sinks(self) -> list[type[ConfigurableSink]]:
        """Get all registered sink classes."""
        return list(self._sinks.values())

    def get_sink_by_name(self, name: str) -> type[ConfigurableSink] | None:
        """Get sink class by name."""
        return self._sinks.get(name)

    def create_sink(self, name: str, config: dict[str, Any] | None = None) -> ConfigurableSink:
        """Instantiate and configure a sink by name.

        Raises:
            SinkConfigError: If no sink has that name, or its configuration is invalid
        """
        cls = self.get_sink_by_name(name)
        if cls is None:
            available = ", ".join(sorted(self._sinks)) or "none"
            raise SinkConfigError(name, f"unknown sink. Available: {available}")

        sink = cls()
        sink.configure(config or {})
        logger.debug("Sink created", sink=name)
        return sink
