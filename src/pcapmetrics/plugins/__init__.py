"""Sink plugin discovery (pluggy)."""

from pcapmetrics.plugins.hookspecs import hookimpl, hookspec
from pcapmetrics.plugins.manager import SinkManager

__all__ = [
    "SinkManager",
    "hookimpl",
    "hookspec",
]
