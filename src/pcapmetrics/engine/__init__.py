"""Capture processing engine: file handoff, tool invocation and the gather pass."""

from pcapmetrics.engine.handoff import PROCESSING_SUFFIX, FileHandoff
from pcapmetrics.engine.processor import CaptureProcessor, GatherSummary
from pcapmetrics.engine.tool import ToolRunner

__all__ = [
    "PROCESSING_SUFFIX",
    "CaptureProcessor",
    "FileHandoff",
    "GatherSummary",
    "ToolRunner",
]
