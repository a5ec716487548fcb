# src/pcapmetrics/engine/tool.py
"""Invocation of the external capture-analysis tool (tshark).

The tool is run to completion and its standard output is buffered in full
before any of it is parsed. There is no timeout here; the caller's schedule
bounds how long a pass may take.
"""

import subprocess
from collections.abc import Sequence
from pathlib import Path

import structlog

from pcapmetrics.contracts.errors import ToolInvocationError

logger = structlog.get_logger(__name__)


class ToolRunner:
    """Runs `<tool_path> <args...> -r <capture>` and returns its stdout."""

    def __init__(self, tool_path: str, args: Sequence[str] = ()) -> None:
        self._tool_path = tool_path
        self._args = tuple(args)

    def command_for(self, capture: Path) -> list[str]:
        return [self._tool_path, *self._args, "-r", str(capture)]

    def run(self, capture: Path) -> bytes:
        """Analyse one capture file.

        Args:
            capture: Path of the (claimed) capture file

        Returns:
            The tool's complete standard output.

        Raises:
            ToolInvocationError: The tool could not be started or exited
                with a non-zero status. Captured output is attached.
        """
        command = self.command_for(capture)
        try:
            result = subprocess.run(command, capture_output=True, check=False)
        except (OSError, ValueError) as e:
            # ValueError: an argument holds a NUL byte
            raise ToolInvocationError(capture, str(e)) from e

        if result.returncode != 0:
            raise ToolInvocationError(
                capture,
                f"exit status {result.returncode}",
                returncode=result.returncode,
                output=result.stdout,
                stderr=result.stderr,
            )

        logger.debug(
            "Tool finished",
            capture=str(capture),
            output_bytes=len(result.stdout),
            stderr_bytes=len(result.stderr),
        )
        return result.stdout
