# src/pcapmetrics/engine/handoff.py
"""Claiming capture files from a producer that keeps writing to them.

A claim is a two-step handoff, not a transaction:

    1. rename <original> -> <tmp_dir>/<basename>.pcap.processing
    2. create an empty file at <original> so the producer can carry on

Between the two steps the original path briefly does not exist, and a
producer holding an open descriptor keeps writing into the renamed file.
Neither is corrected for. If step 2 fails the renamed file is still
processed and the failure is reported.

Known limitation: two configured captures with the same basename in
different directories share one processing path.
"""

import os
from collections.abc import Callable
from pathlib import Path

import structlog

from pcapmetrics.contracts.errors import CaptureMissingError, HandoffError, TempDirError

logger = structlog.get_logger(__name__)

PROCESSING_SUFFIX = ".pcap.processing"


class FileHandoff:
    """Moves capture files into a private processing directory and back out."""

    def __init__(self, tmp_dir: Path) -> None:
        self._tmp_dir = tmp_dir

    @property
    def tmp_dir(self) -> Path:
        return self._tmp_dir

    def prepare(self) -> None:
        """Create the processing directory (and parents) if needed.

        Raises:
            TempDirError: If the directory cannot be created. This is fatal
                for the whole pass.
        """
        try:
            self._tmp_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
        except (OSError, ValueError) as e:
            raise TempDirError(self._tmp_dir, str(e)) from e

    def processing_path_for(self, original: Path) -> Path:
        return self._tmp_dir / f"{original.name}{PROCESSING_SUFFIX}"

    def claim(self, original: Path, report: Callable[[Exception], None]) -> Path:
        """Take exclusive ownership of a capture file.

        Args:
            original: Path the producer writes to
            report: Receives a HandoffError if the empty replacement cannot
                be created; the claim still succeeds in that case

        Returns:
            The processing path the capture now lives at.

        Raises:
            CaptureMissingError: The capture does not exist (rotated or removed).
            HandoffError: The rename failed for any other reason.
        """
        processing_path = self.processing_path_for(original)
        try:
            os.rename(original, processing_path)
        except (OSError, ValueError) as e:
            # ValueError: a path holds a NUL byte
            # ENOENT also covers a vanished processing directory
            if isinstance(e, FileNotFoundError) and not os.path.lexists(original):
                raise CaptureMissingError(original) from e
            raise HandoffError(
                original,
                f"failed to rename original PCAP file {original} to {processing_path}: {e}",
            ) from e

        try:
            # truncates, like creat(2)
            with open(original, "w"):
                pass
        except OSError as e:
            report(
                HandoffError(
                    original,
                    f"failed to create new empty PCAP file {original} after renaming: {e}. "
                    f"Processing will continue on {processing_path} but original file might be missing.",
                )
            )

        logger.debug("Capture claimed", original=str(original), processing_path=str(processing_path))
        return processing_path

    def release(self, processing_path: Path, report: Callable[[Exception], None]) -> None:
        """Delete a processing file. Failure is reported, never raised."""
        try:
            processing_path.unlink()
        except OSError as e:
            report(HandoffError(processing_path, f"failed to remove processing PCAP file {processing_path}: {e}"))
            return
        logger.debug("Capture released", processing_path=str(processing_path))
