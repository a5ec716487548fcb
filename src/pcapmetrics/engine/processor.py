# src/pcapmetrics/engine/processor.py
"""CaptureProcessor: one gather pass over the configured capture files.

Each file moves through Claiming -> Invoking -> Parsing -> Released. A
failure while claiming or invoking ends that file's pass early; it never
ends the run. Files are handled one at a time in configured order, and
records are emitted in the order the tool printed them.

Only two conditions abort a pass, both before any file is touched: a
missing tshark_path, and a processing directory that cannot be created.
"""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import structlog

from pcapmetrics.contracts.errors import HandoffError, PCAPConfigError, ToolInvocationError
from pcapmetrics.contracts.sink import MetricSink
from pcapmetrics.core.clock import DEFAULT_CLOCK, Clock
from pcapmetrics.core.config import PCAPSettings
from pcapmetrics.engine.handoff import FileHandoff
from pcapmetrics.engine.tool import ToolRunner
from pcapmetrics.parsing.decoder import RecordDecoder
from pcapmetrics.parsing.tabular import TabularOutputParser

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class GatherSummary:
    """Outcome counts of one gather pass."""

    files_processed: int
    files_skipped: int
    events_emitted: int
    diagnostics: int


class _CountingReporter:
    """Forwards diagnostics to the sink and counts them."""

    def __init__(self, sink: MetricSink) -> None:
        self._sink = sink
        self.count = 0

    def __call__(self, error: Exception) -> None:
        self.count += 1
        self._sink.add_error(error)


class CaptureProcessor:
    """Converts capture files into metric events via tshark.

    Example:
        settings = load_settings(Path("pcap.yaml"))
        processor = CaptureProcessor(settings)
        summary = processor.gather(sink)
    """

    def __init__(
        self,
        settings: PCAPSettings,
        *,
        clock: Clock = DEFAULT_CLOCK,
        runner: ToolRunner | None = None,
        parser: TabularOutputParser | None = None,
    ) -> None:
        self._settings = settings
        self._files = tuple(Path(f) for f in settings.files)
        self._handoff = FileHandoff(settings.resolved_tmp_dir())
        self._runner = runner if runner is not None else ToolRunner(settings.tshark_path, settings.tshark_args)
        self._parser = parser if parser is not None else TabularOutputParser()
        self._decoder = RecordDecoder(settings.build_schema(), clock=clock)

    @property
    def handoff(self) -> FileHandoff:
        return self._handoff

    def gather(self, sink: MetricSink) -> GatherSummary:
        """Process every configured file once.

        Args:
            sink: Receives every decoded metric and every diagnostic

        Returns:
            Counts describing the pass.

        Raises:
            PCAPConfigError: tshark_path is not configured.
            TempDirError: The processing directory cannot be created.
        """
        if not self._settings.tshark_path:
            raise PCAPConfigError("`tshark_path` is not configured")
        self._handoff.prepare()

        report = _CountingReporter(sink)
        processed = skipped = emitted = 0

        for original in self._files:
            file_events = self._process_file(original, sink, report)
            if file_events is None:
                skipped += 1
            else:
                processed += 1
                emitted += file_events

        summary = GatherSummary(
            files_processed=processed,
            files_skipped=skipped,
            events_emitted=emitted,
            diagnostics=report.count,
        )
        logger.info(
            "Gather pass complete",
            files_processed=summary.files_processed,
            files_skipped=summary.files_skipped,
            events_emitted=summary.events_emitted,
            diagnostics=summary.diagnostics,
        )
        return summary

    def _process_file(
        self,
        original: Path,
        sink: MetricSink,
        report: Callable[[Exception], None],
    ) -> int | None:
        """Run one file through the pipeline.

        Returns:
            Number of events emitted, or None if the file ended early.
        """
        log = logger.bind(capture=str(original))

        # Claiming
        try:
            processing_path = self._handoff.claim(original, report)
        except HandoffError as e:
            log.debug("Capture not claimed", reason=str(e))
            report(e)
            return None

        # Invoking
        try:
            output = self._runner.run(processing_path)
        except ToolInvocationError as e:
            log.debug("Tool failed", returncode=e.returncode)
            self._handoff.release(processing_path, report)
            report(e)
            return None

        # Parsing
        source = str(processing_path)
        emitted = 0
        for record in self._parser.parse(output, source=source, report=report):
            event = self._decoder.decode(record, report, source=source)
            if event is None:
                continue
            sink.add_fields(event.measurement, event.fields, event.tags, event.timestamp)
            emitted += 1

        # Released
        self._handoff.release(processing_path, report)
        log.debug("Capture processed", events=emitted)
        return emitted
