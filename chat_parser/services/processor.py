"""
Transcript processor - drives one session stream through capture, classification,
rendering and annotation, strictly one line at a time.

Per-run state (line counter, stream start time) lives on the processor object,
so every stage below it is stateless and testable in isolation.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TextIO

import attrs

from chat_parser.exceptions import CaptureFileError
from chat_parser.protocols import LoggerProtocol, NullLogger
from chat_parser.schemas.entries import ChatEntry
from chat_parser.services.annotations import AnnotationEmitter
from chat_parser.services.classifier import EventClassifier
from chat_parser.services.ingestion import STREAM_ENCODING, STREAM_ERRORS, LineCounter, SessionClock
from chat_parser.services.renderer import TranscriptRenderer

__all__ = ['ProcessingStats', 'TranscriptProcessor', 'open_capture']


def open_capture(path: str) -> TextIO:
    """
    Create (or truncate) the raw-stream capture file.

    Raises:
        CaptureFileError: If the file cannot be created - checked before any input is read
    """
    try:
        return open(path, 'w', encoding=STREAM_ENCODING, errors=STREAM_ERRORS, newline='')
    except OSError as e:
        raise CaptureFileError(path, e) from e


@attrs.define
class ProcessingStats:
    """Counters reported at the end of a run."""

    lines_read: int = 0
    entries_rendered: int = 0


@attrs.define
class TranscriptProcessor:
    """
    One processing run over one session stream.

    Each raw line is, in order: appended to the capture file (if any), trimmed,
    numbered and timestamped, classified, printed, then annotated. Nothing is
    kept once the line has been handled, so stream length is unbounded.
    """

    classifier: EventClassifier
    renderer: TranscriptRenderer
    emitter: AnnotationEmitter | None = None  # None when annotations are disabled
    capture: TextIO | None = None
    capture_path: str = ''
    logger: LoggerProtocol = attrs.Factory(NullLogger)
    clock: SessionClock = attrs.Factory(SessionClock)
    counter: LineCounter = attrs.Factory(LineCounter)
    stats: ProcessingStats = attrs.Factory(ProcessingStats)

    def process_line(self, raw: str) -> ChatEntry | None:
        """
        Handle one raw input line.

        Returns:
            The entry produced for the line, or None for blank lines and lines
            without printable content
        """
        self.stats.lines_read += 1
        self._capture(raw)

        line = raw.strip()
        if not line:
            return None

        line_number = self.counter.advance()
        entry = self.classifier.classify(line, line_number, self.clock.elapsed())
        if entry is None:
            return None

        if self.renderer.render(entry):
            self.stats.entries_rendered += 1
        if self.emitter is not None:
            self.emitter.emit(entry)
        return entry

    def run(self, lines: Iterable[str]) -> ProcessingStats:
        """
        Process lines until the source is exhausted.

        Raises:
            IngestionError, RenderError, CaptureFileError: Fatal, ends the run mid-stream
        """
        for raw in lines:
            self.process_line(raw)

        self.logger.info(f'Processed {self.stats.lines_read} lines: {self.stats.entries_rendered} entries')
        return self.stats

    def _capture(self, raw: str) -> None:
        if self.capture is None:
            return
        try:
            self.capture.write(raw)
            self.capture.flush()
        except (OSError, ValueError) as e:
            raise CaptureFileError(self.capture_path, e) from e
