"""
Annotation emitter - per-entry status reports for the annotation sink.

Annotations are advisory: a failed delivery is logged as a warning and the
transcript carries on. Entries of unrecognized event kinds are never annotated.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from types import TracebackType

from chat_parser.exceptions import AnnotationDeliveryError
from chat_parser.protocols import LoggerProtocol, NullLogger
from chat_parser.schemas.entries import Annotation, ChatEntry
from chat_parser.schemas.types import AnnotationStyle
from chat_parser.services.classifier import pretty_json_text
from chat_parser.services.formatting import DisclosurePolicy, format_markdown
from chat_parser.services.ingestion import format_elapsed
from chat_parser.sinks.protocol import AnnotationSink

__all__ = [
    'AnnotationEmitter',
    'BackgroundAnnotationEmitter',
    'annotation_style',
    'build_annotation',
]

DEFAULT_CONTEXT_PREFIX = 'chat-message'
DEFAULT_PRIORITY = 5


def annotation_style(entry: ChatEntry) -> AnnotationStyle:
    """Map speaker and error flag onto an annotation style."""
    match entry.speaker:
        case 'USER':
            return 'error' if entry.has_error else 'success'
        case 'SYSTEM':
            return 'warning'
        case _:
            return 'info'


def _speaker_header(entry: ChatEntry) -> str:
    match entry.speaker:
        case 'ASSISTANT':
            return '🤖 **ASSISTANT**:'
        case 'USER':
            return '👤 **USER**:'
        case 'SYSTEM':
            return '⚙️ **SYSTEM**:'
        case _:
            return f'**{entry.speaker_label}**:'


def build_annotation(
    entry: ChatEntry,
    policy: DisclosurePolicy | None = None,
    priority: int = DEFAULT_PRIORITY,
    context_prefix: str = DEFAULT_CONTEXT_PREFIX,
) -> Annotation:
    """
    Build the markdown report for one entry.

    Body layout: title with line number and timestamp, speaker header, content
    (with its own progressive disclosure), then the raw event in a collapsible
    "Show JSON" block - pretty-printed when the line was JSON, verbatim otherwise.
    """
    raw = pretty_json_text(entry.raw_line) if entry.was_json else entry.raw_line
    content = format_markdown(entry.blocks, policy or DisclosurePolicy())

    body = (
        f'**Message {entry.line_number}** - `{format_elapsed(entry.elapsed)}`\n\n'
        f'{_speaker_header(entry)}\n\n'
        f'{content}\n\n'
        f'<details>\n<summary>Show JSON</summary>\n\n```json\n{raw}\n```\n\n</details>'
    )

    return Annotation(
        style=annotation_style(entry),
        context=f'{context_prefix}-{entry.line_number}',
        body=body,
        priority=priority,
    )


class AnnotationEmitter:
    """
    Builds annotations and delivers them inline, before the next line is read.

    `delivered` and `failed` count completed sink calls. Usable as a context
    manager; close() is a no-op here and waits for pending deliveries in
    BackgroundAnnotationEmitter.
    """

    def __init__(
        self,
        sink: AnnotationSink,
        logger: LoggerProtocol | None = None,
        policy: DisclosurePolicy | None = None,
        priority: int = DEFAULT_PRIORITY,
        context_prefix: str = DEFAULT_CONTEXT_PREFIX,
    ) -> None:
        self.sink = sink
        self.logger = logger or NullLogger()
        self.policy = policy or DisclosurePolicy()
        self.priority = priority
        self.context_prefix = context_prefix
        self.delivered = 0
        self.failed = 0
        self._lock = threading.Lock()

    def build(self, entry: ChatEntry) -> Annotation:
        return build_annotation(entry, self.policy, self.priority, self.context_prefix)

    def emit(self, entry: ChatEntry) -> bool:
        """
        Report one entry to the sink.

        Returns:
            False when the entry was skipped (unrecognized kind) or delivery failed
        """
        if not entry.recognized:
            return False
        return self.deliver(self.build(entry))

    def deliver(self, annotation: Annotation) -> bool:
        try:
            self.sink.annotate(annotation)
        except AnnotationDeliveryError as e:
            self.logger.warning(f'Failed to create Buildkite annotation: {e}')
            with self._lock:
                self.failed += 1
            return False
        with self._lock:
            self.delivered += 1
        return True

    def close(self) -> None:
        pass

    def __enter__(self) -> AnnotationEmitter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class BackgroundAnnotationEmitter(AnnotationEmitter):
    """
    Delivers annotations on a thread pool so slow sink calls don't hold up the transcript.

    Annotations are still built on the caller's thread, in arrival order. Only
    delivery is concurrent, so sink calls may complete out of order; contexts
    are unique per line number, which makes that safe. Workers only read frozen
    Annotation values. The counters are final once close() returns.
    """

    def __init__(
        self,
        sink: AnnotationSink,
        workers: int,
        logger: LoggerProtocol | None = None,
        policy: DisclosurePolicy | None = None,
        priority: int = DEFAULT_PRIORITY,
        context_prefix: str = DEFAULT_CONTEXT_PREFIX,
    ) -> None:
        super().__init__(sink, logger, policy, priority, context_prefix)
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix='annotate')
        self._failure: BaseException | None = None

    def emit(self, entry: ChatEntry) -> bool:
        """Queue one entry for delivery. Returns False only when the entry is skipped."""
        if not entry.recognized:
            return False
        future = self._executor.submit(self.deliver, self.build(entry))
        future.add_done_callback(self._record_failure)
        return True

    def _record_failure(self, future: Future[bool]) -> None:
        error = future.exception()
        if error is not None:
            with self._lock:
                if self._failure is None:
                    self._failure = error

    def close(self) -> None:
        """
        Wait for queued deliveries.

        Raises:
            Exception: The first unexpected (non-delivery) error raised by the sink
        """
        self._executor.shutdown(wait=True)
        if self._failure is not None:
            raise self._failure
