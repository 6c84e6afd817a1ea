"""Shared pytest fixtures and test doubles."""

from __future__ import annotations

import io
from collections.abc import Callable
from datetime import timedelta

import pytest

from chat_parser.exceptions import AnnotationDeliveryError
from chat_parser.schemas.entries import Annotation, ChatEntry
from chat_parser.services.annotations import AnnotationEmitter
from chat_parser.services.classifier import EventClassifier
from chat_parser.services.ingestion import SessionClock
from chat_parser.services.processor import TranscriptProcessor
from chat_parser.services.renderer import TranscriptRenderer


class RecordingSink:
    """Annotation sink that keeps every annotation it receives."""

    def __init__(self) -> None:
        self.annotations: list[Annotation] = []

    def annotate(self, annotation: Annotation) -> None:
        self.annotations.append(annotation)


class FailingSink:
    """Annotation sink whose every delivery fails."""

    def __init__(self) -> None:
        self.calls = 0

    def annotate(self, annotation: Annotation) -> None:
        self.calls += 1
        raise AnnotationDeliveryError(annotation.context, 'sink unavailable')


class RecordingLogger:
    """LoggerProtocol implementation that records messages by level."""

    def __init__(self) -> None:
        self.infos: list[str] = []
        self.warnings: list[str] = []

    def info(self, message: str) -> None:
        self.infos.append(message)

    def warning(self, message: str) -> None:
        self.warnings.append(message)


class FakeTime:
    """Manually advanced time source for SessionClock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def classifier() -> EventClassifier:
    return EventClassifier()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def out() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def classify(classifier: EventClassifier) -> Callable[[str], ChatEntry | None]:
    """Classify a line as line 1 at 00:00."""

    def _classify(line: str) -> ChatEntry | None:
        return classifier.classify(line, 1, timedelta(0))

    return _classify


@pytest.fixture
def make_processor(
    sink: RecordingSink, logger: RecordingLogger, fake_time: FakeTime, out: io.StringIO
) -> Callable[..., TranscriptProcessor]:
    """Build a processor writing to `out` and annotating into `sink`."""

    def _make(**overrides: object) -> TranscriptProcessor:
        options: dict[str, object] = {
            'classifier': EventClassifier(logger),
            'renderer': TranscriptRenderer(out=out, color='never'),
            'emitter': AnnotationEmitter(sink, logger),
            'logger': logger,
            'clock': SessionClock(fake_time),
        }
        options.update(overrides)
        return TranscriptProcessor(**options)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def failing_sink() -> FailingSink:
    return FailingSink()
