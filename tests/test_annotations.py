"""Tests for annotation building and delivery."""

from __future__ import annotations

import sys
import threading
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path

import pytest

from chat_parser.schemas.entries import Annotation, ChatEntry
from chat_parser.services.annotations import AnnotationEmitter, BackgroundAnnotationEmitter, build_annotation
from chat_parser.sinks import BuildkiteAnnotationSink

Classify = Callable[[str], ChatEntry | None]

ERROR_LINE = '{"type":"user","message":{"content":[{"type":"tool_result","is_error":true,"text":"boom"}]}}'


def _classified(classify: Classify, line: str) -> ChatEntry:
    entry = classify(line)
    assert entry is not None
    return entry


@pytest.mark.parametrize(
    ('line', 'style'),
    [
        ('{"type":"assistant","message":{"content":[{"type":"text","text":"hi"}]}}', 'info'),
        (ERROR_LINE, 'error'),
        ('{"type":"user","message":{"content":[{"type":"tool_result","text":"ok"}]}}', 'success'),
        ('{"type":"system","subtype":"init","session_id":"s","model":"m"}', 'warning'),
        ('plain diagnostic output', 'warning'),
        ('{"type":"result"}', 'info'),
    ],
)
def test_style_follows_speaker_and_error_flag(classify: Classify, line: str, style: str) -> None:
    assert build_annotation(_classified(classify, line)).style == style


def test_body_layout_for_tool_error(classifier) -> None:
    entry = classifier.classify(ERROR_LINE, 4, timedelta(seconds=65))

    annotation = build_annotation(entry)

    assert annotation.context == 'chat-message-4'
    assert annotation.priority == 5
    assert annotation.body.startswith('**Message 4** - `01:05`\n\n👤 **USER**:\n\n❌ Tool error:\nboom\n\n')
    assert '<details>\n<summary>Show JSON</summary>\n\n```json\n{\n  "type": "user",' in annotation.body
    assert annotation.body.endswith('\n```\n\n</details>')


def test_raw_line_is_verbatim_when_not_json(classify: Classify) -> None:
    annotation = build_annotation(_classified(classify, 'npm WARN deprecated'))

    assert '⚙️ **SYSTEM**:\n\nnpm WARN deprecated' in annotation.body
    assert '```json\nnpm WARN deprecated\n```' in annotation.body


def test_custom_prefix_and_priority(classify: Classify) -> None:
    annotation = build_annotation(_classified(classify, 'x'), priority=8, context_prefix='agent-run')

    assert annotation.context == 'agent-run-1'
    assert annotation.priority == 8


def test_contexts_are_unique_per_line(classifier) -> None:
    contexts = {
        build_annotation(classifier.classify('same line', number, timedelta(0))).context for number in range(1, 51)
    }

    assert len(contexts) == 50


def test_emitter_delivers_recognized_entries(classify: Classify, sink) -> None:
    emitter = AnnotationEmitter(sink)

    assert emitter.emit(_classified(classify, ERROR_LINE))
    assert [a.style for a in sink.annotations] == ['error']


def test_unrecognized_kinds_are_never_annotated(classify: Classify, sink) -> None:
    emitter = AnnotationEmitter(sink)

    assert not emitter.emit(_classified(classify, '{"type":"result","subtype":"success"}'))
    assert sink.annotations == []


def test_delivery_failure_is_a_warning(classify: Classify, failing_sink, logger) -> None:
    emitter = AnnotationEmitter(failing_sink, logger)

    assert not emitter.emit(_classified(classify, ERROR_LINE))
    assert not emitter.emit(_classified(classify, 'second line'))

    assert failing_sink.calls == 2
    assert len(logger.warnings) == 2
    assert 'Failed to create Buildkite annotation' in logger.warnings[0]
    assert 'sink unavailable' in logger.warnings[0]
    assert (emitter.delivered, emitter.failed) == (0, 2)


@pytest.mark.skipif(sys.platform == 'win32', reason='needs a POSIX shell script')
def test_undecodable_line_is_annotated_through_the_agent(classify: Classify, logger, tmp_path: Path) -> None:
    agent = tmp_path / 'fake-agent'
    agent.write_text(f'#!/bin/sh\ncat > "{tmp_path / "body.md"}"\n')
    agent.chmod(0o755)
    line = b'bad \xff byte'.decode('utf-8', errors='surrogateescape')
    emitter = AnnotationEmitter(BuildkiteAnnotationSink(command=str(agent)), logger)

    assert emitter.emit(_classified(classify, line))

    assert logger.warnings == []
    assert emitter.delivered == 1
    assert 'bad ? byte' in (tmp_path / 'body.md').read_text(encoding='utf-8')


def test_background_emitter_delivers_everything_before_close(classifier, sink) -> None:
    with BackgroundAnnotationEmitter(sink, workers=4) as emitter:
        for number in range(1, 21):
            emitter.emit(classifier.classify(f'line {number}', number, timedelta(0)))

    assert sorted(a.context for a in sink.annotations) == sorted(f'chat-message-{n}' for n in range(1, 21))
    assert (emitter.delivered, emitter.failed) == (20, 0)


def test_background_emitter_logs_delivery_failures(classify: Classify, failing_sink, logger) -> None:
    with BackgroundAnnotationEmitter(failing_sink, workers=2, logger=logger) as emitter:
        emitter.emit(_classified(classify, ERROR_LINE))

    assert failing_sink.calls == 1
    assert len(logger.warnings) == 1
    assert emitter.failed == 1


def test_background_emitter_reraises_unexpected_sink_errors(classify: Classify) -> None:
    class ExplodingSink:
        def __init__(self) -> None:
            self.called = threading.Event()

        def annotate(self, annotation: Annotation) -> None:
            self.called.set()
            raise RuntimeError('bug in sink')

    exploding = ExplodingSink()
    emitter = BackgroundAnnotationEmitter(exploding, workers=1)
    emitter.emit(_classified(classify, ERROR_LINE))

    with pytest.raises(RuntimeError, match='bug in sink'):
        emitter.close()
    assert exploding.called.is_set()
