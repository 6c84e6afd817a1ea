"""Tests for line ingestion, numbering and the session clock."""

from __future__ import annotations

import io
from collections.abc import Iterator
from datetime import timedelta
from pathlib import Path

import pytest

from chat_parser.exceptions import IngestionError
from chat_parser.services.ingestion import LineCounter, SessionClock, iter_raw_lines, open_source


def test_lines_keep_their_original_endings(tmp_path: Path) -> None:
    path = tmp_path / 'session.jsonl'
    path.write_bytes(b'first\r\nsecond\n\nlast')

    with open_source(str(path)) as stream:
        assert list(iter_raw_lines(stream, str(path))) == ['first\r\n', 'second\n', '\n', 'last']


def test_invalid_utf8_survives_a_round_trip(tmp_path: Path) -> None:
    path = tmp_path / 'session.jsonl'
    path.write_bytes(b'bad \xff byte\n')

    with open_source(str(path)) as stream:
        [line] = list(iter_raw_lines(stream))

    assert line.encode('utf-8', errors='surrogateescape') == b'bad \xff byte\n'


def test_missing_file_is_an_ingestion_error(tmp_path: Path) -> None:
    with pytest.raises(IngestionError) as exc_info:
        open_source(str(tmp_path / 'missing.jsonl'))

    assert exc_info.value.stage == 'ingestion'
    assert 'missing.jsonl' in str(exc_info.value)


def test_read_failure_mid_stream_is_an_ingestion_error() -> None:
    def flaky() -> Iterator[str]:
        yield 'one\n'
        raise OSError(5, 'Input/output error')

    lines = iter_raw_lines(flaky(), '-')

    assert next(lines) == 'one\n'
    with pytest.raises(IngestionError, match='standard input'):
        next(lines)


def test_reading_is_lazy() -> None:
    source = io.StringIO('a\nb\n')

    lines = iter_raw_lines(source)

    assert next(lines) == 'a\n'
    assert source.read() == 'b\n'


def test_counter_is_one_based() -> None:
    counter = LineCounter()

    assert [counter.advance() for _ in range(3)] == [1, 2, 3]


def test_clock_measures_from_construction(fake_time) -> None:
    clock = SessionClock(fake_time)
    fake_time.advance(90.5)

    assert clock.elapsed() == timedelta(seconds=90.5)
