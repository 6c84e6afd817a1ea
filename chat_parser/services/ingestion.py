"""
Line ingestion - lazy reading of the event stream, line numbers and elapsed time.

The source is either standard input (a live stream; lines arrive as the agent
produces them) or a finite file. Lines are decoded with 'surrogateescape' and
without newline translation, so writing a line back with the same settings
reproduces the input bytes exactly.
"""

from __future__ import annotations

import io
import sys
import time
from collections.abc import Callable, Iterable, Iterator
from datetime import timedelta
from typing import TextIO

import attrs

from chat_parser.exceptions import IngestionError

__all__ = [
    'STDIN_MARKER',
    'STREAM_ENCODING',
    'STREAM_ERRORS',
    'LineCounter',
    'SessionClock',
    'format_elapsed',
    'iter_raw_lines',
    'open_source',
    'source_name',
]

STDIN_MARKER = '-'
STREAM_ENCODING = 'utf-8'
STREAM_ERRORS = 'surrogateescape'


def source_name(source: str) -> str:
    """Human-readable name of an input source for messages."""
    return 'standard input' if source == STDIN_MARKER else source


def open_source(source: str) -> TextIO:
    """
    Open the input source for line-by-line reading.

    Args:
        source: File path, or STDIN_MARKER for standard input

    Returns:
        Text stream yielding raw lines with their original line endings

    Raises:
        IngestionError: If the file cannot be opened
    """
    if source == STDIN_MARKER:
        return io.TextIOWrapper(sys.stdin.buffer, encoding=STREAM_ENCODING, errors=STREAM_ERRORS, newline='')

    try:
        return open(source, encoding=STREAM_ENCODING, errors=STREAM_ERRORS, newline='')
    except OSError as e:
        raise IngestionError(source_name(source), e) from e


def iter_raw_lines(stream: Iterable[str], source: str = STDIN_MARKER) -> Iterator[str]:
    """
    Yield raw lines from a stream, one at a time, as they become available.

    Raises:
        IngestionError: If a read fails (broken pipe, I/O error, closed stream)
    """
    lines = iter(stream)
    while True:
        try:
            line = next(lines)
        except StopIteration:
            return
        except (OSError, ValueError) as e:
            raise IngestionError(source_name(source), e) from e
        yield line


@attrs.define
class LineCounter:
    """1-based display numbering for lines forwarded to the classifier."""

    value: int = 0

    def advance(self) -> int:
        self.value += 1
        return self.value


@attrs.define
class SessionClock:
    """Elapsed time since the stream started, captured once at construction."""

    time_source: Callable[[], float] = time.monotonic
    started_at: float = attrs.field(init=False)

    def __attrs_post_init__(self) -> None:
        self.started_at = self.time_source()

    def elapsed(self) -> timedelta:
        return timedelta(seconds=max(0.0, self.time_source() - self.started_at))


def format_elapsed(elapsed: timedelta) -> str:
    """
    Format elapsed time as MM:SS, or HH:MM:SS once at least an hour has passed.

    Examples:
        >>> format_elapsed(timedelta(seconds=75))
        '01:15'

        >>> format_elapsed(timedelta(hours=1, seconds=5))
        '01:00:05'
    """
    total_seconds = int(elapsed.total_seconds())
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours > 0:
        return f'{hours:02d}:{minutes:02d}:{seconds:02d}'
    return f'{minutes:02d}:{seconds:02d}'
