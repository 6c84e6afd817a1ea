"""Tests for progressive disclosure splitting."""

from __future__ import annotations

import pytest

from chat_parser.services.disclosure import (
    ELLIPSIS,
    TOOL_INPUT_LIMITS,
    TOOL_RESULT_LIMITS,
    DisclosureLimits,
    disclose,
)


def test_short_content_is_shown_whole() -> None:
    split = disclose('{"command": "ls"}', TOOL_INPUT_LIMITS)

    assert split.preview == '{"command": "ls"}'
    assert split.remainder == ''
    assert not split.collapsed
    assert not split.truncated


def test_two_lines_within_limits_are_not_collapsed() -> None:
    split = disclose('first\nsecond', TOOL_RESULT_LIMITS)

    assert split.preview == 'first\nsecond'
    assert not split.collapsed


def test_multiline_content_keeps_first_two_lines_in_preview() -> None:
    split = disclose('one\ntwo\nthree\nfour', TOOL_RESULT_LIMITS)

    assert split.preview == 'one\ntwo'
    assert split.remainder == 'three\nfour'
    assert split.collapsed
    assert not split.truncated


def test_single_long_tool_input_line_is_cut_at_300_characters() -> None:
    text = 'x' * 250 + 'y' * 250

    split = disclose(text, TOOL_INPUT_LIMITS)

    assert split.preview == text[:300] + ELLIPSIS
    assert split.remainder == text[300:]
    assert len(split.remainder) == 200
    assert split.truncated
    assert split.preview.removesuffix(ELLIPSIS) + split.remainder == text


def test_tool_results_allow_400_characters_before_cutting() -> None:
    text = 'r' * 400

    assert not disclose(text, TOOL_RESULT_LIMITS).collapsed
    assert disclose(text + 'r', TOOL_RESULT_LIMITS).remainder == 'r'


def test_line_limit_wins_over_character_limit() -> None:
    text = 'a' * 500 + '\nb\nc'

    split = disclose(text, TOOL_INPUT_LIMITS)

    assert split.preview == 'a' * 500 + '\nb'
    assert split.remainder == 'c'
    assert not split.truncated


def test_trailing_newline_is_preserved() -> None:
    split = disclose('a\nb\n', TOOL_INPUT_LIMITS)

    assert split.preview == 'a\nb'
    assert split.remainder == ''
    assert not split.collapsed
    assert split.original == 'a\nb\n'


@pytest.mark.parametrize(
    'text',
    [
        '',
        'short',
        'a\nb',
        'a\nb\nc',
        '\n\n\n',
        'z' * 301,
        'line\n' + 'w' * 600,
        '{\n  "command": "ls"\n}',
        'unicode ✅ ' * 100,
    ],
)
@pytest.mark.parametrize('limits', [TOOL_INPUT_LIMITS, TOOL_RESULT_LIMITS, DisclosureLimits(1, 10)])
def test_preview_and_remainder_reconstruct_the_input(text: str, limits: DisclosureLimits) -> None:
    assert disclose(text, limits).original == text
