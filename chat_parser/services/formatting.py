"""
Content formatting - turns an entry's blocks into text for each output surface.

Both surfaces apply progressive disclosure to tool inputs and tool results,
each with its own DisclosurePolicy:
- markdown: remainders go into <details> blocks (annotation sink)
- terminal: remainders follow a "more" marker in a muted tone (transcript)
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Literal

import attrs

from chat_parser.schemas.entries import PARAGRAPH_SEPARATOR, ContentBlock, TextBlock, ToolResultBlock, ToolUseBlock
from chat_parser.services.disclosure import TOOL_INPUT_LIMITS, TOOL_RESULT_LIMITS, DisclosureLimits, disclose

__all__ = [
    'DisclosurePolicy',
    'LineTone',
    'TerminalLine',
    'format_markdown',
    'format_terminal',
]

LineTone = Literal['content', 'tool', 'result', 'error', 'muted']


@attrs.define(frozen=True)
class DisclosurePolicy:
    """Disclosure thresholds for one output surface."""

    tool_input: DisclosureLimits = TOOL_INPUT_LIMITS
    tool_result: DisclosureLimits = TOOL_RESULT_LIMITS


@attrs.define(frozen=True)
class TerminalLine:
    """One physical transcript line and the tone it is styled with."""

    text: str
    tone: LineTone = 'content'


# ==============================================================================
# Markdown (annotations)
# ==============================================================================


def _details(summary: str, body: str, language: str = '') -> str:
    return f'<details>\n<summary>{summary}</summary>\n\n```{language}\n{body}\n```\n\n</details>'


def _markdown_block(block: ContentBlock, policy: DisclosurePolicy) -> str:
    match block:
        case TextBlock():
            return block.text
        case ToolUseBlock(input_json=None):
            return block.header
        case ToolUseBlock(input_json=str(input_json)):
            split = disclose(input_json, policy.tool_input)
            text = f'{block.header} with {split.preview}'
            if split.collapsed:
                text += '\n\n' + _details('Show more input...', split.remainder, 'json')
            return text
        case ToolResultBlock(result=None):
            return block.indicator
        case ToolResultBlock(result=str(result)):
            split = disclose(result, policy.tool_result)
            text = f'{block.indicator}\n{split.preview}'
            if split.collapsed:
                text += '\n\n' + _details('Show more...', split.remainder)
            return text
    raise TypeError(f'Unhandled content block: {type(block).__name__}')


def format_markdown(blocks: Sequence[ContentBlock], policy: DisclosurePolicy) -> str:
    """Markdown content for an annotation body."""
    return PARAGRAPH_SEPARATOR.join(_markdown_block(block, policy) for block in blocks)


# ==============================================================================
# Terminal (transcript)
# ==============================================================================


def _lines(text: str, tone: LineTone) -> Iterator[TerminalLine]:
    for line in text.split('\n'):
        yield TerminalLine(line, tone)


def _terminal_block(block: ContentBlock, policy: DisclosurePolicy) -> Iterator[TerminalLine]:
    match block:
        case TextBlock():
            yield from _lines(block.text, 'content')
        case ToolUseBlock(input_json=None):
            yield TerminalLine(block.header, 'tool')
        case ToolUseBlock(input_json=str(input_json)):
            split = disclose(input_json, policy.tool_input)
            yield from _lines(f'{block.header} with {split.preview}', 'tool')
            if split.collapsed:
                yield TerminalLine('▸ more input:', 'muted')
                yield from _lines(split.remainder, 'muted')
        case ToolResultBlock(result=None):
            yield TerminalLine(block.indicator, 'error' if block.is_error else 'result')
        case ToolResultBlock(result=str(result)):
            split = disclose(result, policy.tool_result)
            yield TerminalLine(block.indicator, 'error' if block.is_error else 'result')
            yield from _lines(split.preview, 'content')
            if split.collapsed:
                yield TerminalLine('▸ more:', 'muted')
                yield from _lines(split.remainder, 'muted')
        case _:
            raise TypeError(f'Unhandled content block: {type(block).__name__}')


def format_terminal(blocks: Sequence[ContentBlock], policy: DisclosurePolicy) -> list[TerminalLine]:
    """Transcript lines for an entry's content, blocks separated by a blank line."""
    lines: list[TerminalLine] = []
    for index, block in enumerate(blocks):
        if index:
            lines.append(TerminalLine(''))
        lines.extend(_terminal_block(block, policy))
    return lines
