"""
Chat entry models - the classified, rendering-ready unit derived from one input line.

A ChatEntry keeps its content as ordered blocks rather than one flat string so
that each output surface (terminal, annotation) can apply progressive
disclosure with its own thresholds. `ChatEntry.content` is the plain,
undisclosed text of all blocks.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Annotated, Literal

import pydantic

from chat_parser.schemas.types import AnnotationStyle, BaseStrictModel, Speaker

__all__ = [
    'Annotation',
    'ChatEntry',
    'ContentBlock',
    'PARAGRAPH_SEPARATOR',
    'TextBlock',
    'ToolResultBlock',
    'ToolUseBlock',
]

PARAGRAPH_SEPARATOR = '\n\n'


# ==============================================================================
# Content Blocks
# ==============================================================================


class TextBlock(BaseStrictModel):
    """Verbatim text."""

    kind: Literal['text'] = 'text'
    text: str

    def plain(self) -> str:
        return self.text


class ToolUseBlock(BaseStrictModel):
    """A tool invocation with its serialized (pretty-printed JSON) input."""

    kind: Literal['tool_use'] = 'tool_use'
    name: str
    input_json: str | None = None  # None when the tool took no input

    @property
    def header(self) -> str:
        return f'🔧 Using tool: `{self.name}`'

    def plain(self) -> str:
        if self.input_json is None:
            return self.header
        return f'{self.header} with {self.input_json}'


class ToolResultBlock(BaseStrictModel):
    """A tool result, or a placeholder notice when the result carried no content."""

    kind: Literal['tool_result'] = 'tool_result'
    result: str | None = None
    is_error: bool = False

    @property
    def indicator(self) -> str:
        if self.result is None:
            return '❌ Tool error received' if self.is_error else '✅ Tool result received'
        return '❌ Tool error:' if self.is_error else '✅ Tool result:'

    def plain(self) -> str:
        if self.result is None:
            return self.indicator
        return f'{self.indicator}\n{self.result}'


ContentBlock = Annotated[TextBlock | ToolUseBlock | ToolResultBlock, pydantic.Field(discriminator='kind')]


# ==============================================================================
# Chat Entry
# ==============================================================================


class ChatEntry(BaseStrictModel):
    """One classified input line.

    Fields:
        line_number: 1-based display number, assigned to every non-blank line
        speaker: Speaker category driving styles
        speaker_label: Name shown to the reader (the uppercased kind for OTHER)
        blocks: Ordered content pieces
        elapsed: Time since the stream started when the line arrived
        has_error: True iff a tool result in a user event reported an error
        raw_line: The trimmed input line
        was_json: False when the line was surfaced as plain diagnostic text
        recognized: False for event kinds the classifier does not know; such
            entries are printed but never annotated
    """

    line_number: Annotated[int, pydantic.Field(gt=0)]
    speaker: Speaker
    speaker_label: str
    blocks: tuple[ContentBlock, ...]
    elapsed: timedelta
    has_error: bool = False
    raw_line: str
    was_json: bool
    recognized: bool = True

    @property
    def content(self) -> str:
        """Plain content of all blocks, separated by blank lines."""
        return PARAGRAPH_SEPARATOR.join(block.plain() for block in self.blocks)


# ==============================================================================
# Annotation
# ==============================================================================


class Annotation(BaseStrictModel):
    """A status report for the annotation sink.

    `context` is stable per line number, so re-running against the same
    stream updates the existing record instead of adding a duplicate.
    """

    style: AnnotationStyle
    context: str
    body: str
    priority: int = 5
