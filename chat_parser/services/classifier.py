"""
Event classifier - turns one input line into a speaker-tagged ChatEntry.

Lines that are not JSON objects, or JSON objects that are not session events,
are never dropped: they surface as SYSTEM entries carrying the raw text, since
that is usually diagnostic output from the agent runtime.

The classifier holds no per-line state. Line numbers and elapsed time are
assigned by the caller, so classifying the same line twice gives equal entries.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import timedelta

import pydantic

from chat_parser.protocols import LoggerProtocol, NullLogger
from chat_parser.schemas.entries import ChatEntry, ContentBlock, TextBlock, ToolResultBlock, ToolUseBlock
from chat_parser.schemas.events import (
    AssistantEvent,
    ContentItem,
    SessionEvent,
    SessionEventAdapter,
    SystemEvent,
    TextItem,
    ToolResultItem,
    ToolUseItem,
    UnknownEvent,
    UserEvent,
)
from chat_parser.schemas.types import JsonValue, Speaker

__all__ = [
    'EventClassifier',
    'UNKNOWN_MESSAGE_TEXT',
    'pretty_json',
    'pretty_json_text',
]

UNKNOWN_MESSAGE_TEXT = 'Unknown message type'


def pretty_json(value: JsonValue) -> str:
    """Serialize a decoded JSON value with two-space indentation."""
    return json.dumps(value, indent=2, ensure_ascii=False)


def pretty_json_text(text: str) -> str:
    """Pretty-print text if it is a JSON document, otherwise return it unchanged."""
    try:
        return pretty_json(json.loads(text))
    except (ValueError, RecursionError):
        return text


class EventClassifier:
    """
    Classify raw lines into chat entries.

    Pure domain logic - no I/O, no counters. See services/processor.py for the
    per-run state that feeds line numbers and timestamps in.
    """

    def __init__(self, logger: LoggerProtocol | None = None) -> None:
        self.logger = logger or NullLogger()

    def parse(self, line: str, line_number: int = 0) -> SessionEvent | None:
        """
        Parse a line into a session event.

        Returns:
            The typed event, or None when the line is not a JSON object that
            validates as a session event
        """
        try:
            data = json.loads(line)
        except (ValueError, RecursionError):
            return None

        if not isinstance(data, dict):
            return None

        try:
            return SessionEventAdapter.validate_python(data)
        except pydantic.ValidationError as e:
            self.logger.info(
                f'Line {line_number}: JSON is not a session event, showing raw text ({e.error_count()} errors)'
            )
            return None

    def classify(self, line: str, line_number: int, elapsed: timedelta) -> ChatEntry | None:
        """
        Classify one trimmed, non-empty line.

        Args:
            line: The input line with surrounding whitespace removed
            line_number: Display number already assigned to this line
            elapsed: Time since stream start when the line arrived

        Returns:
            ChatEntry, or None when the line yields no printable content
        """
        event = self.parse(line, line_number)

        if event is None:
            return ChatEntry(
                line_number=line_number,
                speaker='SYSTEM',
                speaker_label='SYSTEM',
                blocks=(TextBlock(text=line),),
                elapsed=elapsed,
                raw_line=line,
                was_json=False,
            )

        speaker: Speaker
        label: str | None = None
        has_error = False
        recognized = True

        match event:
            case SystemEvent():
                speaker = 'SYSTEM'
                blocks = (TextBlock(text=self._system_text(event)),)
            case AssistantEvent():
                speaker = 'ASSISTANT'
                blocks = self._assistant_blocks(event.items)
            case UserEvent():
                speaker = 'USER'
                blocks = self._user_blocks(event.items)
                has_error = any(isinstance(block, ToolResultBlock) and block.is_error for block in blocks)
            case UnknownEvent():
                speaker = 'OTHER'
                label = event.kind.upper() or 'UNKNOWN'
                blocks = (TextBlock(text=UNKNOWN_MESSAGE_TEXT),)
                recognized = False

        if not blocks:
            return None

        return ChatEntry(
            line_number=line_number,
            speaker=speaker,
            speaker_label=label or speaker,
            blocks=blocks,
            elapsed=elapsed,
            has_error=has_error,
            raw_line=line,
            was_json=True,
            recognized=recognized,
        )

    # ==========================================================================
    # Per-kind content extraction
    # ==========================================================================

    @staticmethod
    def _system_text(event: SystemEvent) -> str:
        if event.subtype == 'init':
            return f'Session initialized (ID: {event.session_id or ""}, Model: {event.model or ""})'
        return 'System message'

    @staticmethod
    def _assistant_blocks(items: Sequence[ContentItem]) -> tuple[ContentBlock, ...]:
        blocks: list[ContentBlock] = []
        for item in items:
            match item:
                case TextItem(text=text) if text:
                    blocks.append(TextBlock(text=text))
                case ToolUseItem():
                    input_json = pretty_json(item.input) if item.input is not None else None
                    if input_json == '{}':
                        input_json = None
                    blocks.append(ToolUseBlock(name=item.name or '', input_json=input_json))
        return tuple(blocks)

    @staticmethod
    def _user_blocks(items: Sequence[ContentItem]) -> tuple[ContentBlock, ...]:
        blocks: list[ContentBlock] = []
        for item in items:
            match item:
                case ToolResultItem():
                    blocks.append(ToolResultBlock(result=_tool_result_text(item), is_error=bool(item.is_error)))
                case TextItem(text=text) if text:
                    blocks.append(TextBlock(text=text))
        return tuple(blocks)


def _tool_result_text(item: ToolResultItem) -> str | None:
    """Result text: `text` first, then `content`; None when neither carries anything."""
    if item.text:
        return pretty_json_text(item.text)
    match item.content:
        case None | '':
            return None
        case str(content):
            return pretty_json_text(content)
        case content:
            return pretty_json(content)
