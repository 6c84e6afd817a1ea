"""
Pydantic models for agent session stream events.

One line of `claude -p --output-format=stream-json` output is one SessionEvent.
Only the fields the transcript renders are modeled; everything else is ignored.

Both unions below route on the `type` field with a callable discriminator. Any
value outside the known kinds is tagged 'unknown' and validates into an
explicit fallback model (UnknownEvent / UnknownItem), so an unrecognized record
is always a typed value rather than a validation failure.

Example stream (abridged):

    {"type":"system","subtype":"init","session_id":"abc123","model":"claude-sonnet-4-5","tools":[...]}
    {"type":"assistant","message":{"content":[{"type":"tool_use","id":"t1","name":"Bash","input":{"command":"ls"}}]}}
    {"type":"user","message":{"content":[{"type":"tool_result","tool_use_id":"t1","content":"README.md"}]}}
    {"type":"result","subtype":"success","result":"Done"}
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Annotated, Any, Literal

import pydantic

from chat_parser.schemas.types import JsonValue, StreamModel

__all__ = [
    'AssistantEvent',
    'ContentItem',
    'EventMessage',
    'SessionEvent',
    'SessionEventAdapter',
    'SystemEvent',
    'TextItem',
    'ToolResultItem',
    'ToolUseItem',
    'UnknownEvent',
    'UnknownItem',
    'UserEvent',
]


def _discriminate(known: frozenset[str]):
    """Build a discriminator that maps any unlisted `type` value to 'unknown'."""

    def discriminator(value: Any) -> str:
        if isinstance(value, Mapping):
            kind = value.get('type')
        else:
            kind = getattr(value, 'type', None)
        return kind if isinstance(kind, str) and kind in known else 'unknown'

    return discriminator


# ==============================================================================
# Content Items (Discriminated Union)
# ==============================================================================


class TextItem(StreamModel):
    """Free text from the assistant or the user."""

    type: Literal['text']
    text: str | None = None


class ToolUseItem(StreamModel):
    """Tool invocation requested by the assistant."""

    type: Literal['tool_use']
    id: str | None = None
    name: str | None = None
    input: JsonValue = None


class ToolResultItem(StreamModel):
    """Result of a tool invocation, reported back in a user event.

    The result arrives either as `text` or as `content`; `content` is usually a
    string but may be a list of content blocks or any other JSON value.
    """

    type: Literal['tool_result']
    tool_use_id: str | None = None
    text: str | None = None
    content: JsonValue = None
    is_error: bool | None = None


class UnknownItem(StreamModel):
    """Any content item we do not render (thinking, image, document, ...)."""

    type: JsonValue = None


ContentItem = Annotated[
    Annotated[TextItem, pydantic.Tag('text')]
    | Annotated[ToolUseItem, pydantic.Tag('tool_use')]
    | Annotated[ToolResultItem, pydantic.Tag('tool_result')]
    | Annotated[UnknownItem, pydantic.Tag('unknown')],
    pydantic.Discriminator(_discriminate(frozenset({'text', 'tool_use', 'tool_result'}))),
]


class EventMessage(StreamModel):
    """The API message wrapped by assistant and user events."""

    role: str | None = None
    model: str | None = None
    content: str | Sequence[ContentItem] | None = ()

    @property
    def items(self) -> Sequence[ContentItem]:
        """Content items in order. A bare string (plain user prompt) is one text item."""
        if self.content is None:
            return ()
        if isinstance(self.content, str):
            return (TextItem(type='text', text=self.content),)
        return self.content


# ==============================================================================
# Session Events (Discriminated Union)
# ==============================================================================


class SystemEvent(StreamModel):
    """System event; subtype 'init' opens a session."""

    type: Literal['system']
    subtype: str | None = None
    session_id: str | None = None
    model: str | None = None


class AssistantEvent(StreamModel):
    """Assistant turn: text and tool invocations."""

    type: Literal['assistant']
    message: EventMessage | None = None

    @property
    def items(self) -> Sequence[ContentItem]:
        return self.message.items if self.message else ()


class UserEvent(StreamModel):
    """User turn: usually tool results, sometimes prompt text."""

    type: Literal['user']
    message: EventMessage | None = None

    @property
    def items(self) -> Sequence[ContentItem]:
        return self.message.items if self.message else ()


class UnknownEvent(StreamModel):
    """Any event kind other than system/assistant/user (e.g. 'result')."""

    type: JsonValue = None

    @property
    def kind(self) -> str:
        """Raw kind name, empty when the record has no string `type`."""
        return self.type if isinstance(self.type, str) else ''


SessionEvent = Annotated[
    Annotated[SystemEvent, pydantic.Tag('system')]
    | Annotated[AssistantEvent, pydantic.Tag('assistant')]
    | Annotated[UserEvent, pydantic.Tag('user')]
    | Annotated[UnknownEvent, pydantic.Tag('unknown')],
    pydantic.Discriminator(_discriminate(frozenset({'system', 'assistant', 'user'}))),
]

# Type adapter for validating events (required for union types)
SessionEventAdapter: pydantic.TypeAdapter[SessionEvent] = pydantic.TypeAdapter(SessionEvent)
