"""
Schema definitions for chat-parser.

This package contains Pydantic models for:
- events: agent session stream records (input)
- entries: classified chat entries and annotations (output)
"""

from __future__ import annotations

from chat_parser.schemas.entries import Annotation, ChatEntry, ContentBlock, TextBlock, ToolResultBlock, ToolUseBlock
from chat_parser.schemas.events import SessionEvent, SessionEventAdapter
from chat_parser.schemas.types import AnnotationStyle, Speaker

__all__ = [
    'Annotation',
    'AnnotationStyle',
    'ChatEntry',
    'ContentBlock',
    'SessionEvent',
    'SessionEventAdapter',
    'Speaker',
    'TextBlock',
    'ToolResultBlock',
    'ToolUseBlock',
]
