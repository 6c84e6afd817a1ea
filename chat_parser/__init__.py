"""chat-parser - streaming transcript processor for Claude Code stream-json sessions."""

from __future__ import annotations

__version__ = '0.1.0'
