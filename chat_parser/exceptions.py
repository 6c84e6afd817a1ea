"""
Shared exceptions for chat-parser.

Domain-specific exceptions raised by the transcript pipeline stages.

Exception Hierarchy:
    ChatParserError (base)
    ├── IngestionError (input cannot be opened or read - fatal)
    ├── RenderError (transcript output cannot be written - fatal)
    ├── CaptureFileError (capture file cannot be created - fatal at startup)
    └── AnnotationDeliveryError (annotation sink call failed - recovered)
"""

from __future__ import annotations


class ChatParserError(Exception):
    """Base exception for all chat-parser errors."""

    stage = 'processing'


class IngestionError(ChatParserError):
    """Raised when the input source cannot be opened or a read fails mid-stream."""

    stage = 'ingestion'

    def __init__(self, source: str, cause: BaseException) -> None:
        self.source = source
        self.cause = cause
        super().__init__(f'Failed to read input from {source}: {cause}')


class RenderError(ChatParserError):
    """Raised when writing the transcript to the output stream fails."""

    stage = 'render'

    def __init__(self, cause: BaseException, line_number: int | None = None) -> None:
        self.cause = cause
        self.line_number = line_number
        where = f' (line {line_number})' if line_number is not None else ''
        super().__init__(f'Failed to write transcript output{where}: {cause}')


class CaptureFileError(ChatParserError):
    """Raised when the raw-stream capture file cannot be created or written."""

    stage = 'capture'

    def __init__(self, path: str, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write capture file '{path}': {cause}")


class AnnotationDeliveryError(ChatParserError):
    """Raised by annotation sinks when a report could not be delivered."""

    stage = 'annotation'

    def __init__(self, context: str, reason: str) -> None:
        self.context = context
        self.reason = reason
        super().__init__(f'Annotation {context} not delivered: {reason}')
