"""
Base configuration for chat-parser.

Settings are read from CHAT_PARSER_* environment variables (or a .env file)
and can be overridden per invocation by CLI flags.
"""

from __future__ import annotations

import os
import pathlib
from typing import Literal, TypeVar

import lazy_object_proxy
import pydantic
import pydantic_settings

T = TypeVar('T', bound='ChatParserSettings')

AnnotationMode = Literal['auto', 'on', 'off']
ColorMode = Literal['auto', 'always', 'never']


class ChatParserSettings(pydantic_settings.BaseSettings):
    """Configuration for the transcript processor."""

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix='CHAT_PARSER_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,  # Fail fast on misconfiguration
        extra='forbid',  # Reject unknown CHAT_PARSER_* variables
    )

    # Application metadata
    APP_NAME: str = 'chat-parser'
    VERSION: str = '0.1.0'

    # Annotation sink
    ANNOTATIONS: AnnotationMode = 'auto'
    ANNOTATE_COMMAND: str = 'buildkite-agent'
    ANNOTATION_PRIORITY: int = 5
    ANNOTATION_CONTEXT_PREFIX: str = 'chat-message'
    ANNOTATION_TIMEOUT_SECONDS: float = 30.0
    ANNOTATION_WORKERS: int = 0  # 0 = deliver inline, before the next line is read

    # Progressive disclosure thresholds for annotations
    PREVIEW_LINES: int = 2
    TOOL_INPUT_PREVIEW_CHARS: int = 300
    TOOL_RESULT_PREVIEW_CHARS: int = 400

    # Progressive disclosure thresholds for the terminal transcript
    TERMINAL_PREVIEW_LINES: int = 2
    TERMINAL_TOOL_INPUT_PREVIEW_CHARS: int = 300
    TERMINAL_TOOL_RESULT_PREVIEW_CHARS: int = 400

    COLOR: ColorMode = 'auto'

    @pydantic.field_validator('ANNOTATION_PRIORITY')
    @classmethod
    def validate_priority(cls, v: int) -> int:
        """Buildkite accepts priorities 1-10."""
        if not 1 <= v <= 10:
            raise ValueError('ANNOTATION_PRIORITY must be between 1-10')
        return v

    @pydantic.field_validator('ANNOTATION_WORKERS')
    @classmethod
    def validate_workers(cls, v: int) -> int:
        if v < 0:
            raise ValueError('ANNOTATION_WORKERS must be >= 0')
        return v

    @pydantic.field_validator('ANNOTATION_TIMEOUT_SECONDS')
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError('ANNOTATION_TIMEOUT_SECONDS must be positive')
        return v

    @pydantic.field_validator(
        'PREVIEW_LINES',
        'TOOL_INPUT_PREVIEW_CHARS',
        'TOOL_RESULT_PREVIEW_CHARS',
        'TERMINAL_PREVIEW_LINES',
        'TERMINAL_TOOL_INPUT_PREVIEW_CHARS',
        'TERMINAL_TOOL_RESULT_PREVIEW_CHARS',
    )
    @classmethod
    def validate_threshold(cls, v: int) -> int:
        if v < 1:
            raise ValueError('Preview thresholds must be >= 1')
        return v


def get_settings(
    settings_class: type[T] = ChatParserSettings,  # type: ignore[assignment]
    env_file: str | None = None,
) -> T:
    """
    Factory for creating settings with dynamic .env file loading.

    LOAD_ENV_FILE environment variable specifies custom .env file path.
    When unset (production), loads from environment variables only.

    Args:
        settings_class: Settings class to instantiate
        env_file: Optional path to .env file (overrides LOAD_ENV_FILE)

    Returns:
        Settings instance

    Raises:
        FileNotFoundError: If specified .env file doesn't exist
    """
    env_file_path = env_file or os.getenv('LOAD_ENV_FILE')

    if not env_file_path:
        return settings_class()  # No explicit .env file, load from environment only

    resolved_path = pathlib.Path(env_file_path).resolve()
    if not resolved_path.exists():
        raise FileNotFoundError(f'Environment file not found: {resolved_path}')

    return settings_class(_env_file=resolved_path)


def lazy_settings(settings_class: type[T]) -> T:
    """
    Lazy settings - defers instantiation until first access.

    Args:
        settings_class: Settings class to instantiate

    Returns:
        Proxy that instantiates settings on first access
    """
    return lazy_object_proxy.Proxy(lambda: get_settings(settings_class))


# Module-level singleton (lazy-loaded)
settings = lazy_settings(ChatParserSettings)
