"""
Shared type definitions for schemas.

Centralizes common type annotations used across event and entry schemas.

Layering:
- This module provides FOUNDATION types (BaseStrictModel, StreamModel, JsonValue)
- events.py and entries.py import from here
"""

from __future__ import annotations

from typing import Any, Literal, TypeAlias

import pydantic

# ==============================================================================
# Base Strict Model (Foundation)
# ==============================================================================


class BaseStrictModel(pydantic.BaseModel):
    """
    Foundation strict model for values this package constructs itself.

    Uses extra='forbid' to reject unknown fields - any field not modeled
    causes immediate validation failure (fail-fast).
    """

    model_config = pydantic.ConfigDict(
        extra='forbid',  # Reject unknown fields (fail-fast)
        strict=True,  # Strict type coercion
        frozen=True,  # Immutable after creation
    )


# ==============================================================================
# Stream Model (Foundation)
# ==============================================================================


class StreamModel(pydantic.BaseModel):
    """
    Foundation model for records read from the agent event stream.

    Symmetry with BaseStrictModel:
    - BaseStrictModel: extra='forbid' (rejects unknown fields)
    - StreamModel: extra='ignore' (models only the subset of fields we render)

    The stream-json format carries many fields (usage, uuid, parent_tool_use_id,
    ...) that the transcript never shows. Ignoring them keeps the models stable
    across agent runtime versions, while strict=True still rejects known fields
    with the wrong JSON type.
    """

    model_config = pydantic.ConfigDict(
        extra='ignore',  # Accept and drop unmodeled fields
        strict=True,  # Strict type coercion for known fields
        frozen=True,  # Immutable after creation
    )


# ==============================================================================
# Primitive Types
# ==============================================================================

JsonValue: TypeAlias = Any
"""Arbitrary decoded JSON value (object, array, string, number, bool or null)."""

Speaker = Literal['SYSTEM', 'ASSISTANT', 'USER', 'OTHER']
"""Speaker category of a chat entry. OTHER covers every unrecognized event kind."""

AnnotationStyle = Literal['info', 'success', 'warning', 'error']
"""Buildkite annotation styles."""
