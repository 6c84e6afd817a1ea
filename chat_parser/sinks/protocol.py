"""
Annotation sink protocol.

Defines the interface for external systems that record per-entry status reports
(Buildkite annotations).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from chat_parser.schemas.entries import Annotation


@runtime_checkable
class AnnotationSink(Protocol):
    """Protocol for annotation sinks."""

    def annotate(self, annotation: Annotation) -> None:
        """
        Create or update the record identified by `annotation.context`.

        Args:
            annotation: Style, context, priority and markdown body

        Raises:
            AnnotationDeliveryError: If the sink did not accept the annotation
        """
        ...
