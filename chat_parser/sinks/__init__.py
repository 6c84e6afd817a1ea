"""Annotation sinks for per-entry status reports."""

from chat_parser.sinks.buildkite import BuildkiteAnnotationSink
from chat_parser.sinks.protocol import AnnotationSink

__all__ = ['AnnotationSink', 'BuildkiteAnnotationSink']
