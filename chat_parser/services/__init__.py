"""Service layer for transcript processing."""

from chat_parser.services.annotations import AnnotationEmitter, BackgroundAnnotationEmitter, build_annotation
from chat_parser.services.classifier import EventClassifier
from chat_parser.services.disclosure import Disclosure, DisclosureLimits, disclose
from chat_parser.services.formatting import DisclosurePolicy
from chat_parser.services.processor import ProcessingStats, TranscriptProcessor, open_capture
from chat_parser.services.renderer import TranscriptRenderer

__all__ = [
    'AnnotationEmitter',
    'BackgroundAnnotationEmitter',
    'Disclosure',
    'DisclosureLimits',
    'DisclosurePolicy',
    'EventClassifier',
    'ProcessingStats',
    'TranscriptProcessor',
    'TranscriptRenderer',
    'build_annotation',
    'disclose',
    'open_capture',
]
