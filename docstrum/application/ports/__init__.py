"""Ports - interfaces for external collaborators (Dependency Inversion)."""

from .component_extractor import ComponentExtractor
from .artifacts import ArtifactRenderer, ArtifactSink, MemoryArtifactSink, RenderRequest
from .event_publisher import EventPublisher, ProcessingEvent, SimpleEventPublisher

__all__ = [
    'ComponentExtractor',
    'ArtifactRenderer',
    'ArtifactSink',
    'MemoryArtifactSink',
    'RenderRequest',
    'EventPublisher',
    'ProcessingEvent',
    'SimpleEventPublisher',
]
