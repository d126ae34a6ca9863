"""Application services - orchestrate use cases."""

from .docstrum_service import DocstrumService, PipelineStage
from .batch_processor import BatchProcessor, BatchResult

__all__ = ['DocstrumService', 'PipelineStage', 'BatchProcessor', 'BatchResult']
