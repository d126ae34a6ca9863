"""Application layer - use cases and orchestration."""

from .services.docstrum_service import DocstrumService, PipelineStage
from .services.batch_processor import BatchProcessor, BatchResult

__all__ = ['DocstrumService', 'PipelineStage', 'BatchProcessor', 'BatchResult']
