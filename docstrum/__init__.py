"""Docstrum - text skew and spacing estimation from connected components."""

__version__ = "1.0.0"

from .application import BatchProcessor, BatchResult, DocstrumService, PipelineStage
from .domain import (
    BoundingBox,
    ConnectedComponent,
    CriticalPoint,
    CriticalPointKind,
    DocstrumConfig,
    ImageResult,
    OrientationEstimate,
    PageInput,
    Point,
    Polynomial,
    build_config,
)
from .exceptions import (
    DocstrumError,
    InvalidConfigurationError,
    InvalidDomainError,
    UpstreamSegmentationError,
    NumericDegeneracyError,
    ArtifactError,
)
from .utils.env import setup_logging

__all__ = [
    '__version__',
    'DocstrumService',
    'BatchProcessor',
    'BatchResult',
    'PipelineStage',
    'DocstrumConfig',
    'build_config',
    'ConnectedComponent',
    'PageInput',
    'Point',
    'BoundingBox',
    'Polynomial',
    'CriticalPoint',
    'CriticalPointKind',
    'OrientationEstimate',
    'ImageResult',
    'setup_logging',
    # Exceptions
    'DocstrumError',
    'InvalidConfigurationError',
    'InvalidDomainError',
    'UpstreamSegmentationError',
    'NumericDegeneracyError',
    'ArtifactError',
]
