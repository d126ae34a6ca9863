"""Value objects - immutable data with validation."""

from .geometry import Point, BoundingBox
from .histogram import Histogram
from .polynomial import CriticalPoint, CriticalPointKind, Polynomial
from .config import DocstrumConfig, build_config

__all__ = [
    'Point',
    'BoundingBox',
    'Histogram',
    'CriticalPoint',
    'CriticalPointKind',
    'Polynomial',
    'DocstrumConfig',
    'build_config',
]
