"""Domain layer - geometry, histograms and curve fitting, no I/O."""

from .entities.component import AdjacentPair, ConnectedComponent, NeighborSet
from .entities.page import PageInput
from .entities.result import ImageResult, OrientationEstimate
from .value_objects.config import DocstrumConfig, build_config
from .value_objects.geometry import Point, BoundingBox
from .value_objects.histogram import Histogram
from .value_objects.polynomial import CriticalPoint, CriticalPointKind, Polynomial

__all__ = [
    # Entities
    'AdjacentPair',
    'ConnectedComponent',
    'NeighborSet',
    'PageInput',
    'ImageResult',
    'OrientationEstimate',
    # Value Objects
    'DocstrumConfig',
    'build_config',
    'Point',
    'BoundingBox',
    'Histogram',
    'CriticalPoint',
    'CriticalPointKind',
    'Polynomial',
]
