"""Domain entities."""

from .component import AdjacentPair, ConnectedComponent, NeighborSet
from .page import PageInput
from .result import ImageResult, OrientationEstimate

__all__ = [
    'AdjacentPair',
    'ConnectedComponent',
    'NeighborSet',
    'PageInput',
    'ImageResult',
    'OrientationEstimate',
]
