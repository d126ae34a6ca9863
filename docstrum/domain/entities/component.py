"""Connected component and neighbour entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from ..value_objects.geometry import BoundingBox, Point


@dataclass(frozen=True, slots=True)
class ConnectedComponent:
    """A foreground blob as reported by the segmentation collaborator.

    ``label`` must be unique within one image; it identifies the component
    and breaks distance ties during neighbour search.
    """
    label: int
    centroid: Point
    bounds: BoundingBox
    pixel_count: int = 0

    @property
    def area(self) -> float:
        """Bounding-box area in px^2."""
        return self.bounds.area


@dataclass(frozen=True, slots=True)
class AdjacentPair:
    """Vector from a component to one of its nearest neighbours."""
    source: ConnectedComponent
    neighbor: ConnectedComponent
    distance: float
    angle: float  # radians, (-pi, pi], image y axis


@dataclass(frozen=True, slots=True)
class NeighborSet:
    """The k nearest neighbours of one component, closest first."""
    source: ConnectedComponent
    pairs: tuple[AdjacentPair, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[AdjacentPair]:
        return iter(self.pairs)

    def __len__(self) -> int:
        return len(self.pairs)

    @property
    def neighbors(self) -> list[ConnectedComponent]:
        return [pair.neighbor for pair in self.pairs]
