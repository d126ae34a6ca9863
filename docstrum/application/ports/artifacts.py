"""Artifact ports - rendering and storage of diagnostic rasters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol, runtime_checkable

import numpy as np

from ...domain.entities.component import ConnectedComponent, NeighborSet
from ...domain.entities.result import OrientationEstimate
from ...domain.value_objects.histogram import Histogram
from ...domain.value_objects.polynomial import Polynomial


@dataclass(frozen=True, slots=True, eq=False)
class RenderRequest:
    """Numeric results of one page, as handed to a renderer."""
    page_name: str
    components: tuple[ConnectedComponent, ...]
    neighbor_table: tuple[NeighborSet, ...]
    histogram: Histogram
    polynomial: Polynomial
    estimate: OrientationEstimate
    page_size: tuple[int, int] | None = None  # (width, height)


@runtime_checkable
class ArtifactRenderer(Protocol):
    """Port for turning numeric results into named rasters."""

    def render(self, request: RenderRequest) -> dict[str, np.ndarray]:
        """Render all artifacts for one page, keyed by artifact name."""
        ...


@runtime_checkable
class ArtifactSink(Protocol):
    """Port for storing rendered artifacts."""

    def write(self, page_name: str, artifact_name: str, raster: np.ndarray) -> None:
        """Store one artifact of one page."""
        ...

    def discard(self, page_name: str, artifact_names: Iterable[str]) -> None:
        """Remove artifacts already stored for a page that failed."""
        ...


class MemoryArtifactSink:
    """Simple in-memory artifact store."""

    def __init__(self):
        self._data: dict[str, dict[str, np.ndarray]] = {}

    def write(self, page_name: str, artifact_name: str, raster: np.ndarray) -> None:
        self._data.setdefault(page_name, {})[artifact_name] = raster

    def get(self, page_name: str, artifact_name: str) -> np.ndarray | None:
        return self._data.get(page_name, {}).get(artifact_name)

    def discard(self, page_name: str, artifact_names: Iterable[str]) -> None:
        stored = self._data.get(page_name, {})
        for artifact_name in artifact_names:
            stored.pop(artifact_name, None)
        if not stored:
            self._data.pop(page_name, None)

    def names(self, page_name: str) -> list[str]:
        return sorted(self._data.get(page_name, {}))

    def has(self, page_name: str) -> bool:
        return page_name in self._data

    def clear(self) -> None:
        self._data.clear()
