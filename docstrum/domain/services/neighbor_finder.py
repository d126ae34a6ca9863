"""Neighbor finder - k nearest components by centroid distance."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, Sequence

import numpy as np

from ...domain.entities.component import AdjacentPair, ConnectedComponent, NeighborSet
from ...exceptions import InvalidConfigurationError

logger = logging.getLogger(__name__)


class _ComponentIndex:
    """Read-only centroid arrays shared by every neighbour query of a page.

    Queries use a brute-force distance scan, O(n) per reference. Page-sized
    component counts keep the O(n^2) total affordable.
    """

    def __init__(self, components: Sequence[ConnectedComponent]):
        self.components = list(components)
        self.xs = np.array([c.centroid.x for c in self.components], dtype=np.float64)
        self.ys = np.array([c.centroid.y for c in self.components], dtype=np.float64)
        self.labels = np.array([c.label for c in self.components], dtype=np.int64)

    def query(self, reference: ConnectedComponent, k: int) -> NeighborSet:
        """Nearest k components to ``reference``, ties broken by label."""
        # The reference is excluded by label so coincident centroids of
        # other components still count as neighbours at distance 0.
        candidates = np.flatnonzero(self.labels != reference.label)
        if candidates.size == 0:
            return NeighborSet(source=reference)

        dx = self.xs[candidates] - reference.centroid.x
        dy = self.ys[candidates] - reference.centroid.y
        dists = np.hypot(dx, dy)
        order = np.lexsort((self.labels[candidates], dists))[:k]

        pairs = []
        for j in order:
            neighbor = self.components[candidates[j]]
            pairs.append(AdjacentPair(
                source=reference,
                neighbor=neighbor,
                distance=float(dists[j]),
                angle=reference.centroid.angle_to(neighbor.centroid)
            ))
        return NeighborSet(source=reference, pairs=tuple(pairs))


def _validate(components: Sequence[ConnectedComponent], k: int) -> None:
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k < 1:
        raise InvalidConfigurationError(f"k must be an integer >= 1, got {k!r}", config_key="k")
    if not components:
        raise InvalidConfigurationError(
            "Neighbour search requires at least one component",
            config_key="components"
        )


def find_neighbors(
    reference: ConnectedComponent,
    components: Iterable[ConnectedComponent],
    k: int
) -> NeighborSet:
    """Find the k nearest neighbours of one component.

    Distance is the Euclidean distance between centroids, angle is
    atan2(dy, dx) in (-pi, pi]. Equal distances are ordered by neighbour
    label, ascending. When fewer than k other components exist all of them
    are returned.

    Args:
        reference: Component whose neighbours are wanted
        components: Full component set of the page (may include reference)
        k: Maximum number of neighbours

    Returns:
        NeighborSet sorted by non-decreasing distance

    Raises:
        InvalidConfigurationError: If k < 1 or the component set is empty
    """
    components = list(components)
    _validate(components, k)
    return _ComponentIndex(components).query(reference, int(k))


def compute_neighbor_table(
    components: Iterable[ConnectedComponent],
    k: int,
    max_workers: int = 1
) -> list[NeighborSet]:
    """Find the k nearest neighbours of every component.

    Each query only reads the shared component index, so with
    ``max_workers > 1`` queries fan out over a thread pool. The returned
    list follows the input order whatever the completion order.

    Raises:
        InvalidConfigurationError: If k < 1, max_workers < 1 or the set is empty
    """
    components = list(components)
    _validate(components, k)
    if max_workers < 1:
        raise InvalidConfigurationError(
            f"max_workers must be >= 1, got {max_workers}",
            config_key="neighbor_workers"
        )

    index = _ComponentIndex(components)
    k = int(k)

    if max_workers == 1 or len(components) == 1:
        return [index.query(cc, k) for cc in components]

    table: list[NeighborSet | None] = [None] * len(components)
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="docstrum-nn") as pool:
        futures = {pool.submit(index.query, cc, k): i for i, cc in enumerate(components)}
        for future in as_completed(futures):
            table[futures[future]] = future.result()

    logger.debug(f"Computed neighbours for {len(components)} components with {max_workers} workers")
    return table  # type: ignore[return-value]


def collect_angles(table: Iterable[NeighborSet]) -> np.ndarray:
    """Flatten all pair angles into one array."""
    return np.array(
        [pair.angle for neighbors in table for pair in neighbors],
        dtype=np.float64
    )


def collect_distances(table: Iterable[NeighborSet]) -> np.ndarray:
    """Flatten all pair distances into one array."""
    return np.array(
        [pair.distance for neighbors in table for pair in neighbors],
        dtype=np.float64
    )
