"""Histogram value object."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class Histogram:
    """Smoothed, normalised histogram over a linear or circular domain.

    Bin ``i`` covers ``[origin + i * bin_width, origin + (i + 1) * bin_width)``.
    For a circular histogram the bin after the last one is bin 0.
    """
    values: np.ndarray
    bin_width: float
    origin: float = 0.0
    circular: bool = False
    sample_count: int = 0
    window: int = 0

    def __post_init__(self) -> None:
        values = np.asarray(self.values, dtype=np.float64)
        values.setflags(write=False)
        object.__setattr__(self, "values", values)

    @property
    def nbins(self) -> int:
        return int(self.values.shape[0])

    @property
    def total(self) -> float:
        """Sum of densities, about 1 when any samples were seen."""
        return float(self.values.sum())

    @property
    def is_empty(self) -> bool:
        return self.sample_count == 0

    def to_domain(self, x: float) -> float:
        """Map a position in bin units back to domain units."""
        return self.origin + x * self.bin_width

    def bin_center(self, index: int) -> float:
        return self.to_domain(index + 0.5)

    def peak_bin(self) -> int:
        """Index of the highest bin (first one on ties)."""
        return int(np.argmax(self.values))

    def __len__(self) -> int:
        return self.nbins
