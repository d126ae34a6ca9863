"""Curve fitting and peak location on the angle histogram."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

import numpy as np
import numpy.typing as npt
from numpy.polynomial import polynomial as P

from ...config import DEFAULT_SCAN_STEP, DEFAULT_SPACING_ALPHA
from ...domain.entities.component import NeighborSet
from ...domain.value_objects.histogram import Histogram
from ...domain.value_objects.polynomial import CriticalPoint, CriticalPointKind, Polynomial
from ...exceptions import InvalidConfigurationError, NumericDegeneracyError
from .histogram import build_distance_histogram, fold_angle

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SkewEstimate:
    """Dominant orientation found on a fitted histogram."""
    angle: float  # radians in (-pi/2, pi/2]
    location: float  # bin units
    source: str  # "polynomial" or "histogram"
    critical_points: tuple[CriticalPoint, ...]  # bin units


def fit_polynomial(values: npt.ArrayLike, degree: int) -> Polynomial:
    """Unweighted least-squares polynomial fit at x = 0 .. n-1.

    Raises:
        InvalidConfigurationError: If degree is negative
        NumericDegeneracyError: If the fit is under-determined or not finite
    """
    if isinstance(degree, bool) or not isinstance(degree, (int, np.integer)) or degree < 0:
        raise InvalidConfigurationError(f"degree must be >= 0, got {degree!r}", config_key="degree")

    y = np.asarray(values, dtype=np.float64).ravel()
    if y.size == 0:
        raise NumericDegeneracyError("Cannot fit a polynomial to zero points", degree=degree)
    if degree >= y.size:
        raise NumericDegeneracyError(
            f"Degree {degree} needs more than {y.size} distinct points", degree=degree
        )
    if not np.all(np.isfinite(y)):
        raise NumericDegeneracyError("Histogram contains non-finite values", degree=degree)

    x = np.arange(y.size, dtype=np.float64)
    coefficients, (_, rank, _, _) = P.polyfit(x, y, int(degree), full=True)
    if rank < degree + 1:
        raise NumericDegeneracyError(
            f"Rank-deficient fit (rank {rank} for degree {degree})", degree=degree
        )
    if not np.all(np.isfinite(coefficients)):
        raise NumericDegeneracyError("Fit produced non-finite coefficients", degree=degree)

    return Polynomial(tuple(float(c) for c in coefficients))


def estimate_skew(
    histogram: Histogram,
    polynomial: Polynomial,
    step: float = DEFAULT_SCAN_STEP
) -> SkewEstimate:
    """Locate the dominant orientation peak.

    The fitted curve is scanned over [0, nbins); the MAXIMUM with the
    largest fitted value wins and is mapped back to angle units. When the
    curve has no interior maximum the highest histogram bin is used.
    The angle is folded onto (-pi/2, pi/2], like the neighbour angles.

    Raises:
        NumericDegeneracyError: If the histogram holds no samples, so there
            is no orientation to report
    """
    if histogram.is_empty:
        raise NumericDegeneracyError("No neighbour pairs, the orientation is undefined")

    points = polynomial.find_critical_points(0.0, float(histogram.nbins), step)
    maxima = [cp for cp in points if cp.kind is CriticalPointKind.MAXIMUM]

    if maxima:
        best = max(maxima, key=lambda cp: polynomial(cp.location))
        return SkewEstimate(
            angle=fold_angle(histogram.to_domain(best.location)),
            location=best.location,
            source="polynomial",
            critical_points=tuple(points)
        )

    peak = histogram.peak_bin()
    logger.debug(f"No maximum on fitted curve, falling back to histogram bin {peak}")
    return SkewEstimate(
        angle=fold_angle(histogram.to_domain(peak)),
        location=float(peak),
        source="histogram",
        critical_points=tuple(points)
    )


def to_angle_units(points: Iterable[CriticalPoint], histogram: Histogram) -> tuple[CriticalPoint, ...]:
    """Map critical point locations from bin units to radians."""
    return tuple(
        CriticalPoint(cp.kind, histogram.to_domain(cp.location)) for cp in points
    )


def angular_difference(a: float, b: float) -> float:
    """Smallest difference between two undirected orientations, in [0, pi/2]."""
    return abs(fold_angle(a - b))


def estimate_spacing(
    table: Iterable[NeighborSet],
    skew_angle: float,
    tolerance: float,
    bin_width: float = 1.0,
    alpha: float = DEFAULT_SPACING_ALPHA
) -> float | None:
    """Typical distance between neighbours lying along the skew direction.

    Only pairs whose orientation is within ``tolerance`` radians of the
    skew take part. The answer is the centre of the highest bin of their
    smoothed distance histogram.

    Returns:
        Spacing in pixels, or None when no pair is aligned with the skew
    """
    distances = [
        pair.distance
        for neighbors in table
        for pair in neighbors
        if angular_difference(pair.angle, skew_angle) <= tolerance
    ]
    if not distances:
        return None

    histogram = build_distance_histogram(distances, bin_width=bin_width, alpha=alpha)
    if histogram.is_empty:
        return None
    return histogram.bin_center(histogram.peak_bin())
