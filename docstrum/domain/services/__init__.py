"""Domain services - pure numeric logic, no I/O."""

from .neighbor_finder import (
    collect_angles,
    collect_distances,
    compute_neighbor_table,
    find_neighbors,
)
from .histogram import (
    build_angle_histogram,
    build_distance_histogram,
    fold_angle,
    fold_angles,
    smooth_and_normalize,
)
from .polynomial_fit import (
    SkewEstimate,
    estimate_skew,
    estimate_spacing,
    fit_polynomial,
)

__all__ = [
    'collect_angles',
    'collect_distances',
    'compute_neighbor_table',
    'find_neighbors',
    'build_angle_histogram',
    'build_distance_histogram',
    'fold_angle',
    'fold_angles',
    'smooth_and_normalize',
    'SkewEstimate',
    'estimate_skew',
    'estimate_spacing',
    'fit_polynomial',
]
