"""Histogram builders - circular angle histogram and linear distance histogram."""

from __future__ import annotations

import logging
import math

import numpy as np
import numpy.typing as npt

from ...config import ANGLE_DOMAIN, DEFAULT_ALPHA, DEFAULT_NBINS, DEFAULT_SPACING_ALPHA, HALF_PI
from ...domain.value_objects.histogram import Histogram
from ...exceptions import InvalidConfigurationError

logger = logging.getLogger(__name__)


def fold_angle(theta: float) -> float:
    """Fold a direction angle onto the undirected half period (-pi/2, pi/2].

    Line orientation is undirected, so theta and theta +/- pi are the same
    orientation. Idempotent.
    """
    theta = math.remainder(theta, 2 * math.pi)
    if theta > HALF_PI:
        return theta - math.pi
    if theta <= -HALF_PI:
        return theta + math.pi
    return theta


def fold_angles(thetas: npt.ArrayLike) -> np.ndarray:
    """Vectorised fold_angle for samples in (-pi, pi]."""
    t = np.asarray(thetas, dtype=np.float64)
    t = np.where(t > HALF_PI, t - math.pi, t)
    return np.where(t <= -HALF_PI, t + math.pi, t)


def bucket_angles(folded: npt.ArrayLike, nbins: int) -> np.ndarray:
    """Count folded angles per bin; bin ``nbins`` (theta == pi/2) wraps to 0."""
    _check_nbins(nbins)
    folded = np.asarray(folded, dtype=np.float64)
    if folded.size == 0:
        return np.zeros(nbins, dtype=np.int64)
    # (theta + pi/2) / pi lies in (0, 1], so pi/2 lands exactly on bin nbins
    index = np.floor((folded + HALF_PI) / ANGLE_DOMAIN * nbins).astype(np.int64)
    index[index == nbins] = 0
    # rounding at the domain edges can land one bin outside
    index = np.mod(index, nbins)
    return np.bincount(index, minlength=nbins)


def window_size(alpha: float, nbins: int) -> int:
    """Even smoothing window, 2 * floor(alpha * nbins / 2) bins."""
    return 2 * int(math.floor(alpha * nbins / 2))


def smooth_and_normalize(
    counts: npt.ArrayLike,
    alpha: float,
    sample_count: int,
    circular: bool = True
) -> tuple[np.ndarray, int]:
    """Apply a rectangular moving average and normalise to a density.

    The window spans bins ``i - p + 1 .. i + p`` (``p = window / 2``) and is
    evaluated from a prefix sum over the counts, padded with wrap-around
    values for a circular domain or zeros for a linear one. Dividing by
    ``sample_count * window`` makes the circular result sum to 1.

    Args:
        counts: Raw bin counts
        alpha: Window size as a fraction of the number of bins, in [0, 1)
        sample_count: Number of samples, equivalent to sum(counts)
        circular: Whether the last bin borders the first

    Returns:
        Tuple of (densities, window size in bins). A window of 0 means the
        counts were only normalised.
    """
    _check_alpha(alpha)
    counts = np.asarray(counts, dtype=np.float64)
    nbins = counts.shape[0]
    _check_nbins(nbins)

    if sample_count == 0:
        return np.zeros(nbins, dtype=np.float64), window_size(alpha, nbins)

    window = window_size(alpha, nbins)
    if window == 0:
        return counts / sample_count, 0

    pad = window // 2
    offsets = np.arange(1 - pad, nbins + pad)
    if circular:
        padded = counts[np.mod(offsets, nbins)]
    else:
        inside = (offsets >= 0) & (offsets < nbins)
        padded = np.where(inside, counts[np.clip(offsets, 0, nbins - 1)], 0.0)

    prefix = np.concatenate(([0.0], np.cumsum(padded)))
    sums = prefix[window:window + nbins] - prefix[:nbins]
    return sums / (sample_count * window), window


def build_angle_histogram(
    angles: npt.ArrayLike,
    nbins: int = DEFAULT_NBINS,
    alpha: float = DEFAULT_ALPHA
) -> Histogram:
    """Circular, smoothed histogram of neighbour angles over (-pi/2, pi/2].

    Raises:
        InvalidConfigurationError: If nbins <= 0 or alpha is outside [0, 1)
    """
    _check_nbins(nbins)
    _check_alpha(alpha)
    samples = _finite(angles)

    counts = bucket_angles(fold_angles(samples), nbins)
    values, window = smooth_and_normalize(counts, alpha, samples.size, circular=True)
    return Histogram(
        values=values,
        bin_width=ANGLE_DOMAIN / nbins,
        origin=-HALF_PI,
        circular=True,
        sample_count=int(samples.size),
        window=window
    )


def build_distance_histogram(
    distances: npt.ArrayLike,
    bin_width: float = 1.0,
    alpha: float = DEFAULT_SPACING_ALPHA
) -> Histogram:
    """Linear, smoothed histogram of neighbour distances over [0, max].

    Uses the same smoothing as the angle histogram with zero padding
    instead of wrap-around, so mass near the ends is not carried across.

    Raises:
        InvalidConfigurationError: If bin_width <= 0 or alpha is outside [0, 1)
    """
    if not bin_width > 0:
        raise InvalidConfigurationError(
            f"bin_width must be > 0, got {bin_width}", config_key="spacing_bin_width"
        )
    _check_alpha(alpha)
    samples = _finite(distances)
    samples = samples[samples >= 0]

    if samples.size == 0:
        return Histogram(values=np.zeros(1), bin_width=bin_width)

    index = np.floor(samples / bin_width).astype(np.int64)
    nbins = int(index.max()) + 1
    counts = np.bincount(index, minlength=nbins)
    values, window = smooth_and_normalize(counts, alpha, samples.size, circular=False)
    return Histogram(
        values=values,
        bin_width=bin_width,
        origin=0.0,
        circular=False,
        sample_count=int(samples.size),
        window=window
    )


def _finite(samples: npt.ArrayLike) -> np.ndarray:
    values = np.asarray(samples, dtype=np.float64).ravel()
    mask = np.isfinite(values)
    if not mask.all():
        logger.warning(f"Dropping {int((~mask).sum())} non-finite histogram samples")
        values = values[mask]
    return values


def _check_nbins(nbins: int) -> None:
    if isinstance(nbins, bool) or not isinstance(nbins, (int, np.integer)) or nbins <= 0:
        raise InvalidConfigurationError(f"nbins must be a positive integer, got {nbins!r}", config_key="nbins")


def _check_alpha(alpha: float) -> None:
    if not (0.0 <= alpha < 1.0):
        raise InvalidConfigurationError(f"alpha must be in [0, 1), got {alpha}", config_key="alpha")
