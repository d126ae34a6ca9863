"""Configuration and constants for the Docstrum project."""

import math


# Neighbour search
DEFAULT_K = 5
DEFAULT_MIN_COMPONENT_AREA = 10.0  # px^2, smaller blobs are treated as noise

# Angle histogram: 360 bins over the half period gives 0.5 degree resolution
DEFAULT_NBINS = 360
DEFAULT_ALPHA = 0.25  # smoothing window as a fraction of nbins
HALF_PI = math.pi / 2
ANGLE_DOMAIN = math.pi

# Curve fit
DEFAULT_DEGREE = 5
DEFAULT_SCAN_STEP = 1.0  # in bin units

# Spacing estimate
DEFAULT_SPACING_BIN_WIDTH = 1.0  # px
DEFAULT_SPACING_ALPHA = 0.1
DEFAULT_SPACING_TOLERANCE_DEG = 30.0


# Diagnostic artifacts
ARTIFACT_ANGLE_HISTOGRAM = "nn_angles"
ARTIFACT_POLAR_SCATTER = "docstrum"
ARTIFACT_NEIGHBOR_OVERLAY = "neighbor_overlay"
ARTIFACT_NAMES: tuple[str, ...] = (
    ARTIFACT_ANGLE_HISTOGRAM,
    ARTIFACT_POLAR_SCATTER,
    ARTIFACT_NEIGHBOR_OVERLAY,
)
PLOT_SIZE = 400  # px, square plots


# Segmentation adapter
DEFAULT_THRESHOLD_METHOD = "adaptive"
ADAPTIVE_BLOCK_SIZE = 31  # must be odd
ADAPTIVE_OFFSET = 10


# File handling - formats readable by Pillow that make sense for page scans
SUPPORTED_IMAGE_EXTENSIONS: tuple[str, ...] = (
    '.png',
    '.jpg', '.jpeg',
    '.tif', '.tiff',
    '.bmp',
    '.webp',
    '.pbm', '.pgm', '.ppm', '.pnm',
)

RESULTS_FILE = "results.json"


# Logging
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"
