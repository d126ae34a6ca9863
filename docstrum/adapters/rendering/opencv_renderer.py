"""OpenCV renderer - implements ArtifactRenderer port."""

from __future__ import annotations

import logging
import math

import cv2
import numpy as np

from ...application.ports.artifacts import ArtifactRenderer, RenderRequest
from ...config import (
    ARTIFACT_ANGLE_HISTOGRAM,
    ARTIFACT_NEIGHBOR_OVERLAY,
    ARTIFACT_POLAR_SCATTER,
    PLOT_SIZE,
)
from ...domain.value_objects.polynomial import CriticalPointKind

logger = logging.getLogger(__name__)

WHITE = 255
BLACK = 0
GRAY = 160
LIGHT_GRAY = 210


class OpenCVRenderer(ArtifactRenderer):
    """Draws the diagnostic rasters as single-channel uint8 images."""

    def __init__(self, plot_size: int = PLOT_SIZE, margin: int = 2):
        self._size = plot_size
        self._margin = margin

    def render(self, request: RenderRequest) -> dict[str, np.ndarray]:
        return {
            ARTIFACT_ANGLE_HISTOGRAM: self.plot_histogram(request),
            ARTIFACT_POLAR_SCATTER: self.plot_polar(request),
            ARTIFACT_NEIGHBOR_OVERLAY: self.plot_overlay(request),
        }

    def plot_histogram(self, request: RenderRequest) -> np.ndarray:
        """Histogram bars, fitted curve and critical points (vertical lines)."""
        size = self._size
        canvas = np.full((size, size), WHITE, dtype=np.uint8)
        histogram = request.histogram
        nbins = histogram.nbins

        xs = np.arange(nbins, dtype=np.float64)
        fitted = np.asarray(request.polynomial(xs), dtype=np.float64)
        top = max(float(histogram.values.max(initial=0.0)), float(fitted.max(initial=0.0)))
        if top <= 0:
            return canvas
        scale = (size - 1 - self._margin) / top

        def to_px(x: float) -> int:
            return int(round(x * (size - 1) / max(nbins - 1, 1)))

        for i, value in enumerate(histogram.values):
            height = int(round(value * scale))
            if height > 0:
                px = to_px(i)
                cv2.line(canvas, (px, size - 1), (px, size - 1 - height), LIGHT_GRAY, 1)

        for cp in request.estimate.critical_points:
            location = (cp.location - histogram.origin) / histogram.bin_width
            shade = BLACK if cp.kind is CriticalPointKind.MAXIMUM else GRAY
            px = to_px(location)
            cv2.line(canvas, (px, 0), (px, size - 1), shade, 1)

        curve = np.column_stack([
            [to_px(x) for x in xs],
            np.clip(size - 1 - np.round(fitted * scale), 0, size - 1)
        ]).astype(np.int32)
        cv2.polylines(canvas, [curve.reshape(-1, 1, 2)], False, BLACK, 1)
        return canvas

    def plot_polar(self, request: RenderRequest) -> np.ndarray:
        """Scatter of neighbour vectors around the plot centre."""
        size = self._size
        canvas = np.full((size, size), WHITE, dtype=np.uint8)
        pairs = [pair for neighbors in request.neighbor_table for pair in neighbors]
        if not pairs:
            return canvas

        dist = np.array([p.distance for p in pairs])
        theta = np.array([p.angle for p in pairs])
        x = (dist * np.cos(theta) + size / 2).astype(np.int64)
        y = (dist * np.sin(theta) + size / 2).astype(np.int64)
        inside = (x >= 0) & (x < size) & (y >= 0) & (y < size)
        canvas[y[inside], x[inside]] = BLACK
        return canvas

    def plot_overlay(self, request: RenderRequest) -> np.ndarray:
        """Component bounding boxes and edges to their neighbours."""
        width, height = request.page_size or _extent(request)
        canvas = np.full((max(height, 1), max(width, 1)), WHITE, dtype=np.uint8)

        for cc in request.components:
            box = cc.bounds
            cv2.rectangle(
                canvas,
                (int(box.min_x), int(box.min_y)),
                (int(box.max_x) - 1, int(box.max_y) - 1),
                GRAY,
                1
            )

        for neighbors in request.neighbor_table:
            c1 = neighbors.source.centroid
            for pair in neighbors:
                c2 = pair.neighbor.centroid
                cv2.line(
                    canvas,
                    (int(round(c1.x)), int(round(c1.y))),
                    (int(round(c2.x)), int(round(c2.y))),
                    BLACK,
                    1
                )
        return canvas


def _extent(request: RenderRequest) -> tuple[int, int]:
    """Smallest canvas holding every component when the page size is unknown."""
    if not request.components:
        return (1, 1)
    width = max(cc.bounds.max_x for cc in request.components)
    height = max(cc.bounds.max_y for cc in request.components)
    return (int(math.ceil(width)), int(math.ceil(height)))
