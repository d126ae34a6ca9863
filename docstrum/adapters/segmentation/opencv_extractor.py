"""OpenCV component extractor - implements ComponentExtractor port."""

from __future__ import annotations

import logging

import cv2
import numpy as np

from ...application.ports.component_extractor import ComponentExtractor
from ...config import ADAPTIVE_BLOCK_SIZE, ADAPTIVE_OFFSET, DEFAULT_THRESHOLD_METHOD
from ...domain.entities.component import ConnectedComponent
from ...domain.entities.page import PageInput
from ...domain.value_objects.geometry import BoundingBox, Point
from ...exceptions import InvalidConfigurationError, UpstreamSegmentationError

logger = logging.getLogger(__name__)

THRESHOLD_METHODS = ("adaptive", "otsu")


class OpenCVComponentExtractor(ComponentExtractor):
    """Binarize a page and label its dark connected components.

    Foreground is assumed darker than the background (ink on paper).
    """

    def __init__(
        self,
        method: str = DEFAULT_THRESHOLD_METHOD,
        block_size: int = ADAPTIVE_BLOCK_SIZE,
        offset: float = ADAPTIVE_OFFSET,
        connectivity: int = 8,
        max_components: int = 100_000
    ):
        if method not in THRESHOLD_METHODS:
            raise InvalidConfigurationError(
                f"Unknown threshold method {method!r}, expected one of {THRESHOLD_METHODS}",
                config_key="method"
            )
        if block_size < 3 or block_size % 2 == 0:
            raise InvalidConfigurationError(
                f"block_size must be an odd number >= 3, got {block_size}",
                config_key="block_size"
            )
        if connectivity not in (4, 8):
            raise InvalidConfigurationError(
                f"connectivity must be 4 or 8, got {connectivity}",
                config_key="connectivity"
            )
        self._method = method
        self._block_size = block_size
        self._offset = offset
        self._connectivity = connectivity
        self._max_components = max_components

    @property
    def name(self) -> str:
        return f"OpenCV-{self._method}"

    def binarize(self, gray: np.ndarray) -> np.ndarray:
        """Foreground 255, background 0."""
        if self._method == "otsu":
            _, binary = cv2.threshold(
                gray, 0, 255, cv2.THRESH_BINARY_INV + cv2.THRESH_OTSU
            )
            return binary
        return cv2.adaptiveThreshold(
            gray,
            255,
            cv2.ADAPTIVE_THRESH_MEAN_C,
            cv2.THRESH_BINARY_INV,
            self._block_size,
            self._offset
        )

    def extract(self, page: PageInput) -> list[ConnectedComponent]:
        """Segment a page into connected components.

        Raises:
            UpstreamSegmentationError: If the page cannot be read or labelled
        """
        try:
            gray = _to_gray(page.to_array())
        except (OSError, ValueError) as e:
            raise UpstreamSegmentationError(
                f"Cannot read page: {e}", page_name=page.name
            ) from e

        try:
            binary = self.binarize(gray)
            count, _, stats, centroids = cv2.connectedComponentsWithStats(
                binary, connectivity=self._connectivity
            )
        except cv2.error as e:
            raise UpstreamSegmentationError(
                f"OpenCV segmentation failed: {e}", page_name=page.name
            ) from e

        # label 0 is the background
        if count - 1 > self._max_components:
            raise UpstreamSegmentationError(
                f"Too many components ({count - 1} > {self._max_components})",
                page_name=page.name
            )

        components = []
        for label in range(1, count):
            x, y, w, h, area = (int(v) for v in stats[label])
            cx, cy = centroids[label]
            components.append(ConnectedComponent(
                label=label,
                centroid=Point(float(cx), float(cy)),
                bounds=BoundingBox.from_xywh(x, y, w, h),
                pixel_count=area
            ))

        logger.debug(f"{page.name}: {len(components)} components ({self.name})")
        return components


def _to_gray(data: np.ndarray) -> np.ndarray:
    """Coerce an array to single-channel uint8."""
    data = np.asarray(data)
    if data.ndim == 3 and data.shape[2] == 4:
        data = cv2.cvtColor(data.astype(np.uint8), cv2.COLOR_RGBA2GRAY)
    elif data.ndim == 3 and data.shape[2] == 3:
        data = cv2.cvtColor(data.astype(np.uint8), cv2.COLOR_RGB2GRAY)
    elif data.ndim == 3 and data.shape[2] == 1:
        data = data[:, :, 0]
    if data.ndim != 2:
        raise ValueError(f"Unsupported image shape {data.shape}")
    if data.dtype == np.bool_:
        # boolean masks mark foreground as True
        return np.where(data, 0, 255).astype(np.uint8)
    if data.dtype != np.uint8:
        data = np.clip(data, 0, 255).astype(np.uint8)
    return np.ascontiguousarray(data)
