"""Shared fixtures: synthetic pages of evenly spaced glyphs."""

import math

import numpy as np
import pytest

from docstrum.domain.entities.component import ConnectedComponent
from docstrum.domain.value_objects.geometry import BoundingBox, Point


def glyph(label: int, x: float, y: float, w: float = 6, h: float = 8) -> ConnectedComponent:
    return ConnectedComponent(
        label=label,
        centroid=Point(x, y),
        bounds=BoundingBox(x - w / 2, y - h / 2, x + w / 2, y + h / 2),
        pixel_count=int(w * h)
    )


def text_lines(
    angle_deg: float = 0.0,
    rows: int = 3,
    per_row: int = 30,
    spacing: float = 10.0,
    row_gap: float = 100.0,
    origin: tuple[float, float] = (50.0, 50.0)
) -> list[ConnectedComponent]:
    """Rows of glyphs ``spacing`` apart, rotated by ``angle_deg``."""
    theta = math.radians(angle_deg)
    cos_t, sin_t = math.cos(theta), math.sin(theta)
    components = []
    label = 1
    for r in range(rows):
        for i in range(per_row):
            u, v = i * spacing, r * row_gap
            components.append(glyph(
                label,
                origin[0] + u * cos_t - v * sin_t,
                origin[1] + u * sin_t + v * cos_t
            ))
            label += 1
    return components


def page_raster(rows: int = 3, per_row: int = 30, size: int = 4) -> np.ndarray:
    """White page with black square glyphs on horizontal lines."""
    height, width = 60 * rows + 40, 12 * per_row + 40
    page = np.full((height, width), 255, dtype=np.uint8)
    for r in range(rows):
        y = 40 + 60 * r
        for i in range(per_row):
            x = 20 + 12 * i
            page[y:y + size, x:x + size] = 0
    return page


@pytest.fixture
def make_lines():
    return text_lines


@pytest.fixture
def horizontal_page():
    return text_lines(0.0)


@pytest.fixture
def raster_page():
    return page_raster()
