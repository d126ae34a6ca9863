"""Geometry value objects."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Point:
    """2D point in image coordinates (y grows downwards)."""
    x: float
    y: float

    def distance_to(self, other: Point) -> float:
        """Calculate Euclidean distance to another point."""
        return math.hypot(other.x - self.x, other.y - self.y)

    def angle_to(self, other: Point) -> float:
        """Signed angle of the vector self -> other, in (-pi, pi]."""
        theta = math.atan2(other.y - self.y, other.x - self.x)
        # atan2 yields -pi for a negative-zero dy
        if theta == -math.pi:
            return math.pi
        return theta

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned bounding box, max edges exclusive."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> Point:
        return Point(
            (self.min_x + self.max_x) / 2,
            (self.min_y + self.max_y) / 2
        )

    def union(self, other: BoundingBox) -> BoundingBox:
        """Return bounding box containing both boxes."""
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y)
        )

    @classmethod
    def from_xywh(cls, x: float, y: float, w: float, h: float) -> BoundingBox:
        """Create from top-left corner and size."""
        return cls(x, y, x + w, y + h)
