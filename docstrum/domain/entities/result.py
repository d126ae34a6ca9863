"""Result entities for one analysed page."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from ..value_objects.polynomial import CriticalPoint


@dataclass(frozen=True, slots=True)
class OrientationEstimate:
    """Numeric outcome of the docstrum analysis of one page.

    Critical point locations are in angle units (radians over the
    half period), not bin units.
    """
    skew_angle: float
    coefficients: tuple[float, ...]
    critical_points: tuple[CriticalPoint, ...]
    spacing: float | None = None
    peak_source: str = "polynomial"  # or "histogram" when the fit has no maximum
    component_count: int = 0
    pair_count: int = 0

    @property
    def skew_degrees(self) -> float:
        return math.degrees(self.skew_angle)

    def to_dict(self) -> dict[str, Any]:
        return {
            "skew_angle": self.skew_angle,
            "skew_degrees": self.skew_degrees,
            "spacing": self.spacing,
            "peak_source": self.peak_source,
            "coefficients": list(self.coefficients),
            "critical_points": [
                {"kind": cp.kind.value, "angle": cp.location}
                for cp in self.critical_points
            ],
            "component_count": self.component_count,
            "pair_count": self.pair_count,
        }


@dataclass(frozen=True, slots=True)
class ImageResult:
    """Success or failure record for one page of a batch."""
    name: str
    success: bool
    estimate: OrientationEstimate | None = None
    artifacts: tuple[str, ...] = field(default_factory=tuple)
    error_message: str | None = None
    error_code: str | None = None
    processing_time_ms: float = 0.0

    @classmethod
    def failure(
        cls,
        name: str,
        error: str,
        error_code: str | None = None,
        processing_time_ms: float = 0.0
    ) -> ImageResult:
        """Create a failure result."""
        return cls(
            name=name,
            success=False,
            error_message=error,
            error_code=error_code,
            processing_time_ms=processing_time_ms
        )

    @classmethod
    def success_result(
        cls,
        name: str,
        estimate: OrientationEstimate,
        artifacts: tuple[str, ...] = (),
        processing_time_ms: float = 0.0
    ) -> ImageResult:
        """Create a success result."""
        return cls(
            name=name,
            success=True,
            estimate=estimate,
            artifacts=tuple(artifacts),
            processing_time_ms=processing_time_ms
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "success": self.success,
            "processing_time_ms": round(self.processing_time_ms, 3),
        }
        if self.success and self.estimate is not None:
            data["estimate"] = self.estimate.to_dict()
            data["artifacts"] = list(self.artifacts)
        else:
            data["error"] = self.error_message
            data["error_code"] = self.error_code
        return data
