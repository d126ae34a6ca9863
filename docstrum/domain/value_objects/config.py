"""Configuration value objects with validation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ...config import (
    DEFAULT_ALPHA,
    DEFAULT_DEGREE,
    DEFAULT_K,
    DEFAULT_MIN_COMPONENT_AREA,
    DEFAULT_NBINS,
    DEFAULT_SCAN_STEP,
    DEFAULT_SPACING_ALPHA,
    DEFAULT_SPACING_BIN_WIDTH,
    DEFAULT_SPACING_TOLERANCE_DEG,
)
from ...exceptions import InvalidConfigurationError


class DocstrumConfig(BaseModel):
    """Tuning parameters for one analysis run."""

    model_config = {"frozen": True, "extra": "forbid"}

    # Neighbour search
    k: int = Field(default=DEFAULT_K, ge=1)
    min_component_area: float = Field(default=DEFAULT_MIN_COMPONENT_AREA, ge=0)
    neighbor_workers: int = Field(default=1, ge=1, le=64)

    # Angle histogram
    nbins: int = Field(default=DEFAULT_NBINS, ge=1)
    alpha: float = Field(default=DEFAULT_ALPHA, ge=0.0, lt=1.0)

    # Curve fit
    degree: int = Field(default=DEFAULT_DEGREE, ge=0)
    scan_step: float = Field(default=DEFAULT_SCAN_STEP, gt=0)

    # Spacing
    spacing_bin_width: float = Field(default=DEFAULT_SPACING_BIN_WIDTH, gt=0)
    spacing_alpha: float = Field(default=DEFAULT_SPACING_ALPHA, ge=0.0, lt=1.0)
    spacing_angle_tolerance: float = Field(
        default=DEFAULT_SPACING_TOLERANCE_DEG, gt=0, le=90
    )


def build_config(**values: Any) -> DocstrumConfig:
    """Create a validated config, reporting problems as InvalidConfigurationError.

    Raises:
        InvalidConfigurationError: If any value is out of range or unknown
    """
    try:
        return DocstrumConfig(**values)
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ())) or None
        raise InvalidConfigurationError(
            f"Invalid configuration: {first.get('msg', e)}",
            config_key=key
        ) from e


__all__ = [
    'DocstrumConfig',
    'build_config',
]
