"""Page entity - one image handed to the pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np

from .component import ConnectedComponent


@dataclass(frozen=True, slots=True, eq=False)
class PageInput:
    """One unit of batch work.

    A page carries either pre-extracted components (segmentation already
    done upstream) or raster data for the component extractor, given as an
    in-memory array or a file path.
    """
    name: str
    components: tuple[ConnectedComponent, ...] | None = None
    pixels: np.ndarray | None = None
    source_path: Path | None = None

    @property
    def has_components(self) -> bool:
        return self.components is not None

    @property
    def size(self) -> tuple[int, int] | None:
        """(width, height) when raster data is in memory."""
        if self.pixels is None:
            return None
        return (int(self.pixels.shape[1]), int(self.pixels.shape[0]))

    def to_array(self) -> np.ndarray:
        """Grayscale uint8 raster, loading from disk when needed."""
        if self.pixels is not None:
            return self.pixels
        if self.source_path is None:
            raise ValueError(f"Page {self.name!r} has no raster data")
        # Lazy import - domain doesn't depend on PIL
        from PIL import Image as PILImage
        with PILImage.open(self.source_path) as img:
            return np.array(img.convert("L"))

    @classmethod
    def from_file(cls, path: Path | str) -> PageInput:
        """Page backed by an image file, loaded on demand."""
        path = Path(path)
        return cls(name=path.stem, source_path=path)

    @classmethod
    def from_array(cls, name: str, data: np.ndarray) -> PageInput:
        """Page backed by an in-memory raster."""
        return cls(name=name, pixels=np.asarray(data))

    @classmethod
    def from_components(
        cls,
        name: str,
        components: list[ConnectedComponent] | tuple[ConnectedComponent, ...]
    ) -> PageInput:
        """Page whose segmentation has already been done."""
        return cls(name=name, components=tuple(components))
