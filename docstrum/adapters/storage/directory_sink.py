"""Directory artifact sink - implements ArtifactSink port with Pillow."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import numpy as np
from PIL import Image

from ...application.ports.artifacts import ArtifactSink
from ...exceptions import ArtifactError

logger = logging.getLogger(__name__)


class DirectoryArtifactSink(ArtifactSink):
    """Writes ``<output_dir>/<page>/<artifact>.png``."""

    def __init__(self, output_dir: Path | str, image_format: str = "png"):
        self._output_dir = Path(output_dir)
        self._format = image_format.lower().lstrip(".")

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def path_for(self, page_name: str, artifact_name: str) -> Path:
        return self._output_dir / page_name / f"{artifact_name}.{self._format}"

    def write(self, page_name: str, artifact_name: str, raster: np.ndarray) -> None:
        path = self.path_for(page_name, artifact_name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            Image.fromarray(np.asarray(raster, dtype=np.uint8)).save(path)
        except (OSError, ValueError, TypeError) as e:
            raise ArtifactError(f"Cannot write {path}: {e}", artifact_name) from e
        logger.debug(f"Saved artifact {path}")

    def discard(self, page_name: str, artifact_names: Iterable[str]) -> None:
        """Delete the named artifacts and the page folder once it is empty."""
        for artifact_name in artifact_names:
            self.path_for(page_name, artifact_name).unlink(missing_ok=True)
        page_dir = self._output_dir / page_name
        if page_dir.is_dir() and not any(page_dir.iterdir()):
            page_dir.rmdir()
        logger.debug(f"Discarded artifacts of {page_name}")
