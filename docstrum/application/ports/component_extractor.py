"""Component extractor port - interface for page segmentation."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ...domain.entities.component import ConnectedComponent
from ...domain.entities.page import PageInput


@runtime_checkable
class ComponentExtractor(Protocol):
    """Port for binarization + connected-component labelling.

    Implementations: OpenCV (bundled), or any upstream segmentation service.
    Failures should be raised as UpstreamSegmentationError; anything else
    escaping ``extract`` is wrapped into one by the pipeline.
    """

    @property
    def name(self) -> str:
        """Extractor name."""
        ...

    def extract(self, page: PageInput) -> list[ConnectedComponent]:
        """Segment a page into connected components.

        Args:
            page: Page with raster data (array or file)

        Returns:
            Components with labels unique within the page
        """
        ...
