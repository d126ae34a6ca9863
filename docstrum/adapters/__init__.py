"""Adapters - implementations of the application ports."""

from .rendering import OpenCVRenderer
from .segmentation import OpenCVComponentExtractor
from .storage import DirectoryArtifactSink

__all__ = ['OpenCVRenderer', 'OpenCVComponentExtractor', 'DirectoryArtifactSink']
