"""Rendering adapters - implementations of ArtifactRenderer port."""

from .opencv_renderer import OpenCVRenderer

__all__ = ['OpenCVRenderer']
