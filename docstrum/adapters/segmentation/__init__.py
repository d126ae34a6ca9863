"""Segmentation adapters - implementations of ComponentExtractor port."""

from .opencv_extractor import OpenCVComponentExtractor, THRESHOLD_METHODS

__all__ = ['OpenCVComponentExtractor', 'THRESHOLD_METHODS']
