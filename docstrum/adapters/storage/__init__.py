"""Storage adapters - implementations of ArtifactSink port."""

from .directory_sink import DirectoryArtifactSink

__all__ = ['DirectoryArtifactSink']
