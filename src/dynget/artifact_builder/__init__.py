"""
Local compilation of the artifact.
"""

from .builder import ArtifactBuilder, OutputSink

__all__ = ["ArtifactBuilder", "OutputSink"]
