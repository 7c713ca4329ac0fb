"""
Prebuilt artifact fetcher.

This package handles:
1. Building release download URLs
2. Downloading and decompressing artifacts
3. Recording the installed version
"""

from .fetcher import ArtifactFetcher

__all__ = ["ArtifactFetcher"]
