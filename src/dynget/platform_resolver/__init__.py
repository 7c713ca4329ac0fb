"""
Platform resolution.

This package handles:
1. Classifying the running platform
2. Choosing the shared library extension
3. Naming the canonical artifact and the build tool's output
"""

from .resolver import (
    PlatformResolver,
    artifact_filename,
    build_output_filename,
    current_platform_kind,
    extension_for,
    platform_kind,
)

__all__ = [
    "PlatformResolver",
    "artifact_filename",
    "build_output_filename",
    "current_platform_kind",
    "extension_for",
    "platform_kind",
]
