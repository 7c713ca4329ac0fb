"""
Artifact models.

Pydantic models for the platform-specific artifact naming and for the
result of an acquisition.
"""

from .artifact import (
    AcquisitionState,
    ArtifactDescriptor,
    EnsureResult,
    PlatformKind,
)

__all__ = [
    "AcquisitionState",
    "ArtifactDescriptor",
    "EnsureResult",
    "PlatformKind",
]
