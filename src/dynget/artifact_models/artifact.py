"""
Pydantic data models describing the native artifact and the outcome of
an acquisition.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class PlatformKind(str, Enum):
    """
    Platform families with distinct artifact naming and loading rules.
    """

    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"
    OTHER = "other"


class AcquisitionState(str, Enum):
    """States of the acquisition state machine."""

    NO_ARTIFACT = "no_artifact"
    STALE = "stale"
    CURRENT = "current"
    LOADED = "loaded"
    LOAD_FAILED = "load_failed"


class ArtifactDescriptor(BaseModel):
    """
    Naming of the artifact on the running platform.

    Derived from the platform at call time, never persisted.
    """

    platform: PlatformKind = Field(..., description="Platform family")
    extension: str = Field(..., description="Shared library extension: dll, dylib, so")
    filename: str = Field(..., description="Canonical artifact filename")
    build_output_filename: str = Field(
        ..., description="Filename produced by the external build tool"
    )

    class Config:
        frozen = True


class EnsureResult(BaseModel):
    """
    Outcome of AcquisitionOrchestrator.ensure().
    """

    requested_version: str
    recorded_version: Optional[str] = Field(
        None, description="Marker value read before acquisition"
    )
    loaded_version: Optional[str] = Field(
        None, description="Version reported by the resident module"
    )
    state: AcquisitionState = AcquisitionState.LOADED
    acquired_from: Optional[str] = Field(
        None, description="Source that produced a new artifact during this call"
    )
    warning: Optional[str] = Field(
        None, description="Version mismatch message, if one was emitted"
    )

    @property
    def version_mismatch(self) -> bool:
        return self.warning is not None
