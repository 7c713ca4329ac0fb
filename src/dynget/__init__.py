"""
dynget acquires a versioned native library (by default the tsc-dyn module of
elisp-tree-sitter) and loads it into the running process.

    from dynget import DyngetConfig, ensure

    result = ensure("0.18.0", DyngetConfig(install_dir="/opt/tsc"))
"""

from typing import Optional

from dynget.dynget_config import AcquisitionSource, DyngetConfig
from dynget.dynget_exceptions import (
    BuildError,
    DyngetException,
    FetchError,
    LoadError,
    UnsupportedPlatformError,
    VersionMismatchWarning,
)
from dynget.dynget_logger import DyngetLogger
from dynget.artifact_models import AcquisitionState, EnsureResult
from dynget.orchestrator import AcquisitionOrchestrator


def ensure(
    requested_version: str,
    config: Optional[DyngetConfig] = None,
    logger: Optional[DyngetLogger] = None,
) -> EnsureResult:
    """
    Make sure requested_version of the artifact is installed and loaded.
    """
    orchestrator = AcquisitionOrchestrator(config or DyngetConfig(), logger)
    return orchestrator.ensure(requested_version)


__all__ = [
    "AcquisitionOrchestrator",
    "AcquisitionSource",
    "AcquisitionState",
    "BuildError",
    "DyngetConfig",
    "DyngetException",
    "DyngetLogger",
    "EnsureResult",
    "FetchError",
    "LoadError",
    "UnsupportedPlatformError",
    "VersionMismatchWarning",
    "ensure",
]
