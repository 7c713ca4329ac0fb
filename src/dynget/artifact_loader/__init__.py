"""
Artifact loading.

This package handles:
1. Loading the native library through a pluggable primitive
2. Choosing the candidate search order per platform
3. Remembering the process-wide loaded module
"""

from .loader import (
    PROCESS_LATCH,
    ArtifactLoader,
    CtypesLoadPrimitive,
    DirectLoadStrategy,
    LoadedModuleLatch,
    LoadPrimitive,
    LoadStrategy,
    SearchPathStrategy,
)

__all__ = [
    "PROCESS_LATCH",
    "ArtifactLoader",
    "CtypesLoadPrimitive",
    "DirectLoadStrategy",
    "LoadedModuleLatch",
    "LoadPrimitive",
    "LoadStrategy",
    "SearchPathStrategy",
]
