"""
Version marker persistence.
"""

from .store import VersionStore

__all__ = ["VersionStore"]
