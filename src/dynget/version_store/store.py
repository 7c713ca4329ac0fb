"""
Persisted version marker of the installed artifact.
"""

import logging
import os
from typing import Optional

from dynget.dynget_logger import DyngetLogger
from dynget.dynget_settings import DyngetSettings
from dynget.dynget_utils import FileUtils


class VersionStore:
    """
    Reads and writes the single-line marker file recording which artifact
    version is installed in a directory.
    """

    def __init__(
        self,
        directory: str,
        logger: Optional[DyngetLogger] = None,
        filename: str = DyngetSettings.VERSION_FILE_NAME,
    ):
        self.directory = directory
        self.filename = filename
        self.logger = logger or DyngetLogger()

    @property
    def path(self) -> str:
        return os.path.join(self.directory, self.filename)

    def read(self) -> Optional[str]:
        """
        Returns:
            The recorded version, or None if the marker is absent, empty or unreadable
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                version = f.readline().strip()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            self.logger.log(f"Could not read version marker {self.path}: {e}", logging.WARNING)
            return None
        return version or None

    def write(self, version: str) -> None:
        if not version or not version.strip():
            raise ValueError("Version marker must not be empty")
        os.makedirs(self.directory, exist_ok=True)
        FileUtils.write_text_atomic(self.path, version.strip() + "\n")
        self.logger.log(f"Recorded version {version.strip()} in {self.path}", logging.DEBUG)

    @staticmethod
    def is_local(version: Optional[str]) -> bool:
        """True if version is the sentinel that disables remote acquisition."""
        return version == DyngetSettings.LOCAL_VERSION
