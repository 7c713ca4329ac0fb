"""
Configuration parameters for dynget, supplied by the host application.
"""

import pathlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

try:
    import tomllib
except ModuleNotFoundError:
    # Python < 3.11
    import tomli as tomllib

from dynget.dynget_exceptions import DyngetException
from dynget.dynget_settings import DyngetSettings
from dynget.dynget_utils import VersionUtils


class AcquisitionSource(str, Enum):
    """
    Where a missing or stale artifact can be obtained from.
    """

    REMOTE = "remote"
    COMPILATION = "compilation"

    def __str__(self) -> str:
        return self.value


@dataclass
class DyngetConfig:
    """
    Configuration for acquiring and loading the native artifact.
    """

    install_dir: str = field(default_factory=DyngetSettings.get_default_install_directory)
    sources: List[AcquisitionSource] = field(
        default_factory=lambda: [AcquisitionSource.REMOTE, AcquisitionSource.COMPILATION]
    )
    source_dir: Optional[str] = None
    release_host: str = DyngetSettings.DEFAULT_RELEASE_HOST
    release_owner: str = DyngetSettings.DEFAULT_RELEASE_OWNER
    release_repo: str = DyngetSettings.DEFAULT_RELEASE_REPO
    artifact_name: str = DyngetSettings.DEFAULT_ARTIFACT_NAME
    version_symbol: str = DyngetSettings.DEFAULT_VERSION_SYMBOL
    build_command: Tuple[str, ...] = DyngetSettings.DEFAULT_BUILD_COMMAND
    compression_cutoff: str = DyngetSettings.COMPRESSION_CUTOFF
    fetch_timeout: Optional[float] = 60.0
    build_timeout: Optional[float] = 1800.0
    library_paths: List[str] = field(default_factory=list)
    origin_dir: Optional[str] = None

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "DyngetConfig":
        """
        Create a DyngetConfig from a dictionary.

        Raises:
            DyngetException: If a value is invalid
        """
        unknown = set(config_dict) - set(cls.__dataclass_fields__)
        if unknown:
            raise DyngetException(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        values = dict(config_dict)

        if "sources" in values:
            sources = values["sources"]
            if not isinstance(sources, (list, tuple)):
                raise DyngetException("'sources' must be a list")
            try:
                values["sources"] = [AcquisitionSource(str(s).lower()) for s in sources]
            except ValueError as e:
                raise DyngetException(f"Unsupported acquisition source: {e}") from e

        if "build_command" in values:
            command = values["build_command"]
            if isinstance(command, str):
                command = command.split()
            if not command:
                raise DyngetException("'build_command' must not be empty")
            values["build_command"] = tuple(command)

        if "library_paths" in values and not isinstance(values["library_paths"], list):
            raise DyngetException("'library_paths' must be a list")

        for timeout_key in ("fetch_timeout", "build_timeout"):
            timeout = values.get(timeout_key)
            if timeout is not None and (not isinstance(timeout, (int, float)) or timeout <= 0):
                raise DyngetException(f"'{timeout_key}' must be a positive number")

        if "compression_cutoff" in values and not VersionUtils.is_valid(values["compression_cutoff"]):
            raise DyngetException(f"Invalid compression cutoff: {values['compression_cutoff']}")

        for path_key in ("install_dir", "source_dir", "origin_dir"):
            if values.get(path_key) is not None:
                values[path_key] = str(pathlib.Path(values[path_key]).expanduser())

        return cls(**values)

    @classmethod
    def from_toml(cls, path: str) -> "DyngetConfig":
        """
        Load the [dynget] table of a TOML file.
        """
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise DyngetException(f"Could not read configuration {path}: {e}") from e
        return cls.from_dict(data.get("dynget", {}))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "install_dir": self.install_dir,
            "sources": [source.value for source in self.sources],
            "source_dir": self.source_dir,
            "release_host": self.release_host,
            "release_owner": self.release_owner,
            "release_repo": self.release_repo,
            "artifact_name": self.artifact_name,
            "version_symbol": self.version_symbol,
            "build_command": list(self.build_command),
            "compression_cutoff": self.compression_cutoff,
            "fetch_timeout": self.fetch_timeout,
            "build_timeout": self.build_timeout,
            "library_paths": list(self.library_paths),
            "origin_dir": self.origin_dir,
        }
