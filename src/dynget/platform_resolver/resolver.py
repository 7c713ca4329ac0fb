"""
Maps the running platform to the artifact's naming conventions.
"""

import functools
import sys
from typing import Optional, Union

from dynget.artifact_models import ArtifactDescriptor, PlatformKind
from dynget.dynget_exceptions import UnsupportedPlatformError
from dynget.dynget_settings import DyngetSettings

PlatformLike = Union[str, PlatformKind]

# DOS-like systems have no shared library convention we can build for
_UNSUPPORTED_PLATFORMS = frozenset({"ms-dos", "msdos", "cygwin", "msys", "os2"})

_LINUX_LIKE_PREFIXES = ("linux", "freebsd", "openbsd", "netbsd", "dragonfly", "sunos", "aix")

_EXTENSIONS = {
    PlatformKind.WINDOWS: "dll",
    PlatformKind.MACOS: "dylib",
    PlatformKind.LINUX: "so",
    PlatformKind.OTHER: "so",
}


def platform_kind(platform: PlatformLike) -> PlatformKind:
    """
    Classify a sys.platform style identifier.

    Unrecognized platforms are assumed to be unix-like and map to OTHER.

    Raises:
        UnsupportedPlatformError: For DOS-like platforms
    """
    if isinstance(platform, PlatformKind):
        return platform

    name = platform.lower()
    if name in _UNSUPPORTED_PLATFORMS:
        raise UnsupportedPlatformError(platform)
    if name in ("win32", "windows", "windows-nt"):
        return PlatformKind.WINDOWS
    if name in ("darwin", "macos"):
        return PlatformKind.MACOS
    if name.startswith(_LINUX_LIKE_PREFIXES):
        return PlatformKind.LINUX
    return PlatformKind.OTHER


@functools.lru_cache(maxsize=1)
def current_platform_kind() -> PlatformKind:
    """The platform kind of this process, resolved once."""
    return platform_kind(sys.platform)


def extension_for(platform: PlatformLike) -> str:
    return _EXTENSIONS[platform_kind(platform)]


def artifact_filename(
    platform: PlatformLike, artifact_name: str = DyngetSettings.DEFAULT_ARTIFACT_NAME
) -> str:
    return f"{artifact_name}.{extension_for(platform)}"


def build_output_filename(
    platform: PlatformLike, artifact_name: str = DyngetSettings.DEFAULT_ARTIFACT_NAME
) -> str:
    """
    Name of the file the build tool produces. Cargo replaces "-" with "_" in
    library names and adds a "lib" prefix everywhere except Windows.
    """
    kind = platform_kind(platform)
    crate_name = artifact_name.replace("-", "_")
    if kind == PlatformKind.WINDOWS:
        return f"{crate_name}.{extension_for(kind)}"
    return f"lib{crate_name}.{extension_for(kind)}"


class PlatformResolver:
    """
    Artifact naming for one platform, by default the running one.
    """

    def __init__(
        self,
        artifact_name: str = DyngetSettings.DEFAULT_ARTIFACT_NAME,
        platform: Optional[PlatformLike] = None,
    ):
        self.artifact_name = artifact_name
        self.platform = (
            current_platform_kind() if platform is None else platform_kind(platform)
        )

    @property
    def extension(self) -> str:
        return extension_for(self.platform)

    @property
    def artifact_filename(self) -> str:
        return artifact_filename(self.platform, self.artifact_name)

    @property
    def build_output_filename(self) -> str:
        return build_output_filename(self.platform, self.artifact_name)

    def descriptor(self) -> ArtifactDescriptor:
        return ArtifactDescriptor(
            platform=self.platform,
            extension=self.extension,
            filename=self.artifact_filename,
            build_output_filename=self.build_output_filename,
        )

    def needs_search_path_probe(self) -> bool:
        """
        True where loading by name cannot be relied on to find the artifact,
        so candidate directories must be probed one by one.
        """
        return self.platform == PlatformKind.MACOS
