"""
Exceptions raised while acquiring and loading the native artifact.
"""

from typing import List, Optional


class DyngetException(Exception):
    """
    Base class for all dynget errors.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UnsupportedPlatformError(DyngetException):
    """The running platform has no known artifact convention."""

    def __init__(self, platform: str) -> None:
        self.platform = platform
        super().__init__(f"Unsupported platform: {platform}")


class FetchError(DyngetException):
    """
    Downloading or decompressing a prebuilt artifact failed.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class BuildError(DyngetException):
    """
    The external build command failed, timed out, or produced no artifact.
    """

    def __init__(self, message: str, returncode: Optional[int] = None) -> None:
        self.returncode = returncode
        super().__init__(message)


class LoadError(DyngetException):
    """
    The artifact could not be loaded from any candidate path.
    """

    def __init__(self, message: str, probed_paths: Optional[List[str]] = None) -> None:
        self.probed_paths = list(probed_paths or [])
        super().__init__(message)


class VersionMismatchWarning(UserWarning):
    """
    The resident module reports a different version than the one requested.

    A native module can be loaded only once per process, so the mismatch is
    resolved by restarting the process, not by raising.
    """

    def __init__(self, requested_version: str, loaded_version: Optional[str]) -> None:
        self.requested_version = requested_version
        self.loaded_version = loaded_version
        super().__init__(
            f"Version {requested_version} was requested, but {loaded_version} "
            f"is already loaded. Restart the process to load {requested_version}."
        )
