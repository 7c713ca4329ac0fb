"""
Default locations and constants shared by dynget components.
"""

import os
import pathlib


class DyngetSettings:
    """
    Provides the default install directory and the fixed names used on disk
    and on the release host.
    """

    VERSION_FILE_NAME = "DYN-VERSION"
    LOCAL_VERSION = "LOCAL"

    DEFAULT_ARTIFACT_NAME = "tsc-dyn"
    DEFAULT_VERSION_SYMBOL = "tsc_dyn_version"

    DEFAULT_RELEASE_HOST = "https://github.com"
    DEFAULT_RELEASE_OWNER = "emacs-tree-sitter"
    DEFAULT_RELEASE_REPO = "elisp-tree-sitter"

    # Releases up to and including this one were published gzip-compressed
    COMPRESSION_CUTOFF = "0.7.0"

    DEFAULT_BUILD_COMMAND = ("cargo", "build", "--release")
    BUILD_OUTPUT_DIR = ("target", "release")
    BUILD_INTERMEDIATE_DIR = "target"

    @staticmethod
    def get_default_install_directory() -> str:
        """
        Directory the artifact is installed into when the host does not
        configure one: alongside this library.
        """
        return str(pathlib.PurePath(os.path.abspath(os.path.dirname(__file__))))
