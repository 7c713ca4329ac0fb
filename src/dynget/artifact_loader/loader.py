"""
Loads the artifact into the running process.

A native library can be mapped into a process only once, so a process-wide
latch records the first successful load and every later call returns early
without touching the filesystem.
"""

import ctypes
import logging
import os
from typing import Any, List, Optional, Sequence

from dynget.dynget_config import DyngetConfig
from dynget.dynget_exceptions import LoadError
from dynget.dynget_logger import DyngetLogger
from dynget.dynget_settings import DyngetSettings
from dynget.platform_resolver import PlatformResolver


class LoadPrimitive:
    """
    Loads a native library from a path and queries its version.

    load() raises OSError when the file is missing or cannot be opened.
    """

    def load(self, path: str) -> Any:
        raise NotImplementedError

    def version(self, handle: Any) -> Optional[str]:
        raise NotImplementedError


class CtypesLoadPrimitive(LoadPrimitive):
    """
    Loads the library with ctypes and reads its version from an exported
    `const char *<symbol>(void)` function.
    """

    def __init__(self, version_symbol: str = DyngetSettings.DEFAULT_VERSION_SYMBOL):
        self.version_symbol = version_symbol

    def load(self, path: str) -> ctypes.CDLL:
        return ctypes.CDLL(path)

    def version(self, handle: ctypes.CDLL) -> Optional[str]:
        try:
            version_func = getattr(handle, self.version_symbol)
        except AttributeError:
            return None
        version_func.argtypes = []
        version_func.restype = ctypes.c_char_p
        raw = version_func()
        return raw.decode("utf-8") if raw else None


class LoadedModuleLatch:
    """
    One-shot record of the loaded artifact. Once set it is never cleared.
    """

    def __init__(self) -> None:
        self._is_set = False
        self._handle: Any = None
        self._path: Optional[str] = None

    @property
    def is_set(self) -> bool:
        return self._is_set

    @property
    def handle(self) -> Any:
        return self._handle

    @property
    def path(self) -> Optional[str]:
        return self._path

    def set(self, handle: Any, path: str) -> None:
        if self._is_set:
            return
        self._handle = handle
        self._path = path
        self._is_set = True


PROCESS_LATCH = LoadedModuleLatch()


class LoadStrategy:
    """Produces the ordered candidate paths to probe."""

    def candidates(self, search_paths: Sequence[str]) -> List[str]:
        raise NotImplementedError


class DirectLoadStrategy(LoadStrategy):
    """
    Loads the canonical artifact from the install directory and nowhere else.
    """

    def __init__(self, filename: str, install_dir: str):
        self.filename = filename
        self.install_dir = install_dir

    def candidates(self, search_paths: Sequence[str]) -> List[str]:
        return [os.path.join(self.install_dir, self.filename)]


class SearchPathStrategy(LoadStrategy):
    """
    Probes the origin directory, then the working directory, then each
    search path in order.
    """

    def __init__(self, filename: str, origin_dir: Optional[str] = None, include_cwd: bool = True):
        self.filename = filename
        self.origin_dir = origin_dir
        self.include_cwd = include_cwd

    def candidates(self, search_paths: Sequence[str]) -> List[str]:
        directories: List[str] = []
        if self.origin_dir:
            directories.append(self.origin_dir)
        if self.include_cwd:
            directories.append(os.getcwd())
        directories.extend(search_paths)

        seen = set()
        candidates = []
        for directory in directories:
            candidate = os.path.join(os.path.abspath(directory), self.filename)
            if candidate not in seen:
                seen.add(candidate)
                candidates.append(candidate)
        return candidates


class ArtifactLoader:
    """
    Loads the artifact once per process, choosing how to search for it from
    the platform.
    """

    def __init__(
        self,
        config: DyngetConfig,
        logger: DyngetLogger,
        resolver: Optional[PlatformResolver] = None,
        primitive: Optional[LoadPrimitive] = None,
        latch: Optional[LoadedModuleLatch] = None,
        strategy: Optional[LoadStrategy] = None,
    ):
        self.config = config
        self.logger = logger
        self.resolver = resolver or PlatformResolver(config.artifact_name)
        self.primitive = primitive or CtypesLoadPrimitive(config.version_symbol)
        self.latch = PROCESS_LATCH if latch is None else latch
        self.strategy = strategy or self._select_strategy()

    def _select_strategy(self) -> LoadStrategy:
        filename = self.resolver.artifact_filename
        if self.resolver.needs_search_path_probe():
            origin_dir = self.config.origin_dir or DyngetSettings.get_default_install_directory()
            return SearchPathStrategy(filename, origin_dir)
        return DirectLoadStrategy(filename, self.config.install_dir)

    def is_loaded(self) -> bool:
        return self.latch.is_set

    def ensure_loaded(self, search_paths: Sequence[str] = ()) -> None:
        """
        Make the artifact resident, probing candidates until one loads.

        Raises:
            LoadError: If no candidate could be loaded
        """
        if self.latch.is_set:
            return

        probed: List[str] = []
        last_error: Optional[OSError] = None
        for candidate in self.strategy.candidates(search_paths):
            probed.append(candidate)
            self.logger.log(f"Trying to load {candidate}", logging.DEBUG)
            try:
                handle = self.primitive.load(candidate)
            except OSError as e:
                last_error = e
                continue
            self.latch.set(handle, candidate)
            self.logger.log(f"Loaded {candidate}", logging.INFO)
            return

        message = f"Could not load {self.resolver.artifact_filename} from: {', '.join(probed)}"
        if last_error is not None:
            message += f" (last error: {last_error})"
        raise LoadError(message, probed_paths=probed)

    def resident_version(self) -> Optional[str]:
        """Version reported by the loaded module, or None if nothing is loaded."""
        if not self.latch.is_set:
            return None
        return self.primitive.version(self.latch.handle)
