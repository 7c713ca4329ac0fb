"""
Top-level "ensure version V is loaded" operation.

Ties together the version store, the fetcher, the builder and the loader:

    read marker -> acquire if missing or older -> load -> reacquire and reload
    once if the load failed -> warn if the resident module reports another version
"""

import logging
import warnings
from typing import List, Optional

from dynget.artifact_builder import ArtifactBuilder
from dynget.artifact_fetcher import ArtifactFetcher
from dynget.artifact_loader import ArtifactLoader
from dynget.artifact_models import AcquisitionState, EnsureResult
from dynget.dynget_config import AcquisitionSource, DyngetConfig
from dynget.dynget_exceptions import (
    BuildError,
    DyngetException,
    FetchError,
    LoadError,
    VersionMismatchWarning,
)
from dynget.dynget_logger import DyngetLogger
from dynget.dynget_utils import VersionUtils
from dynget.platform_resolver import PlatformResolver
from dynget.version_store import VersionStore


class AcquisitionOrchestrator:
    """
    Drives the artifact from NO_ARTIFACT/STALE/CURRENT to LOADED or LOAD_FAILED.

    Components default to the ones described by the config and may be
    replaced individually, e.g. to use a different HTTP session or loader.
    """

    def __init__(
        self,
        config: DyngetConfig,
        logger: Optional[DyngetLogger] = None,
        version_store: Optional[VersionStore] = None,
        fetcher: Optional[ArtifactFetcher] = None,
        builder: Optional[ArtifactBuilder] = None,
        loader: Optional[ArtifactLoader] = None,
        resolver: Optional[PlatformResolver] = None,
    ):
        self.config = config
        self.logger = logger or DyngetLogger()
        self.resolver = resolver or PlatformResolver(config.artifact_name)
        self.version_store = version_store or VersionStore(config.install_dir, self.logger)
        self.fetcher = fetcher or ArtifactFetcher(
            config, self.logger, self.resolver, version_store=self.version_store
        )
        self.builder = builder or ArtifactBuilder(config, self.logger, self.resolver)
        self.loader = loader or ArtifactLoader(config, self.logger, self.resolver)
        self.descriptor = self.resolver.descriptor()
        self.state: Optional[AcquisitionState] = None

    def classify(self, recorded_version: Optional[str], requested_version: str) -> AcquisitionState:
        """
        Compare the recorded marker with the requested version.
        """
        if recorded_version is None:
            return AcquisitionState.NO_ARTIFACT
        if self.version_store.is_local(recorded_version):
            return AcquisitionState.CURRENT
        try:
            if VersionUtils.compare(recorded_version, requested_version) < 0:
                return AcquisitionState.STALE
        except ValueError:
            self.logger.log(
                f"Ignoring unparsable version marker {recorded_version!r}", logging.WARNING
            )
            return AcquisitionState.STALE
        return AcquisitionState.CURRENT

    def search_paths(self) -> List[str]:
        return [self.config.install_dir, *self.config.library_paths]

    def acquire(self, version: str) -> str:
        """
        Obtain version from the configured sources, in order, stopping at the
        first one that succeeds.

        Returns:
            The value of the source that produced the artifact

        Raises:
            FetchError, BuildError: The error of the last source tried, if all failed
            DyngetException: If no usable source is configured
        """
        errors: List[DyngetException] = []
        for source in self.config.sources:
            try:
                if source == AcquisitionSource.REMOTE:
                    self.fetcher.download(version, self.config.install_dir)
                elif source == AcquisitionSource.COMPILATION:
                    if not self.config.source_dir:
                        self.logger.log(
                            "Skipping compilation: no source directory configured",
                            logging.DEBUG,
                        )
                        continue
                    self.builder.build(self.config.source_dir, self.config.install_dir)
                return source.value
            except (FetchError, BuildError) as e:
                self.logger.log(f"Could not get {version} via {source.value}: {e}", logging.ERROR)
                errors.append(e)

        if errors:
            raise errors[-1]
        raise DyngetException(f"No acquisition source is available to get version {version}")

    def ensure(self, requested_version: str) -> EnsureResult:
        """
        Make sure the artifact is loaded, acquiring requested_version first if
        the installed one is missing or older.

        Returns:
            EnsureResult describing what happened. A version mismatch is reported
            through VersionMismatchWarning and the result, not raised.

        Raises:
            LoadError: If the artifact cannot be loaded even after reacquiring it
            FetchError, BuildError: If acquisition of a missing or stale artifact failed
        """
        if not VersionUtils.is_valid(requested_version):
            raise DyngetException(f"Invalid requested version: {requested_version!r}")

        recorded_version = self.version_store.read()
        self.state = self.classify(recorded_version, requested_version)
        self.logger.log(
            f"{self.descriptor.filename} ({self.descriptor.platform.value}): requested "
            f"{requested_version}, recorded {recorded_version}: {self.state.value}",
            logging.DEBUG,
        )

        acquired_from = None
        if self.version_store.is_local(recorded_version):
            self.logger.log("Version marker is LOCAL, not acquiring", logging.INFO)
        elif self.loader.is_loaded():
            # The resident file cannot be replaced (and is locked on Windows)
            self.logger.log("Module already loaded, not acquiring", logging.DEBUG)
        elif self.state != AcquisitionState.CURRENT:
            acquired_from = self._acquire_or_fail(requested_version)

        try:
            self.loader.ensure_loaded(self.search_paths())
        except LoadError as e:
            if self.version_store.is_local(recorded_version):
                self.state = AcquisitionState.LOAD_FAILED
                raise
            self.logger.log(
                f"{e}. The version marker may be stale, getting {requested_version} again",
                logging.WARNING,
            )
            acquired_from = self._reacquire(requested_version, e)
            try:
                self.loader.ensure_loaded(self.search_paths())
            except LoadError:
                self.state = AcquisitionState.LOAD_FAILED
                raise

        self.state = AcquisitionState.LOADED
        loaded_version = self.loader.resident_version()
        warning = None
        if loaded_version != requested_version:
            mismatch = VersionMismatchWarning(requested_version, loaded_version)
            warning = str(mismatch)
            self.logger.log(warning, logging.WARNING)
            warnings.warn(mismatch, stacklevel=2)

        return EnsureResult(
            requested_version=requested_version,
            recorded_version=recorded_version,
            loaded_version=loaded_version,
            state=self.state,
            acquired_from=acquired_from,
            warning=warning,
        )

    def _acquire_or_fail(self, version: str) -> str:
        try:
            return self.acquire(version)
        except DyngetException:
            self.state = AcquisitionState.LOAD_FAILED
            raise

    def _reacquire(self, version: str, load_error: LoadError) -> str:
        try:
            return self.acquire(version)
        except DyngetException as e:
            self.state = AcquisitionState.LOAD_FAILED
            raise LoadError(
                f"{load_error.message}; getting {version} again failed: {e}",
                probed_paths=load_error.probed_paths,
            ) from e
