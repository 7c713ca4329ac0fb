"""
Prebuilt artifact fetcher.

Downloads a released artifact for the running platform, decompresses it if
the release predates uncompressed uploads, and records its version.
"""

import logging
import os
import zlib
from typing import Optional

import requests

from dynget.dynget_config import DyngetConfig
from dynget.dynget_exceptions import FetchError
from dynget.dynget_logger import DyngetLogger
from dynget.dynget_utils import FileUtils, VersionUtils
from dynget.platform_resolver import PlatformResolver
from dynget.version_store import VersionStore


class ArtifactFetcher:
    """
    Downloads a specific version of the artifact from the release host.
    """

    def __init__(
        self,
        config: DyngetConfig,
        logger: DyngetLogger,
        resolver: Optional[PlatformResolver] = None,
        session: Optional[requests.Session] = None,
        version_store: Optional[VersionStore] = None,
    ):
        """
        Args:
            config: Release host location, compression cutoff and fetch timeout
            logger: Logger for progress and error messages
            resolver: Platform naming, defaults to the running platform
            session: HTTP session, created lazily when not given
            version_store: Marker written after a download, defaults to the
                DYN-VERSION file of the target directory
        """
        self.config = config
        self.logger = logger
        self.resolver = resolver or PlatformResolver(config.artifact_name)
        self._session = session
        self.version_store = version_store

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def is_compressed(self, version: str) -> bool:
        """
        Releases at or below the compression cutoff were uploaded gzip-compressed.
        """
        try:
            return VersionUtils.compare(version, self.config.compression_cutoff) <= 0
        except ValueError as e:
            raise FetchError(f"Cannot download invalid version {version!r}: {e}") from e

    def url_for(self, version: str) -> str:
        filename = self.resolver.artifact_filename
        if self.is_compressed(version):
            filename += ".gz"
        return "/".join(
            [
                self.config.release_host.rstrip("/"),
                self.config.release_owner,
                self.config.release_repo,
                "releases",
                "download",
                version,
                filename,
            ]
        )

    def download(self, version: str, target_dir: str) -> None:
        """
        Download version into target_dir, replacing any artifact there, then
        record version in the directory's marker file.

        Raises:
            FetchError: On network failure, non-200 response or bad archive
        """
        url = self.url_for(version)
        compressed = self.is_compressed(version)

        os.makedirs(target_dir, exist_ok=True)
        target_path = os.path.join(target_dir, self.resolver.artifact_filename)
        download_path = target_path + (".gz" if compressed else ".download")

        self.logger.log(f"Downloading {url}", logging.INFO)
        try:
            FileUtils.download_file(
                self.logger, self.session, url, download_path, self.config.fetch_timeout
            )
        except FetchError:
            FileUtils.remove(download_path, self.logger)
            raise
        except OSError as e:
            FileUtils.remove(download_path, self.logger)
            raise FetchError(f"Could not write {download_path}: {e}", url=url) from e

        if compressed:
            self._decompress(download_path, target_path, url)
        else:
            self._replace(download_path, target_path, url)

        version_store = self.version_store or VersionStore(target_dir, self.logger)
        version_store.write(version)
        self.logger.log(
            f"Installed {self.resolver.artifact_filename} {version} into {target_dir}",
            logging.INFO,
        )

    def _decompress(self, gz_path: str, target_path: str, url: str) -> None:
        extracted_path = target_path + ".extracted"
        try:
            FileUtils.gunzip_file(gz_path, extracted_path)
        except (OSError, EOFError, zlib.error) as e:
            FileUtils.remove(extracted_path, self.logger)
            FileUtils.remove(gz_path, self.logger)
            raise FetchError(f"Could not decompress {gz_path}: {e}", url=url) from e

        self._replace(extracted_path, target_path, url)
        FileUtils.remove(gz_path, self.logger)

    def _replace(self, source_path: str, target_path: str, url: str) -> None:
        # Fails on Windows while the existing file is mapped into a process
        try:
            os.replace(source_path, target_path)
        except OSError as e:
            FileUtils.remove(source_path, self.logger)
            raise FetchError(f"Could not replace {target_path}: {e}", url=url) from e
