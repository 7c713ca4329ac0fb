"""
File, network and version helpers shared by dynget components.
"""

import gzip
import logging
import os
import re
import shutil
import tempfile
from typing import Optional, Tuple

import requests

from dynget.dynget_exceptions import FetchError
from dynget.dynget_logger import DyngetLogger


class FileUtils:
    """
    Utility functions for downloading and moving files around.
    """

    CHUNK_SIZE = 64 * 1024

    @staticmethod
    def download_file(
        logger: DyngetLogger,
        session: requests.Session,
        url: str,
        target_path: str,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Stream the body of a GET request for url into target_path.

        Raises FetchError on connection failure, timeout, or any status other
        than 200.
        """
        logger.log(f"Downloading {url} to {target_path}", logging.DEBUG)
        try:
            response = session.get(url, stream=True, timeout=timeout)
        except requests.exceptions.Timeout as e:
            raise FetchError(f"Timed out downloading {url}: {e}", url=url) from e
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Error downloading {url}: {e}", url=url) from e

        try:
            if response.status_code != 200:
                raise FetchError(
                    f"Error downloading {url}: HTTP status {response.status_code}",
                    url=url,
                    status_code=response.status_code,
                )
            with open(target_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=FileUtils.CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Error downloading {url}: {e}", url=url) from e
        finally:
            response.close()

    @staticmethod
    def gunzip_file(source_path: str, target_path: str) -> None:
        """
        Decompress a gzip file. Raises OSError or EOFError on corrupt input.
        """
        with gzip.open(source_path, "rb") as src, open(target_path, "wb") as dst:
            shutil.copyfileobj(src, dst)

    @staticmethod
    def write_text_atomic(path: str, text: str) -> None:
        """
        Replace the content of path so that readers observe either the old or
        the new content.
        """
        directory = os.path.dirname(os.path.abspath(path))
        fd, tmp_path = tempfile.mkstemp(prefix=".tmp-", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_path, path)
        except BaseException:
            FileUtils.remove(tmp_path)
            raise

    @staticmethod
    def remove(path: str, logger: Optional[DyngetLogger] = None) -> bool:
        """
        Best-effort removal of a file or directory tree.

        Returns True if nothing is left at path. Failures are logged, never raised.
        """
        try:
            if os.path.isdir(path) and not os.path.islink(path):
                shutil.rmtree(path)
            elif os.path.lexists(path):
                os.remove(path)
            return True
        except OSError as e:
            if logger is not None:
                logger.log(f"Could not remove {path}: {e}", logging.WARNING)
            return False


class VersionUtils:
    """
    Ordering of release version strings such as "0.7.0" or "v0.12.0-rc.1".
    """

    _VERSION_RE = re.compile(
        r"^v?(?P<release>\d+(?:\.\d+)*)"
        r"(?:[-.]?(?P<pre>alpha|beta|pre|rc|snapshot)(?:[-.]?(?P<pre_num>\d+))?)?$",
        re.IGNORECASE,
    )

    # A release sorts after every pre-release of the same number
    _PRE_RANK = {"snapshot": -4, "alpha": -3, "beta": -2, "pre": -1, "rc": -1}

    @staticmethod
    def parse(version: str) -> Tuple[Tuple[int, ...], Tuple[int, int]]:
        """
        Parse a version string into a sortable key.

        Raises ValueError if the string is not a version.
        """
        match = VersionUtils._VERSION_RE.match(version.strip())
        if match is None:
            raise ValueError(f"Invalid version string: {version!r}")

        release = [int(part) for part in match.group("release").split(".")]
        while len(release) > 1 and release[-1] == 0:
            release.pop()

        pre = match.group("pre")
        if pre is None:
            return tuple(release), (0, 0)
        pre_num = int(match.group("pre_num") or 0)
        return tuple(release), (VersionUtils._PRE_RANK[pre.lower()], pre_num)

    @staticmethod
    def compare(left: str, right: str) -> int:
        """Return -1, 0 or 1 as left is older than, equal to, or newer than right."""
        left_key = VersionUtils.parse(left)
        right_key = VersionUtils.parse(right)
        return (left_key > right_key) - (left_key < right_key)

    @staticmethod
    def is_valid(version: str) -> bool:
        try:
            VersionUtils.parse(version)
        except ValueError:
            return False
        return True
