"""
Tests for downloading prebuilt artifacts.
"""

import os

import pytest
import requests

from dynget.artifact_fetcher import ArtifactFetcher
from dynget.dynget_config import DyngetConfig
from dynget.dynget_exceptions import FetchError
from dynget.dynget_logger import DyngetLogger
from dynget.platform_resolver import PlatformResolver
from dynget.version_store import VersionStore
from tests.test_utils import RELEASES, FakeSession


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def fetcher(tmp_path, session):
    config = DyngetConfig(install_dir=str(tmp_path), fetch_timeout=12.5)
    return ArtifactFetcher(
        config, DyngetLogger(), PlatformResolver(platform="linux"), session=session
    )


def read(path):
    with open(path, encoding="utf-8") as f:
        return f.read()


class TestDownloadUrl:
    """The compression cutoff decides the download filename."""

    @pytest.mark.parametrize(
        "version, compressed",
        [("0.6.9", True), ("0.7.0", True), ("0.7.1", False), ("0.8.0", False), ("0.10.0", False)],
    )
    def test_compression_cutoff(self, fetcher, version, compressed):
        assert fetcher.is_compressed(version) is compressed

    def test_url_at_cutoff_is_gzipped(self, fetcher):
        assert fetcher.url_for("0.7.0") == f"{RELEASES}/0.7.0/tsc-dyn.so.gz"

    def test_url_below_cutoff_is_gzipped(self, fetcher):
        assert fetcher.url_for("0.6.9") == f"{RELEASES}/0.6.9/tsc-dyn.so.gz"

    def test_url_above_cutoff_is_plain(self, fetcher):
        assert fetcher.url_for("0.7.1") == f"{RELEASES}/0.7.1/tsc-dyn.so"

    def test_url_uses_platform_filename(self, tmp_path, session):
        fetcher = ArtifactFetcher(
            DyngetConfig(install_dir=str(tmp_path)),
            DyngetLogger(),
            PlatformResolver(platform="win32"),
            session=session,
        )
        assert fetcher.url_for("0.18.0") == f"{RELEASES}/0.18.0/tsc-dyn.dll"

    def test_custom_release_location(self, tmp_path, session):
        config = DyngetConfig(
            install_dir=str(tmp_path),
            release_host="https://example.com/",
            release_owner="me",
            release_repo="mirror",
        )
        fetcher = ArtifactFetcher(
            config, DyngetLogger(), PlatformResolver(platform="linux"), session=session
        )
        assert (
            fetcher.url_for("1.0.0")
            == "https://example.com/me/mirror/releases/download/1.0.0/tsc-dyn.so"
        )

    def test_invalid_version(self, fetcher):
        with pytest.raises(FetchError):
            fetcher.url_for("LOCAL")


class TestDownload:
    def test_uncompressed_download(self, fetcher, session, tmp_path):
        session.serve_release("0.8.0")

        fetcher.download("0.8.0", str(tmp_path))

        assert session.requests == [f"{RELEASES}/0.8.0/tsc-dyn.so"]
        assert session.timeouts == [12.5]
        assert read(tmp_path / "tsc-dyn.so") == "0.8.0"
        assert VersionStore(str(tmp_path)).read() == "0.8.0"
        assert sorted(os.listdir(tmp_path)) == ["DYN-VERSION", "tsc-dyn.so"]

    def test_compressed_download_is_decompressed(self, fetcher, session, tmp_path):
        session.serve_release("0.7.0", compressed=True)

        fetcher.download("0.7.0", str(tmp_path))

        assert session.requests == [f"{RELEASES}/0.7.0/tsc-dyn.so.gz"]
        assert read(tmp_path / "tsc-dyn.so") == "0.7.0"
        assert not (tmp_path / "tsc-dyn.so.gz").exists()
        assert VersionStore(str(tmp_path)).read() == "0.7.0"

    def test_existing_artifact_is_overwritten(self, fetcher, session, tmp_path):
        (tmp_path / "tsc-dyn.so").write_text("0.6.0")
        VersionStore(str(tmp_path)).write("0.6.0")
        session.serve_release("0.9.0")

        fetcher.download("0.9.0", str(tmp_path))

        assert read(tmp_path / "tsc-dyn.so") == "0.9.0"
        assert VersionStore(str(tmp_path)).read() == "0.9.0"

    def test_writes_given_version_store(self, session, tmp_path):
        store = VersionStore(str(tmp_path), filename="MARKER")
        fetcher = ArtifactFetcher(
            DyngetConfig(install_dir=str(tmp_path)),
            DyngetLogger(),
            PlatformResolver(platform="linux"),
            session=session,
            version_store=store,
        )
        session.serve_release("0.8.0")

        fetcher.download("0.8.0", str(tmp_path))

        assert store.read() == "0.8.0"
        assert sorted(os.listdir(tmp_path)) == ["MARKER", "tsc-dyn.so"]

    def test_creates_target_directory(self, fetcher, session, tmp_path):
        session.serve_release("0.8.0")
        target = tmp_path / "a" / "b"

        fetcher.download("0.8.0", str(target))

        assert read(target / "tsc-dyn.so") == "0.8.0"


class TestDownloadFailures:
    """Failures raise FetchError and leave the previous installation alone."""

    @pytest.fixture
    def installed(self, tmp_path):
        (tmp_path / "tsc-dyn.so").write_text("0.6.0")
        VersionStore(str(tmp_path)).write("0.6.0")
        return tmp_path

    def assert_untouched(self, directory):
        assert read(directory / "tsc-dyn.so") == "0.6.0"
        assert VersionStore(str(directory)).read() == "0.6.0"
        assert sorted(os.listdir(directory)) == ["DYN-VERSION", "tsc-dyn.so"]

    def test_not_found(self, fetcher, installed):
        with pytest.raises(FetchError) as exc_info:
            fetcher.download("0.8.0", str(installed))

        assert exc_info.value.status_code == 404
        assert exc_info.value.url == f"{RELEASES}/0.8.0/tsc-dyn.so"
        self.assert_untouched(installed)

    def test_server_error(self, fetcher, session, installed):
        session.serve(f"{RELEASES}/0.8.0/tsc-dyn.so", b"oops", status_code=500)

        with pytest.raises(FetchError) as exc_info:
            fetcher.download("0.8.0", str(installed))

        assert exc_info.value.status_code == 500
        self.assert_untouched(installed)

    def test_connection_error(self, fetcher, session, installed):
        session.error = requests.exceptions.ConnectionError("unreachable")

        with pytest.raises(FetchError, match="unreachable"):
            fetcher.download("0.8.0", str(installed))

        self.assert_untouched(installed)

    def test_timeout(self, fetcher, session, installed):
        session.error = requests.exceptions.ReadTimeout("too slow")

        with pytest.raises(FetchError, match="Timed out"):
            fetcher.download("0.8.0", str(installed))

        self.assert_untouched(installed)

    def test_corrupt_archive(self, fetcher, session, installed):
        session.serve(f"{RELEASES}/0.7.0/tsc-dyn.so.gz", b"not gzip at all")

        with pytest.raises(FetchError, match="decompress"):
            fetcher.download("0.7.0", str(installed))

        self.assert_untouched(installed)

    def test_no_retry(self, fetcher, session, installed):
        with pytest.raises(FetchError):
            fetcher.download("0.8.0", str(installed))

        assert len(session.requests) == 1
