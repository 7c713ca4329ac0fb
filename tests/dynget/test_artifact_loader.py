"""
Tests for the loader's search order and load-once behaviour.
"""

import os

import pytest

from dynget.artifact_loader import (
    ArtifactLoader,
    CtypesLoadPrimitive,
    DirectLoadStrategy,
    LoadedModuleLatch,
    SearchPathStrategy,
)
from dynget.dynget_config import DyngetConfig
from dynget.dynget_exceptions import LoadError
from dynget.dynget_logger import DyngetLogger
from dynget.platform_resolver import PlatformResolver
from tests.test_utils import FileBackedLoadPrimitive


def make_loader(tmp_path, platform="linux", strategy=None, **config):
    primitive = FileBackedLoadPrimitive()
    latch = LoadedModuleLatch()
    loader = ArtifactLoader(
        DyngetConfig(install_dir=str(tmp_path / "install"), **config),
        DyngetLogger(),
        PlatformResolver(platform=platform),
        primitive=primitive,
        latch=latch,
        strategy=strategy,
    )
    return loader, primitive, latch


def place_artifact(directory, version="0.8.0", filename="tsc-dyn.so"):
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(str(directory), filename)
    with open(path, "w", encoding="utf-8") as f:
        f.write(version)
    return path


class TestLatch:
    def test_set_once(self):
        latch = LoadedModuleLatch()
        assert not latch.is_set

        latch.set("first", "/a/tsc-dyn.so")
        latch.set("second", "/b/tsc-dyn.so")

        assert latch.is_set
        assert latch.handle == "first"
        assert latch.path == "/a/tsc-dyn.so"


class TestIdempotency:
    """Once loaded, nothing is probed again."""

    @pytest.mark.parametrize("search_paths", [[], ["/does/not/exist", ""]])
    def test_loaded_latch_skips_probes(self, tmp_path, search_paths):
        loader, primitive, latch = make_loader(tmp_path, platform="darwin")
        latch.set("handle", "/somewhere/tsc-dyn.dylib")

        loader.ensure_loaded(search_paths)

        assert primitive.probes == []
        assert loader.is_loaded()

    def test_second_call_does_not_probe(self, tmp_path):
        loader, primitive, _ = make_loader(tmp_path)
        place_artifact(tmp_path / "install")

        loader.ensure_loaded()
        loader.ensure_loaded()

        assert primitive.probes == [str(tmp_path / "install" / "tsc-dyn.so")]


class TestDirectLoad:
    def test_loads_from_install_dir(self, tmp_path):
        loader, primitive, latch = make_loader(tmp_path)
        path = place_artifact(tmp_path / "install")

        loader.ensure_loaded([str(tmp_path / "ignored")])

        assert primitive.probes == [path]
        assert latch.path == path
        assert loader.resident_version() == "0.8.0"

    def test_search_paths_are_unused(self, tmp_path):
        loader, primitive, _ = make_loader(tmp_path)
        place_artifact(tmp_path / "elsewhere")

        with pytest.raises(LoadError) as exc_info:
            loader.ensure_loaded([str(tmp_path / "elsewhere")])

        assert primitive.probes == [str(tmp_path / "install" / "tsc-dyn.so")]
        assert exc_info.value.probed_paths == primitive.probes
        assert "No such file" in exc_info.value.message

    def test_windows_uses_direct_load(self, tmp_path):
        loader, _, _ = make_loader(tmp_path, platform="win32")
        assert isinstance(loader.strategy, DirectLoadStrategy)
        assert loader.strategy.filename == "tsc-dyn.dll"


class TestSearchPathLoad:
    """macOS probes origin, working directory, then each search path."""

    def test_macos_uses_search_path_strategy(self, tmp_path):
        loader, _, _ = make_loader(tmp_path, platform="darwin", origin_dir=str(tmp_path / "origin"))
        assert isinstance(loader.strategy, SearchPathStrategy)
        assert loader.strategy.origin_dir == str(tmp_path / "origin")

    def test_search_order_stops_at_first_success(self, tmp_path):
        a, b, c = (tmp_path / name for name in ("a", "b", "c"))
        place_artifact(c, filename="tsc-dyn.dylib")
        strategy = SearchPathStrategy("tsc-dyn.dylib", origin_dir=None, include_cwd=False)
        loader, primitive, latch = make_loader(tmp_path, platform="darwin", strategy=strategy)

        loader.ensure_loaded([str(a), str(b), str(c)])

        assert primitive.probes == [
            str(a / "tsc-dyn.dylib"),
            str(b / "tsc-dyn.dylib"),
            str(c / "tsc-dyn.dylib"),
        ]
        assert latch.path == str(c / "tsc-dyn.dylib")

    def test_origin_then_cwd_then_search_paths(self, tmp_path, monkeypatch):
        origin, cwd, a = tmp_path / "origin", tmp_path / "cwd", tmp_path / "a"
        cwd.mkdir()
        monkeypatch.chdir(cwd)
        loader, primitive, _ = make_loader(tmp_path, platform="darwin", origin_dir=str(origin))

        with pytest.raises(LoadError):
            loader.ensure_loaded([str(a)])

        assert primitive.probes == [
            str(origin / "tsc-dyn.dylib"),
            str(cwd / "tsc-dyn.dylib"),
            str(a / "tsc-dyn.dylib"),
        ]

    def test_origin_wins_over_search_paths(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        origin = tmp_path / "origin"
        place_artifact(origin, version="0.9.0", filename="tsc-dyn.dylib")
        place_artifact(tmp_path / "a", version="0.8.0", filename="tsc-dyn.dylib")
        loader, primitive, _ = make_loader(tmp_path, platform="darwin", origin_dir=str(origin))

        loader.ensure_loaded([str(tmp_path / "a")])

        assert len(primitive.probes) == 1
        assert loader.resident_version() == "0.9.0"

    def test_duplicate_directories_are_probed_once(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        strategy = SearchPathStrategy("tsc-dyn.dylib", origin_dir=str(tmp_path))

        assert strategy.candidates([str(tmp_path), "."]) == [str(tmp_path / "tsc-dyn.dylib")]

    def test_exhausted_search(self, tmp_path):
        strategy = SearchPathStrategy("tsc-dyn.dylib", include_cwd=False)
        loader, primitive, latch = make_loader(tmp_path, platform="darwin", strategy=strategy)

        with pytest.raises(LoadError) as exc_info:
            loader.ensure_loaded([str(tmp_path / "x"), str(tmp_path / "y")])

        assert exc_info.value.probed_paths == primitive.probes
        assert len(primitive.probes) == 2
        assert not latch.is_set


class TestCtypesLoadPrimitive:
    def test_missing_library_raises_oserror(self, tmp_path):
        with pytest.raises(OSError):
            CtypesLoadPrimitive().load(str(tmp_path / "tsc-dyn.so"))

    def test_missing_version_symbol(self):
        class Handle:
            pass

        assert CtypesLoadPrimitive("tsc_dyn_version").version(Handle()) is None

    def test_resident_version_before_load(self, tmp_path):
        loader, _, _ = make_loader(tmp_path)
        assert loader.resident_version() is None
