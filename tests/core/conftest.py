"""
Shared fixtures for core module tests.

This module provides reusable pytest fixtures for testing core functionality:
in-memory filesystems, project tree builders and discovery result factories.
"""

from pathlib import Path

import pytest

from core.cancellation import CancellationToken
from core.file_io import MockFileSystem
from core.models import DiscoveryResult, ManifestSource, VersionModule
from models import FileFormat


@pytest.fixture
def root():
    """Scan root used by in-memory project trees."""
    return Path("/repo")


@pytest.fixture
def mock_fs():
    """Empty in-memory filesystem with the scan root present."""
    fs = MockFileSystem()
    fs.add_dir("/repo")
    return fs


@pytest.fixture
def project_fs_factory():
    """Factory for in-memory project trees rooted at /repo."""

    def _factory(files: dict[str, str], dirs: tuple[str, ...] = ()) -> MockFileSystem:
        """
        Create a MockFileSystem from paths relative to /repo.

        Args:
            files: Mapping of relative path to content.
            dirs: Extra (empty) directories, relative to /repo.
        """
        fs = MockFileSystem({f"/repo/{p}": c for p, c in files.items()})
        fs.add_dir("/repo")
        for d in dirs:
            fs.add_dir(f"/repo/{d}")
        return fs

    return _factory


@pytest.fixture
def token():
    """A fresh cancellation token."""
    return CancellationToken()


@pytest.fixture
def cancelled_token():
    """A token that has already been cancelled."""
    t = CancellationToken()
    t.cancel()
    return t


@pytest.fixture
def module_factory():
    """Factory for VersionModule instances under /repo."""

    def _factory(rel_path: str = ".version", version: str = "1.0.0") -> VersionModule:
        path = Path("/repo") / rel_path
        directory = path.parent
        name = "root" if directory == Path("/repo") else directory.name
        return VersionModule(
            name=name,
            path=str(path),
            rel_path=rel_path,
            version=version,
            dir=str(directory),
        )

    return _factory


@pytest.fixture
def manifest_factory():
    """Factory for package.json ManifestSource instances under /repo."""

    def _factory(rel_path: str = "package.json", version: str = "1.0.0") -> ManifestSource:
        return ManifestSource(
            path=f"/repo/{rel_path}",
            rel_path=rel_path,
            filename=Path(rel_path).name,
            version=version,
            format=FileFormat.JSON,
            field="version",
            description="Node.js (package.json)",
        )

    return _factory


@pytest.fixture
def result_factory(module_factory, manifest_factory):
    """Factory for DiscoveryResult built from (rel_path, version) pairs."""

    def _factory(
        modules: list[tuple[str, str]] = (),  # type: ignore[assignment]
        manifests: list[tuple[str, str]] = (),  # type: ignore[assignment]
    ) -> DiscoveryResult:
        return DiscoveryResult(
            modules=[module_factory(p, v) for p, v in modules],
            manifests=[manifest_factory(p, v) for p, v in manifests],
        )

    return _factory
