"""
Comprehensive tests for the file_io module using pytest.

Tests cover:
- OSFileSystem: stat, read, write (permissions, truncation), directory listing
- OSFileSystem: error mapping onto storage exceptions
- MockFileSystem: implicit directories, call tracking, injected failures
- Cancellation checks on every operation
"""

import os
import stat
from pathlib import Path

import pytest

from core.exceptions import (
    DirectoryReadError,
    DiscoveryCancelledError,
    FileNotFoundInStorageError,
    FileReadError,
    FileWriteError,
)
from core.file_io import DirEntry, FileStat, MockFileSystem, OSFileSystem


# ============================================================================
# Tests for OSFileSystem.stat / read_file
# ============================================================================


@pytest.mark.unit
def test_os_stat_file(tmp_path):
    """Should report size and type of a file."""
    path = tmp_path / ".version"
    path.write_text("1.0.0\n", encoding="utf-8")

    assert OSFileSystem().stat(path) == FileStat(path=path, is_dir=False, size=6)


@pytest.mark.unit
def test_os_stat_directory(tmp_path):
    """Should flag directories."""
    assert OSFileSystem().stat(tmp_path).is_dir is True


@pytest.mark.unit
def test_os_stat_missing(tmp_path):
    """Should raise FileNotFoundInStorageError for a missing path."""
    path = tmp_path / "missing"

    with pytest.raises(FileNotFoundInStorageError) as exc_info:
        OSFileSystem().stat(path)

    assert exc_info.value.file_path == str(path)
    assert isinstance(exc_info.value.original_exception, FileNotFoundError)


@pytest.mark.unit
def test_os_read_file(tmp_path):
    """Should return the file content as bytes."""
    path = tmp_path / "VERSION"
    path.write_bytes(b"2.0.0\n")

    assert OSFileSystem().read_file(path) == b"2.0.0\n"


@pytest.mark.unit
def test_os_read_missing(tmp_path):
    """Should raise FileNotFoundInStorageError for a missing file."""
    with pytest.raises(FileNotFoundInStorageError):
        OSFileSystem().read_file(tmp_path / "missing")


@pytest.mark.unit
def test_os_read_directory_fails(tmp_path):
    """Should raise FileReadError when reading a directory."""
    with pytest.raises(FileReadError) as exc_info:
        OSFileSystem().read_file(tmp_path)

    assert exc_info.value.diagnostic_info["type"] in ("IsADirectoryError", "PermissionError")


# ============================================================================
# Tests for OSFileSystem.write_file
# ============================================================================


@pytest.mark.unit
def test_os_write_creates_with_permissions(tmp_path):
    """Should create a missing file with the given permission bits."""
    path = tmp_path / ".version"
    old_umask = os.umask(0)
    try:
        OSFileSystem().write_file(path, b"1.0.0\n", 0o640)
    finally:
        os.umask(old_umask)

    assert path.read_bytes() == b"1.0.0\n"
    assert stat.S_IMODE(path.stat().st_mode) == 0o640


@pytest.mark.unit
def test_os_write_truncates(tmp_path):
    """Should replace longer existing content."""
    path = tmp_path / "VERSION"
    path.write_text("10.20.30-beta.1\n", encoding="utf-8")

    OSFileSystem().write_file(path, b"1.0.0\n", 0o644)

    assert path.read_text(encoding="utf-8") == "1.0.0\n"


@pytest.mark.unit
def test_os_write_missing_parent(tmp_path):
    """Should raise FileWriteError when the parent directory is missing."""
    path = tmp_path / "missing" / ".version"

    with pytest.raises(FileWriteError) as exc_info:
        OSFileSystem().write_file(path, b"1.0.0\n", 0o644)

    assert exc_info.value.file_path == str(path)


# ============================================================================
# Tests for OSFileSystem.read_dir
# ============================================================================


@pytest.mark.unit
def test_os_read_dir_sorted(tmp_path):
    """Should list entries sorted by name with their type."""
    (tmp_path / "b.json").write_text("{}")
    (tmp_path / "a").mkdir()
    (tmp_path / ".version").write_text("1.0.0")

    assert OSFileSystem().read_dir(tmp_path) == [
        DirEntry(".version", False),
        DirEntry("a", True),
        DirEntry("b.json", False),
    ]


@pytest.mark.unit
def test_os_read_dir_missing(tmp_path):
    """Should raise DirectoryReadError for a missing directory."""
    with pytest.raises(DirectoryReadError):
        OSFileSystem().read_dir(tmp_path / "missing")


@pytest.mark.unit
@pytest.mark.parametrize("method", ["stat", "read_file", "read_dir"])
def test_os_operations_check_cancellation(tmp_path, cancelled_token, method):
    """Should raise DiscoveryCancelledError before touching the filesystem."""
    with pytest.raises(DiscoveryCancelledError):
        getattr(OSFileSystem(), method)(tmp_path, cancelled_token)


@pytest.mark.unit
def test_os_write_checks_cancellation(tmp_path, cancelled_token):
    """Should not create the file when cancelled."""
    path = tmp_path / ".version"

    with pytest.raises(DiscoveryCancelledError):
        OSFileSystem().write_file(path, b"1.0.0", 0o644, cancelled_token)

    assert not path.exists()


# ============================================================================
# Tests for MockFileSystem
# ============================================================================


@pytest.mark.unit
@pytest.mark.mock
def test_mock_implicit_directories():
    """Should create parent directories for every stored file."""
    fs = MockFileSystem({"/repo/apps/web/package.json": "{}"})

    assert fs.stat(Path("/repo/apps")).is_dir is True
    assert fs.read_dir(Path("/repo")) == [DirEntry("apps", True)]
    assert fs.read_dir(Path("/repo/apps/web")) == [DirEntry("package.json", False)]


@pytest.mark.unit
@pytest.mark.mock
def test_mock_read_dir_sorted_and_empty_dirs():
    """Should list files and explicit directories sorted by name."""
    fs = MockFileSystem({"/repo/b": "x", "/repo/.version": "1"})
    fs.add_dir("/repo/a")

    assert [e.name for e in fs.read_dir(Path("/repo"))] == [".version", "a", "b"]
    assert fs.read_dir(Path("/repo/a")) == []


@pytest.mark.unit
@pytest.mark.mock
def test_mock_read_dir_unknown_or_unreadable():
    """Should raise DirectoryReadError for unknown or unreadable directories."""
    fs = MockFileSystem({"/repo/a/x": "1"})
    fs.unreadable_dirs.add("/repo/a")

    with pytest.raises(DirectoryReadError):
        fs.read_dir(Path("/repo/a"))
    with pytest.raises(DirectoryReadError):
        fs.read_dir(Path("/nowhere"))


@pytest.mark.unit
@pytest.mark.mock
def test_mock_read_and_write_tracking():
    """Should record every call with its arguments."""
    fs = MockFileSystem({"/repo/VERSION": "1.0.0"})

    assert fs.read_file(Path("/repo/VERSION")) == b"1.0.0"
    fs.write_file(Path("/repo/VERSION"), b"2.0.0", 0o600)
    fs.write_file(Path("/repo/NEW"), b"x", 0o600)

    assert fs.read_file_calls == [Path("/repo/VERSION")]
    assert fs.write_file_calls == [
        (Path("/repo/VERSION"), b"2.0.0", 0o600),
        (Path("/repo/NEW"), b"x", 0o600),
    ]
    assert fs.get_text("/repo/VERSION") == "2.0.0"
    # Permissions are only recorded for created files
    assert fs.permissions == {"/repo/NEW": 0o600}


@pytest.mark.unit
@pytest.mark.mock
def test_mock_missing_file():
    """Should raise FileNotFoundInStorageError for unknown files."""
    fs = MockFileSystem()

    with pytest.raises(FileNotFoundInStorageError):
        fs.stat(Path("/repo/.version"))
    with pytest.raises(FileNotFoundInStorageError):
        fs.read_file(Path("/repo/.version"))


@pytest.mark.unit
@pytest.mark.mock
def test_mock_injected_failures():
    """Should raise the configured errors."""
    fs = MockFileSystem({"/repo/VERSION": "1.0.0"})
    fs.read_errors.add("/repo/VERSION")
    fs.write_errors.add("/repo/VERSION")

    with pytest.raises(FileReadError):
        fs.read_file(Path("/repo/VERSION"))
    with pytest.raises(FileWriteError):
        fs.write_file(Path("/repo/VERSION"), b"2.0.0", 0o644)

    assert fs.files["/repo/VERSION"] == b"1.0.0"


@pytest.mark.unit
@pytest.mark.mock
def test_mock_read_dir_hook():
    """Should call the hook before listing."""
    seen: list[Path] = []
    fs = MockFileSystem({"/repo/x": "1"}, read_dir_hook=seen.append)

    fs.read_dir(Path("/repo"))

    assert seen == [Path("/repo")]
