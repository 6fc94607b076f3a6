from dataclasses import dataclass
import os
from pathlib import Path, PurePosixPath
from typing import Callable, Optional, Protocol

from core.cancellation import CancellationToken, check_cancelled
from core.exceptions import (
    DirectoryReadError,
    FileNotFoundInStorageError,
    FileReadError,
    FileWriteError,
)


@dataclass(frozen=True)
class FileStat:
    path: Path
    is_dir: bool
    size: int


@dataclass(frozen=True)
class DirEntry:
    name: str
    is_dir: bool


class FileSystem(Protocol):
    """
    Protocol defining the storage operations versync needs.

    Every component that touches storage receives an implementation at
    construction, allowing production (OS filesystem) and testing (in-memory)
    implementations to be swapped freely. All operations accept an optional
    cancellation token and check it before doing any work.
    """

    def stat(self, path: Path, token: Optional[CancellationToken] = None) -> FileStat:
        """
        Return metadata for a path.

        Raises:
            FileNotFoundInStorageError: If the path does not exist.
            FileIOError: If the path cannot be inspected.
        """

    def read_file(
        self, path: Path, token: Optional[CancellationToken] = None
    ) -> bytes:
        """
        Read the full content of a file.

        Raises:
            FileNotFoundInStorageError: If the file does not exist.
            FileReadError: If reading fails.
        """

    def write_file(
        self,
        path: Path,
        data: bytes,
        perm: int,
        token: Optional[CancellationToken] = None,
    ) -> None:
        """
        Replace the content of a file, creating it with `perm` if missing.

        Raises:
            FileWriteError: If writing fails.
        """

    def read_dir(
        self, path: Path, token: Optional[CancellationToken] = None
    ) -> list[DirEntry]:
        """
        List a directory, sorted by entry name.

        Raises:
            DirectoryReadError: If the directory cannot be listed.
        """


class OSFileSystem:

    def stat(self, path: Path, token: Optional[CancellationToken] = None) -> FileStat:
        check_cancelled(token)
        try:
            st = path.stat()
        except FileNotFoundError as e:
            raise FileNotFoundInStorageError(
                message=f"File not found: {path}",
                file_path=str(path),
                original_exception=e,
            ) from e
        except OSError as e:
            raise FileReadError(
                message=f"Failed to stat file: {path}",
                file_path=str(path),
                original_exception=e,
            ) from e
        return FileStat(path=path, is_dir=path.is_dir(), size=st.st_size)

    def read_file(
        self, path: Path, token: Optional[CancellationToken] = None
    ) -> bytes:
        check_cancelled(token)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise FileNotFoundInStorageError(
                message=f"File not found: {path}",
                file_path=str(path),
                original_exception=e,
            ) from e
        except OSError as e:
            raise FileReadError(
                message=f"Failed to read file: {path}",
                file_path=str(path),
                original_exception=e,
            ) from e

    def write_file(
        self,
        path: Path,
        data: bytes,
        perm: int,
        token: Optional[CancellationToken] = None,
    ) -> None:
        """
        Write data to a file, truncating any previous content.

        The permission bits only apply when the file is created; an existing
        file keeps its mode.
        """
        check_cancelled(token)
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, perm)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        except OSError as e:
            raise FileWriteError(
                message=f"Failed to write file: {path}",
                file_path=str(path),
                original_exception=e,
            ) from e

    def read_dir(
        self, path: Path, token: Optional[CancellationToken] = None
    ) -> list[DirEntry]:
        check_cancelled(token)
        try:
            with os.scandir(path) as it:
                entries = [DirEntry(name=e.name, is_dir=e.is_dir()) for e in it]
        except OSError as e:
            raise DirectoryReadError(
                message=f"Failed to read directory: {path}",
                file_path=str(path),
                original_exception=e,
            ) from e
        return sorted(entries, key=lambda e: e.name)


class MockFileSystem:
    """
    In-memory implementation of FileSystem for testing.

    Files are stored as bytes keyed by their POSIX path. Directories exist
    implicitly as parents of stored files, or explicitly via add_dir().
    Failures can be injected per path, and every call is tracked for
    inspection.
    """

    def __init__(
        self,
        files: Optional[dict[str, str | bytes]] = None,
        read_dir_hook: Optional[Callable[[Path], None]] = None,
    ):
        """
        Initialize MockFileSystem with optional initial content.

        Args:
            files: Mapping of path to content. String content is UTF-8 encoded.
            read_dir_hook: Optional callable invoked with the directory path
                before every read_dir(), e.g. to cancel a token mid-walk.

        Attributes (for test inspection):
            stat_calls: Paths passed to stat()
            read_file_calls: Paths passed to read_file()
            write_file_calls: Tuples (path, data, perm) passed to write_file()
            read_dir_calls: Paths passed to read_dir()
            unreadable_dirs: Paths whose listing raises DirectoryReadError
            read_errors: Paths whose read raises FileReadError
            write_errors: Paths whose write raises FileWriteError
        """
        self.files: dict[str, bytes] = {}
        self.dirs: set[str] = set()
        self.permissions: dict[str, int] = {}
        self.read_dir_hook = read_dir_hook

        self.stat_calls: list[Path] = []
        self.read_file_calls: list[Path] = []
        self.write_file_calls: list[tuple[Path, bytes, int]] = []
        self.read_dir_calls: list[Path] = []

        self.unreadable_dirs: set[str] = set()
        self.read_errors: set[str] = set()
        self.write_errors: set[str] = set()

        for path, content in (files or {}).items():
            self.add_file(path, content)

    @staticmethod
    def _key(path: Path | str) -> str:
        return Path(path).as_posix()

    def _register_parents(self, key: str) -> None:
        for parent in PurePosixPath(key).parents:
            self.dirs.add(parent.as_posix())

    def add_file(self, path: Path | str, content: str | bytes) -> None:
        """Store a file, creating its parent directories implicitly."""
        key = self._key(path)
        data = content.encode("utf-8") if isinstance(content, str) else content
        self.files[key] = data
        self._register_parents(key)

    def add_dir(self, path: Path | str) -> None:
        """Create an (empty) directory."""
        key = self._key(path)
        self.dirs.add(key)
        self._register_parents(key)

    def get_text(self, path: Path | str) -> str:
        """Return a stored file as text. Raises KeyError if missing."""
        return self.files[self._key(path)].decode("utf-8")

    def stat(self, path: Path, token: Optional[CancellationToken] = None) -> FileStat:
        check_cancelled(token)
        self.stat_calls.append(path)
        key = self._key(path)
        if key in self.files:
            return FileStat(path=path, is_dir=False, size=len(self.files[key]))
        if key in self.dirs:
            return FileStat(path=path, is_dir=True, size=0)
        raise FileNotFoundInStorageError(
            message=f"File not found: {path}", file_path=str(path)
        )

    def read_file(
        self, path: Path, token: Optional[CancellationToken] = None
    ) -> bytes:
        check_cancelled(token)
        self.read_file_calls.append(path)
        key = self._key(path)
        if key in self.read_errors:
            raise FileReadError(
                message=f"Failed to read file: {path}",
                file_path=str(path),
                original_exception=PermissionError("Permission denied"),
            )
        if key not in self.files:
            raise FileNotFoundInStorageError(
                message=f"File not found: {path}", file_path=str(path)
            )
        return self.files[key]

    def write_file(
        self,
        path: Path,
        data: bytes,
        perm: int,
        token: Optional[CancellationToken] = None,
    ) -> None:
        check_cancelled(token)
        self.write_file_calls.append((path, data, perm))
        key = self._key(path)
        if key in self.write_errors:
            raise FileWriteError(
                message=f"Failed to write file: {path}",
                file_path=str(path),
                original_exception=PermissionError("Permission denied"),
            )
        if key not in self.files:
            self.permissions[key] = perm
        self.add_file(key, data)

    def read_dir(
        self, path: Path, token: Optional[CancellationToken] = None
    ) -> list[DirEntry]:
        if self.read_dir_hook is not None:
            self.read_dir_hook(path)
        check_cancelled(token)
        self.read_dir_calls.append(path)
        key = self._key(path)
        if key in self.unreadable_dirs or key not in self.dirs:
            raise DirectoryReadError(
                message=f"Failed to read directory: {path}", file_path=str(path)
            )

        entries: dict[str, bool] = {}
        for file_key in self.files:
            parent = PurePosixPath(file_key).parent.as_posix()
            if parent == key and file_key != key:
                entries[PurePosixPath(file_key).name] = False
        for dir_key in self.dirs:
            parent = PurePosixPath(dir_key).parent.as_posix()
            if parent == key and dir_key != key:
                entries[PurePosixPath(dir_key).name] = True

        return [DirEntry(name=n, is_dir=d) for n, d in sorted(entries.items())]
