"""
Bounded-depth directory walks over an injected FileSystem.

Two walks share the exclusion rules defined here:

- walk_directory() visits files (by default, .version markers) depth-first.
- iter_directories() yields every directory once, for the manifest scan.

Both poll the cancellation token before every directory read. A directory
that cannot be listed is treated as empty so one bad subtree does not abort
the scan of the rest of the project.
"""

from fnmatch import fnmatchcase
from pathlib import Path
from typing import Callable, Generator, Iterable, Optional

from constants import SKIP_DIRS, VERSION_FILENAME
from core.cancellation import CancellationToken, check_cancelled
from core.exceptions import FileIOError
from core.file_io import DirEntry, FileSystem


def _glob_match(pattern: str, rel_path: str) -> bool:
    """Match a glob segment by segment, so "*" never crosses a "/"."""
    pattern_parts = pattern.split("/")
    path_parts = rel_path.split("/")
    if len(pattern_parts) != len(path_parts):
        return False
    return all(
        fnmatchcase(part, glob) for part, glob in zip(path_parts, pattern_parts)
    )


def should_exclude(name: str, rel_path: str, excludes: Iterable[str]) -> bool:
    """
    Decide whether a directory entry is skipped.

    An entry is excluded if:
    1. Its name starts with "." and it is not the .version marker.
    2. Its name is a dependency cache, VCS or build directory (SKIP_DIRS).
    3. Its name or its path relative to the scan root matches one of the glob
       patterns in excludes. Matching is per path segment: "*" stops at "/".

    Args:
        name: Entry name.
        rel_path: Entry path relative to the scan root, in POSIX form.
        excludes: Caller-supplied glob patterns.

    Returns:
        bool: True if the entry must not be visited or descended into.
    """
    if name.startswith(".") and name != VERSION_FILENAME:
        return True

    if name in SKIP_DIRS:
        return True

    for pattern in excludes:
        if _glob_match(pattern, name) or _glob_match(pattern, rel_path):
            return True

    return False


def _rel(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.name


def _list(
    fs: FileSystem, directory: Path, token: Optional[CancellationToken]
) -> list[DirEntry]:
    check_cancelled(token)
    try:
        return fs.read_dir(directory, token)
    except FileIOError:
        # Unreadable directories are skipped
        return []


def walk_directory(
    fs: FileSystem,
    directory: Path,
    depth: int,
    max_depth: int,
    excludes: list[str],
    visit: Callable[[Path], None],
    token: Optional[CancellationToken] = None,
    match: Optional[Callable[[str], bool]] = None,
    root: Optional[Path] = None,
) -> None:
    """
    Walk a directory tree depth-first and call visit() for matching files.

    Args:
        fs: Storage to walk.
        directory: Directory to list.
        depth: Depth of directory (the walk root is 0).
        max_depth: Directories deeper than this are not listed.
        excludes: Glob exclude patterns (see should_exclude).
        visit: Called with the path of each matching file, in walk order.
        token: Optional cancellation token, checked before each listing.
        match: Predicate on file names. Defaults to the .version marker.
        root: Scan root that exclude paths are relative to. Defaults to
            directory, for the outermost call.

    Raises:
        DiscoveryCancelledError: If the token is cancelled during the walk.
    """
    if depth > max_depth:
        return

    is_match = match or (lambda name: name == VERSION_FILENAME)
    base = directory if root is None else root

    for entry in _list(fs, directory, token):
        path = directory / entry.name
        if should_exclude(entry.name, _rel(path, base), excludes):
            continue

        if entry.is_dir:
            walk_directory(
                fs, path, depth + 1, max_depth, excludes, visit, token, match, base
            )
        elif is_match(entry.name):
            visit(path)


def iter_directories(
    fs: FileSystem,
    root: Path,
    max_depth: int,
    excludes: list[str],
    token: Optional[CancellationToken] = None,
) -> Generator[tuple[Path, list[DirEntry]], None, None]:
    """
    Yield every directory under root (root included) with its entries.

    Each directory is yielded at most once, with root at depth 0. A directory
    at depth max_depth is yielded but its subdirectories are not. Excluded
    subdirectories are never entered.

    Yields:
        (directory, entries) pairs in depth-first order.

    Raises:
        DiscoveryCancelledError: If the token is cancelled during the walk.
    """
    seen: set[str] = set()

    def _walk(directory: Path, depth: int) -> Generator[tuple[Path, list[DirEntry]], None, None]:
        key = directory.as_posix()
        if key in seen:
            return
        seen.add(key)

        entries = _list(fs, directory, token)
        yield directory, entries

        if depth >= max_depth:
            return

        for entry in entries:
            if not entry.is_dir:
                continue
            path = directory / entry.name
            if should_exclude(entry.name, _rel(path, root), excludes):
                continue
            yield from _walk(path, depth + 1)

    yield from _walk(root, 0)
