"""
Version source discovery.

This module scans a project tree for every place a version number lives and
reconciles them into a DiscoveryResult. A run proceeds in order:

1. Collect .version markers: the root marker first, then (if recursive
   discovery is enabled) every marker found by a bounded-depth walk.
2. Classify the project from the marker count (none, single, monorepo).
3. Walk every directory up to the manifest depth and read the version of
   each known manifest present. Files that cannot be read, or whose value is
   not a semantic version, are left out without failing the run.
4. Derive sync candidates and mismatches against the primary version.

Cancellation aborts the whole run; no partial result is returned.
"""

from pathlib import Path
from typing import Optional

import structlog

from constants import (
    DEFAULT_MANIFEST_MAX_DEPTH,
    KNOWN_MANIFESTS,
    ROOT_MODULE_NAME,
    VERSION_FILENAME,
)
from core.cancellation import CancellationToken, check_cancelled
from core.config import Config
from core.exceptions import VersyncError
from core.file_io import FileSystem
from core.mismatch import detect_mismatches
from core.models import (
    DiscoveryResult,
    ManifestSource,
    SyncCandidate,
    VersionModule,
)
from core.parser import FileConfig, VersionReader
from core.semver import is_valid_semver
from core.walker import iter_directories, should_exclude, walk_directory
from models import FileFormat

log = structlog.get_logger("versync.discovery")


def _rel(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


class DiscoveryService:
    """
    Discovers version sources in a project tree.

    Attributes:
        fs: Storage used for every stat, listing and read.
        config: Exclude patterns and discovery switches.
        reader: Reader used to extract manifest versions.
    """

    def __init__(self, fs: FileSystem, config: Optional[Config] = None):
        self.fs = fs
        self.config = config or Config()
        self.reader = VersionReader(fs)

    def discover(
        self,
        root: Path | str,
        token: Optional[CancellationToken] = None,
        manifest_max_depth: Optional[int] = None,
    ) -> DiscoveryResult:
        """
        Scan root and return everything found.

        Args:
            root: Directory to scan.
            token: Optional cancellation token.
            manifest_max_depth: Depth limit for the manifest scan. Falls back to
                the configured value, then DEFAULT_MANIFEST_MAX_DEPTH.

        Returns:
            A new DiscoveryResult.

        Raises:
            DiscoveryCancelledError: If the token is cancelled at any point.
        """
        check_cancelled(token)
        root = Path(root)
        log.debug("discovery started", root=str(root))

        result = DiscoveryResult()
        result.modules = self._discover_modules(root, token)
        result.manifests = self._discover_manifests(root, token, manifest_max_depth)
        result.sync_candidates = self._sync_candidates(result)
        result.mismatches = detect_mismatches(result)

        log.debug(
            "discovery finished",
            root=str(root),
            mode=str(result.mode),
            modules=len(result.modules),
            manifests=len(result.manifests),
            mismatches=len(result.mismatches),
        )
        return result

    def discover_modules_only(
        self, root: Path | str, token: Optional[CancellationToken] = None
    ) -> list[VersionModule]:
        """Collect .version markers without scanning manifests."""
        check_cancelled(token)
        return self._discover_modules(Path(root), token)

    def discover_manifests_only(
        self,
        root: Path | str,
        token: Optional[CancellationToken] = None,
        manifest_max_depth: Optional[int] = None,
    ) -> list[ManifestSource]:
        """Scan manifests without collecting .version markers."""
        check_cancelled(token)
        return self._discover_manifests(Path(root), token, manifest_max_depth)

    def _discover_modules(
        self, root: Path, token: Optional[CancellationToken]
    ) -> list[VersionModule]:
        options = self.config.discovery_options()
        modules: list[VersionModule] = []

        if not options.enabled:
            return modules

        root_marker = root / VERSION_FILENAME
        module = self._load_module(root_marker, root, token)
        if module is not None:
            modules.append(module)

        if not options.recursive:
            return modules

        def visit(path: Path) -> None:
            if path == root_marker:
                return
            found = self._load_module(path, root, token)
            if found is not None:
                modules.append(found)

        walk_directory(
            self.fs,
            root,
            0,
            options.module_max_depth,
            self.config.exclude_patterns(),
            visit,
            token,
        )
        return modules

    def _load_module(
        self, path: Path, root: Path, token: Optional[CancellationToken]
    ) -> Optional[VersionModule]:
        try:
            self.fs.stat(path, token)
            data = self.fs.read_file(path, token)
        except VersyncError:
            return None

        version = data.decode("utf-8", errors="replace").strip()
        directory = path.parent
        name = ROOT_MODULE_NAME if directory == root else directory.name

        return VersionModule(
            name=name,
            path=str(path),
            rel_path=_rel(path, root),
            version=version,
            dir=str(directory),
        )

    def _manifest_depth(self, override: Optional[int]) -> int:
        if override is not None:
            return override
        configured = self.config.discovery_options().manifest_max_depth
        if configured is not None:
            return configured
        return DEFAULT_MANIFEST_MAX_DEPTH

    def _discover_manifests(
        self,
        root: Path,
        token: Optional[CancellationToken],
        manifest_max_depth: Optional[int],
    ) -> list[ManifestSource]:
        max_depth = self._manifest_depth(manifest_max_depth)
        excludes = self.config.exclude_patterns()
        manifests: list[ManifestSource] = []

        for directory, entries in iter_directories(
            self.fs, root, max_depth, excludes, token
        ):
            files = {e.name for e in entries if not e.is_dir}
            for known in KNOWN_MANIFESTS:
                if known.filename not in files:
                    continue

                path = directory / known.filename
                if should_exclude(known.filename, _rel(path, root), excludes):
                    continue
                try:
                    version = self.reader.read_version(
                        FileConfig(
                            path=str(path), format=known.format, field=known.field
                        ),
                        token,
                    )
                except VersyncError:
                    continue

                if not is_valid_semver(version):
                    continue

                manifests.append(
                    ManifestSource(
                        path=str(path),
                        rel_path=_rel(path, root),
                        filename=known.filename,
                        version=version,
                        format=known.format,
                        field=known.field,
                        description=known.description,
                    )
                )

        return manifests

    def _sync_candidates(self, result: DiscoveryResult) -> list[SyncCandidate]:
        candidates = [
            SyncCandidate(
                path=m.rel_path,
                format=m.format,
                field=m.field,
                version=m.version,
                description=m.description,
            )
            for m in result.manifests
        ]

        for module in result.modules:
            if module.rel_path == VERSION_FILENAME:
                continue
            candidates.append(
                SyncCandidate(
                    path=module.rel_path,
                    format=FileFormat.RAW,
                    version=module.version,
                    description=f"Version file ({module.rel_path})",
                )
            )

        return candidates


def discover_at(
    fs: FileSystem,
    config: Optional[Config],
    root: Path | str,
    token: Optional[CancellationToken] = None,
) -> DiscoveryResult:
    """Create a DiscoveryService and run discovery on root."""
    return DiscoveryService(fs, config).discover(root, token)
