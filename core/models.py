"""
Core data models for the discovery pipeline.

This module defines the data structures produced by a discovery run: the
.version markers found in the tree, the manifest files with an extractable
version, the files that can be kept in sync with the primary version, and
the mismatches between them. All entities are immutable once built and live
for the duration of one run.
"""

from dataclasses import dataclass, field
from enum import Enum

from constants import VERSION_FILENAME
from core.parser import FileConfig
from models import FileFormat


class DetectionMode(Enum):
    NO_MODULES = "NoModules"
    SINGLE_MODULE = "SingleModule"
    MULTI_MODULE = "MultiModule"

    @classmethod
    def from_count(cls, count: int) -> "DetectionMode":
        """Map a .version marker count to a mode: 0, 1, or many."""
        if count == 0:
            return cls.NO_MODULES
        if count == 1:
            return cls.SINGLE_MODULE
        return cls.MULTI_MODULE

    @property
    def label(self) -> str:
        """Human-readable description used in reports."""
        return {
            DetectionMode.NO_MODULES: "No .version files found",
            DetectionMode.SINGLE_MODULE: "Single Module",
            DetectionMode.MULTI_MODULE: "Multi-Module (Monorepo)",
        }[self]

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class VersionModule:
    """
    A discovered .version marker file.

    Attributes:
        name: Name of the containing directory, or "root" for the scan root.
        path: Absolute path to the .version file.
        rel_path: Path relative to the scan root, using "/" separators.
        version: Trimmed file content.
        dir: Directory containing the file.
    """

    name: str
    path: str
    rel_path: str
    version: str
    dir: str


@dataclass(frozen=True)
class ManifestSource:
    """
    A discovered manifest file with a semver-shaped version.

    Attributes:
        path: Absolute path to the manifest.
        rel_path: Path relative to the scan root, using "/" separators.
        filename: Base name (e.g., "package.json").
        version: The extracted version string.
        format: Format used to read it.
        field: Dot-notation version field; empty for raw files.
        description: Human-readable label (e.g., "Node.js (package.json)").
    """

    path: str
    rel_path: str
    filename: str
    version: str
    format: FileFormat
    field: str
    description: str


@dataclass(frozen=True)
class SyncCandidate:
    """
    A file that can be kept in sync with the primary version.

    `path` is relative to the scan root.
    """

    path: str
    format: FileFormat
    version: str
    description: str
    field: str = ""
    pattern: str = ""

    def to_file_config(self) -> FileConfig:
        return FileConfig(
            path=self.path, format=self.format, field=self.field, pattern=self.pattern
        )


@dataclass(frozen=True)
class Mismatch:
    source: str
    expected_version: str
    actual_version: str


@dataclass(frozen=True)
class VersionSummary:
    version: str
    count: int
    sources: list[str]


@dataclass
class DiscoveryResult:
    """
    Aggregate result of one discovery run.

    The detection mode and the primary version are derived from the stored
    lists on every access; nothing is cached.

    Attributes:
        modules: .version markers, root first when present, then walk order.
        manifests: Manifest sources in walk order.
        sync_candidates: Manifest-derived candidates, then marker-derived ones.
        mismatches: Version mismatches against the primary version, by source.
    """

    modules: list[VersionModule] = field(default_factory=list)
    manifests: list[ManifestSource] = field(default_factory=list)
    sync_candidates: list[SyncCandidate] = field(default_factory=list)
    mismatches: list[Mismatch] = field(default_factory=list)

    @property
    def mode(self) -> DetectionMode:
        return DetectionMode.from_count(len(self.modules))

    @property
    def has_modules(self) -> bool:
        return len(self.modules) > 0

    @property
    def has_manifests(self) -> bool:
        return len(self.manifests) > 0

    @property
    def has_mismatches(self) -> bool:
        return len(self.mismatches) > 0

    @property
    def is_empty(self) -> bool:
        """True if neither .version markers nor manifests were found."""
        return not self.modules and not self.manifests

    @property
    def primary_module(self) -> VersionModule | None:
        """
        The module acting as source of truth: the root marker if present,
        otherwise the first module.
        """
        for m in self.modules:
            if m.rel_path == VERSION_FILENAME:
                return m
        if self.modules:
            return self.modules[0]
        return None

    @property
    def primary_version(self) -> str:
        """
        The recommended primary version.

        Priority: the root .version marker, then the first module, then the
        first manifest. Empty if nothing was found.
        """
        module = self.primary_module
        if module is not None:
            return module.version
        if self.manifests:
            return self.manifests[0].version
        return ""
