"""
Application-wide constants and discovery catalogs.

This module defines the canonical version marker, the directories the tree
walk never descends into, default scan depths and the catalog of known
manifest files whose versions discovery extracts.
"""

from typing import Final

from models import FileFormat, KnownManifest


# Name of the canonical version marker file. A project may contain one at
# its root and one per module in a monorepo.
VERSION_FILENAME: Final[str] = ".version"

# Module name reported for the marker found directly in the scan root.
ROOT_MODULE_NAME: Final[str] = "root"

# Dependency caches, revision-control metadata and build outputs.
SKIP_DIRS: Final[frozenset[str]] = frozenset(
    {
        "node_modules",
        "vendor",
        ".git",
        "__pycache__",
        "target",
        "dist",
        "build",
    }
)

DEFAULT_MODULE_MAX_DEPTH: Final[int] = 10
DEFAULT_MANIFEST_MAX_DEPTH: Final[int] = 3

# Mode for newly created files: owner read/write only.
FILE_PERMISSIONS: Final[int] = 0o600

# Name of the optional project configuration file.
CONFIG_FILENAME: Final[str] = ".versync.json"

# Known manifest files, ordered by priority. Discovery tests every entry in
# every scanned directory and keeps those that yield a semver-shaped value.
KNOWN_MANIFESTS: Final[tuple[KnownManifest, ...]] = (
    KnownManifest(
        filename="package.json",
        format=FileFormat.JSON,
        field="version",
        description="Node.js (package.json)",
        priority=1,
    ),
    KnownManifest(
        filename="Cargo.toml",
        format=FileFormat.TOML,
        field="package.version",
        description="Rust (Cargo.toml)",
        priority=2,
    ),
    KnownManifest(
        filename="pyproject.toml",
        format=FileFormat.TOML,
        field="project.version",
        description="Python (pyproject.toml)",
        priority=3,
    ),
    KnownManifest(
        filename="Chart.yaml",
        format=FileFormat.YAML,
        field="version",
        description="Helm (Chart.yaml)",
        priority=4,
    ),
    KnownManifest(
        filename="pubspec.yaml",
        format=FileFormat.YAML,
        field="version",
        description="Dart/Flutter (pubspec.yaml)",
        priority=5,
    ),
    KnownManifest(
        filename="composer.json",
        format=FileFormat.JSON,
        field="version",
        description="PHP (composer.json)",
        priority=6,
    ),
    KnownManifest(
        filename="version.txt",
        format=FileFormat.RAW,
        field="",
        description="Plain text (version.txt)",
        priority=10,
    ),
    KnownManifest(
        filename="VERSION",
        format=FileFormat.RAW,
        field="",
        description="Plain text (VERSION)",
        priority=11,
    ),
)
