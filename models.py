"""
Type definitions and data models shared across the versync application.

This module contains the file format enumeration and the known-manifest
descriptor that are used by the parser, the discovery pipeline and the CLI
for type safety and consistency.
"""

from dataclasses import dataclass
from enum import StrEnum


class FileFormat(StrEnum):
    """
    Enumeration of file formats a version can be read from or written to.

    Structured formats (JSON, YAML, TOML) address the version through a
    dot-notation field path. RAW treats the whole file as the version and
    REGEX extracts it through the first capturing group of a pattern.
    """

    JSON = "json"
    YAML = "yaml"
    TOML = "toml"
    RAW = "raw"
    REGEX = "regex"

    @classmethod
    def is_valid(cls, value: object) -> bool:
        """Return True if value names one of the supported formats."""
        return value in {f.value for f in cls}

    @classmethod
    def parse(cls, value: str) -> "FileFormat":
        """
        Convert a string to a FileFormat, falling back to RAW.

        Args:
            value: Format name such as "json" or "toml".

        Returns:
            The matching FileFormat, or FileFormat.RAW for unknown names.
        """
        if cls.is_valid(value):
            return cls(value)
        return cls.RAW

    @property
    def is_structured(self) -> bool:
        """True for formats that need a field path."""
        return self in (FileFormat.JSON, FileFormat.YAML, FileFormat.TOML)


@dataclass(frozen=True)
class KnownManifest:
    """
    Describes a manifest file that discovery looks for in every directory.

    Attributes:
        filename: Exact file name to look for (e.g., "package.json").
        format: Format used to read the version.
        field: Dot-notation path to the version field. Empty for raw files.
        description: Human-readable label shown in reports.
        priority: Discovery order. Lower values are checked first.
    """

    filename: str
    format: FileFormat
    field: str
    description: str
    priority: int
