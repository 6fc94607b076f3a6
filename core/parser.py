"""
Version reading and writing for individual files.

A FileConfig names a file and says how its version is addressed: a format
plus either a dot-notation field (JSON, YAML, TOML) or a regex pattern. The
VersionReader and VersionWriter validate the descriptor before touching
storage, load the file through an injected FileSystem and delegate the
format-specific work to the adapters in core.formats.
"""

from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Optional

import structlog

from constants import FILE_PERMISSIONS, KNOWN_MANIFESTS
from core.cancellation import CancellationToken
from core.exceptions import (
    InvalidFileConfigError,
    MalformedContentError,
    MissingFieldError,
    MissingPatternError,
    VersyncError,
)
from core.file_io import FileSystem
from core.formats import get_adapter
from models import FileFormat

log = structlog.get_logger("versync.parser")


@dataclass(frozen=True)
class FileConfig:
    """
    Describes how to read or write the version in one file.

    Attributes:
        path: File path, absolute or relative to the working directory.
        format: File format.
        field: Dot-notation path to the version field. Required for JSON,
            YAML and TOML; must be empty for raw files.
        pattern: Regular expression whose first group captures the version.
            Required for the regex format.
    """

    path: str
    format: FileFormat
    field: str = ""
    pattern: str = ""

    def validate(self) -> None:
        """
        Check the descriptor without touching storage.

        Raises:
            InvalidFileConfigError: For an empty path, an unknown format, or a
                field on a raw file.
            MissingFieldError: If a structured format has no field.
            MissingPatternError: If the regex format has no pattern.
        """
        if not self.path:
            raise InvalidFileConfigError("file path is required")

        if not FileFormat.is_valid(self.format):
            raise InvalidFileConfigError(
                message=f"invalid format: {self.format}", file_path=self.path
            )

        fmt = FileFormat(self.format)
        if fmt.is_structured and not self.field:
            raise MissingFieldError(fmt, self.path)
        if fmt is FileFormat.REGEX and not self.pattern:
            raise MissingPatternError(self.path)
        if fmt is FileFormat.RAW and self.field:
            raise InvalidFileConfigError(
                message=f"field is not supported for raw format ({self.path})",
                file_path=self.path,
            )


@dataclass(frozen=True)
class ReadResult:
    version: str
    path: str
    format: FileFormat
    field: str


def _decode(data: bytes, path: str) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedContentError(
            message=f"file {path!r} is not valid UTF-8",
            file_path=path,
            original_exception=e,
        ) from e


class VersionReader:
    """Reads versions from files of any supported format."""

    def __init__(self, fs: FileSystem):
        self.fs = fs

    def read(
        self, cfg: FileConfig, token: Optional[CancellationToken] = None
    ) -> ReadResult:
        """
        Read the version addressed by cfg.

        Args:
            cfg: The file descriptor.
            token: Optional cancellation token.

        Returns:
            ReadResult with the extracted version and the descriptor used.

        Raises:
            InvalidFileConfigError: If cfg is invalid (raised before any read).
            FileIOError: If the file cannot be read.
            ContentError: If the content does not yield a version.
        """
        cfg.validate()
        fmt = FileFormat(cfg.format)

        data = self.fs.read_file(Path(cfg.path), token)
        content = _decode(data, cfg.path)
        version = get_adapter(fmt).read(content, cfg.path, cfg.field, cfg.pattern)

        return ReadResult(version=version, path=cfg.path, format=fmt, field=cfg.field)

    def read_version(
        self, cfg: FileConfig, token: Optional[CancellationToken] = None
    ) -> str:
        """Read and return just the version string."""
        return self.read(cfg, token).version


class VersionWriter:
    """Writes versions to files of any supported format."""

    def __init__(self, fs: FileSystem):
        self.fs = fs

    def write(
        self,
        cfg: FileConfig,
        version: str,
        token: Optional[CancellationToken] = None,
    ) -> None:
        """
        Replace the version addressed by cfg with version.

        Raw files are overwritten without being read, so they may not exist
        yet. All other formats are read, patched and written back; content
        outside the version is preserved as far as the format allows.

        Raises:
            InvalidFileConfigError: If cfg is invalid (raised before any I/O).
            FileIOError: If the file cannot be read or written.
            ContentError: If the content cannot accept the new version.
        """
        cfg.validate()
        fmt = FileFormat(cfg.format)
        adapter = get_adapter(fmt)
        path = Path(cfg.path)

        if fmt is FileFormat.RAW:
            content = ""
        else:
            content = _decode(self.fs.read_file(path, token), cfg.path)

        updated = adapter.write(content, cfg.path, cfg.field, cfg.pattern, version)
        self.fs.write_file(path, updated.encode("utf-8"), FILE_PERMISSIONS, token)
        log.info("version written", path=cfg.path, format=str(fmt), version=version)

    def exists(self, path: str, token: Optional[CancellationToken] = None) -> bool:
        """Return True if path exists. Only stats the path; content is not read."""
        try:
            self.fs.stat(Path(path), token)
        except VersyncError:
            return False
        return True


class VersionReadWriter:
    """Convenience facade combining a VersionReader and a VersionWriter."""

    def __init__(self, fs: FileSystem):
        self.reader = VersionReader(fs)
        self.writer = VersionWriter(fs)

    def read(
        self, cfg: FileConfig, token: Optional[CancellationToken] = None
    ) -> ReadResult:
        return self.reader.read(cfg, token)

    def read_version(
        self, cfg: FileConfig, token: Optional[CancellationToken] = None
    ) -> str:
        return self.reader.read_version(cfg, token)

    def write(
        self,
        cfg: FileConfig,
        version: str,
        token: Optional[CancellationToken] = None,
    ) -> None:
        self.writer.write(cfg, version, token)

    def exists(self, path: str, token: Optional[CancellationToken] = None) -> bool:
        return self.writer.exists(path, token)


def field_for_file(filename: str) -> str:
    """
    Return the usual version field for a manifest file name.

    Both bare names and paths are accepted. Unknown files default to "version".
    """
    name = PurePath(filename).name
    for known in KNOWN_MANIFESTS:
        if known.field and known.filename == name:
            return known.field
    return "version"


def format_for_file(filename: str) -> FileFormat:
    """Guess the format of a file from its extension or well-known name."""
    name = PurePath(filename).name.lower()

    if name.endswith(".json"):
        return FileFormat.JSON
    if name.endswith((".yaml", ".yml")):
        return FileFormat.YAML
    if name.endswith(".toml"):
        return FileFormat.TOML
    # .txt, VERSION, .version and anything unrecognised
    return FileFormat.RAW
