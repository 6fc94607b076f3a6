"""
Custom exception classes for versync.

This module defines the exceptions raised while reading and writing version
values and while discovering version sources in a project tree. They fall
into four groups:

- Configuration errors: a file descriptor is incomplete or contradictory.
  These are caller mistakes and are raised before storage is touched.
- Content errors: a file was read but its content cannot yield (or accept)
  a version at the requested address.
- Storage errors: the filesystem refused a stat, read, write or listing.
- Cancellation: the caller's cancellation token fired mid-operation.

Every error that concerns a single file carries its path so callers never
have to guess which file failed.
"""

import os
from typing import Optional


class VersyncError(Exception):
    """
    Base exception for all versync errors.

    Attributes:
        message: A human-readable error message describing what went wrong.
        file_path: The path of the file involved, if any.
        original_exception: The underlying exception that caused this error, if any.
        diagnostic_info: A dictionary containing diagnostic information including
            exception type, details, and OS name.
    """

    default_message = "An error occurred while processing version sources"

    def __init__(
        self,
        message: Optional[str] = None,
        file_path: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.file_path = file_path
        self.original_exception = original_exception
        self.diagnostic_info = {
            "type": (
                type(original_exception).__name__ if original_exception else "Unknown"
            ),
            "details": str(original_exception) if original_exception else "No details",
            "os_name": os.name,
        }


# ============================================================================
# Configuration errors
# ============================================================================


class InvalidFileConfigError(VersyncError):
    """
    Raised when a file descriptor is unusable: empty path, unknown format,
    or a field given for a format that has no field semantics.
    """

    default_message = "Invalid file configuration"


class MissingFieldError(InvalidFileConfigError):
    """Raised when a structured format (JSON, YAML, TOML) has no field path."""

    def __init__(self, file_format: str, file_path: Optional[str] = None):
        self.file_format = file_format
        super().__init__(
            message=f"field is required for {file_format.upper()} format"
            + (f" ({file_path})" if file_path else ""),
            file_path=file_path,
        )


class MissingPatternError(InvalidFileConfigError):
    """Raised when the regex format has no pattern."""

    def __init__(self, file_path: Optional[str] = None):
        super().__init__(
            message="pattern is required for regex format"
            + (f" ({file_path})" if file_path else ""),
            file_path=file_path,
        )


class ConfigLoadError(VersyncError):
    """Raised when the project configuration file cannot be parsed or is invalid."""

    default_message = "Failed to load configuration"


# ============================================================================
# Content errors
# ============================================================================


class ContentError(VersyncError):
    """
    Base exception for errors in the content of a file.

    During discovery these are downgraded to "skip this candidate"; for an
    explicit read or write they propagate to the caller.
    """

    default_message = "Unable to process file content"


class MalformedContentError(ContentError):
    """Raised when a structured file cannot be parsed or serialized."""


class EmptyFieldPathError(ContentError):
    """Raised when a field path is empty."""

    default_message = "field path cannot be empty"


class FieldNotFoundError(ContentError):
    """
    Raised when a segment of a field path does not exist.

    Attributes:
        field: The full dot-notation field path that was requested.
    """

    def __init__(
        self,
        field: str,
        message: Optional[str] = None,
        file_path: Optional[str] = None,
    ):
        self.field = field
        super().__init__(
            message=message or f"field {field!r} not found",
            file_path=file_path,
        )


class FieldTypeError(ContentError):
    """
    Raised when a value along a field path has the wrong type: an
    intermediate value is not an object, or the target is not a string.

    Attributes:
        field: The dot-notation prefix at which the type conflict occurred.
    """

    def __init__(
        self,
        field: str,
        message: Optional[str] = None,
        file_path: Optional[str] = None,
    ):
        self.field = field
        super().__init__(
            message=message or f"field {field!r} is not an object",
            file_path=file_path,
        )


class InvalidPatternError(ContentError):
    """Raised when a regex pattern does not compile or has no capturing group."""


class PatternNotMatchedError(ContentError):
    """Raised when a regex pattern does not match the file contents."""


class InvalidVersionError(ContentError):
    """Raised when a string is not a semantic version."""

    default_message = "invalid version format"


# ============================================================================
# Storage errors
# ============================================================================


class FileIOError(VersyncError):
    """Base exception for filesystem operation errors."""

    default_message = "A file I/O error occurred"


class FileReadError(FileIOError):
    """Raised when a file cannot be read."""


class FileWriteError(FileIOError):
    """Raised when a file cannot be written."""


class FileNotFoundInStorageError(FileIOError):
    """Raised when a stat or read targets a path that does not exist."""


class DirectoryReadError(FileIOError):
    """Raised when a directory listing fails."""


# ============================================================================
# Cancellation
# ============================================================================


class DiscoveryCancelledError(Exception):
    """
    Raised when a cancellation token fires during an operation.

    Deliberately not a VersyncError: cancellation is never swallowed by the
    "skip this file" handling that discovery applies to other errors.
    """

    def __init__(self, message: Optional[str] = None):
        self.message = message or "Operation was cancelled"
        super().__init__(self.message)
