"""
Format adapters for reading and writing version values.

Each supported FileFormat has one adapter implementing the FormatAdapter
protocol. Adapters operate purely on text: the Version Reader and Writer
handle storage and hand the decoded content over, so adapters can be tested
without touching the filesystem.

- JSON: patched in place so that only the version token changes.
- YAML and TOML: parsed and re-serialized as a whole.
- RAW: the whole (trimmed) file is the version.
- REGEX: the first capturing group of the first match is the version.
"""

import json
import re
import tomllib
from collections.abc import Mapping
from typing import Any, Final, Protocol

import tomli_w
import yaml

from core.exceptions import (
    FieldTypeError,
    InvalidPatternError,
    MalformedContentError,
    MissingFieldError,
    MissingPatternError,
    PatternNotMatchedError,
    VersyncError,
)
from core.fieldpath import get_nested_value, set_nested_value, split_field
from core.json_patch import detect_indent, patch_json_value
from models import FileFormat


class FormatAdapter(Protocol):
    """
    Protocol for per-format version extraction and replacement.

    `field` is used by structured formats, `pattern` by the regex format;
    each adapter ignores the one it does not need.
    """

    def read(self, content: str, path: str, field: str, pattern: str) -> str:
        """
        Extract the version from file content.

        Raises:
            ContentError: If the content cannot yield a version.
        """

    def write(
        self, content: str, path: str, field: str, pattern: str, version: str
    ) -> str:
        """
        Return content with the version replaced by `version`.

        Raises:
            ContentError: If the content cannot accept the version.
        """


def ensure_trailing_newline(text: str) -> str:
    if text and not text.endswith("\n"):
        return text + "\n"
    return text


def _with_path(e: VersyncError, path: str) -> VersyncError:
    """Attach the file path to a path-agnostic error from the field helpers."""
    e.file_path = path
    e.message = f"in file {path!r}: {e.message}"
    e.args = (e.message,)
    return e


class StructuredAdapter:
    """
    Shared read/write logic for formats that deserialize to a mapping tree.

    Subclasses provide `_load` and `_dump`; `_patch` may be overridden to
    update the text in place instead of re-serializing it.
    """

    format: FileFormat

    def _load(self, content: str) -> Any:
        raise NotImplementedError

    def _dump(self, tree: dict[str, Any], original: str) -> str:
        raise NotImplementedError

    def _patch(self, content: str, field: str, version: str) -> str | None:
        return None

    def _parse(self, content: str, path: str) -> dict[str, Any]:
        try:
            tree = self._load(content)
        except Exception as e:  # noqa: BLE001
            # Parser libraries raise their own error types
            raise MalformedContentError(
                message=f"failed to parse {self.format.upper()} in {path!r}: {e}",
                file_path=path,
                original_exception=e,
            ) from e
        if tree is None:
            tree = {}
        if not isinstance(tree, dict):
            raise MalformedContentError(
                message=f"top-level {self.format.upper()} value in {path!r} is not an object",
                file_path=path,
            )
        return tree

    def read(self, content: str, path: str, field: str, pattern: str = "") -> str:
        if not field:
            raise MissingFieldError(self.format, path)

        tree = self._parse(content, path)
        try:
            value = get_nested_value(tree, field)
        except VersyncError as e:
            raise _with_path(e, path) from e

        if not isinstance(value, str):
            raise FieldTypeError(
                field,
                message=f"field {field!r} in {path!r} is not a string",
                file_path=path,
            )
        return value

    def write(
        self, content: str, path: str, field: str, pattern: str, version: str
    ) -> str:
        if not field:
            raise MissingFieldError(self.format, path)

        tree = self._parse(content, path)
        try:
            set_nested_value(tree, field, version)
        except VersyncError as e:
            raise _with_path(e, path) from e

        updated = self._patch(content, field, version)
        if updated is None:
            try:
                updated = self._dump(tree, content)
            except Exception as e:  # noqa: BLE001
                raise MalformedContentError(
                    message=f"failed to serialize {self.format.upper()} for {path!r}: {e}",
                    file_path=path,
                    original_exception=e,
                ) from e

        return ensure_trailing_newline(updated)


class JsonAdapter(StructuredAdapter):
    format = FileFormat.JSON

    def _load(self, content: str) -> Any:
        return json.loads(content)

    def _dump(self, tree: dict[str, Any], original: str) -> str:
        return json.dumps(tree, indent=detect_indent(original), ensure_ascii=False)

    def _patch(self, content: str, field: str, version: str) -> str | None:
        return patch_json_value(content, split_field(field), version)


class YamlAdapter(StructuredAdapter):
    format = FileFormat.YAML

    def _load(self, content: str) -> Any:
        return yaml.safe_load(content)

    def _dump(self, tree: dict[str, Any], original: str) -> str:
        return yaml.safe_dump(
            tree, sort_keys=False, default_flow_style=False, allow_unicode=True
        )


class TomlAdapter(StructuredAdapter):
    format = FileFormat.TOML

    def _load(self, content: str) -> Any:
        return tomllib.loads(content)

    def _dump(self, tree: dict[str, Any], original: str) -> str:
        return tomli_w.dumps(tree)


class RawAdapter:
    format = FileFormat.RAW

    def read(self, content: str, path: str, field: str = "", pattern: str = "") -> str:
        return content.strip()

    def write(
        self, content: str, path: str, field: str, pattern: str, version: str
    ) -> str:
        return version if version.endswith("\n") else version + "\n"


class RegexAdapter:
    r"""
    Extracts and replaces a version through a regular expression.

    The pattern must contain exactly one capturing group, which holds the
    version. Patterns compile with re.MULTILINE, so ^ and $ anchor at line
    boundaries; use \A and \Z to anchor on the whole file. Writes replace only
    the span of the group inside the first match, so every byte outside that
    span is preserved.
    """

    format = FileFormat.REGEX

    def _compile(self, pattern: str, path: str) -> re.Pattern[str]:
        if not pattern:
            raise MissingPatternError(path)
        try:
            compiled = re.compile(pattern, re.MULTILINE)
        except re.error as e:
            raise InvalidPatternError(
                message=f"invalid regex pattern {pattern!r}: {e}",
                file_path=path,
                original_exception=e,
            ) from e
        if compiled.groups != 1:
            raise InvalidPatternError(
                message=f"pattern {pattern!r} for {path!r} must have exactly one capturing group",
                file_path=path,
            )
        return compiled

    def _match(self, compiled: re.Pattern[str], content: str, path: str) -> re.Match[str]:
        m = compiled.search(content)
        if m is None or m.group(1) is None:
            raise PatternNotMatchedError(
                message=f"no version match found in {path!r} (pattern {compiled.pattern!r})",
                file_path=path,
            )
        return m

    def read(self, content: str, path: str, field: str, pattern: str) -> str:
        compiled = self._compile(pattern, path)
        return self._match(compiled, content, path).group(1)

    def write(
        self, content: str, path: str, field: str, pattern: str, version: str
    ) -> str:
        compiled = self._compile(pattern, path)
        m = self._match(compiled, content, path)
        start, end = m.span(1)
        return content[:start] + version + content[end:]


ADAPTERS: Final[Mapping[FileFormat, FormatAdapter]] = {
    FileFormat.JSON: JsonAdapter(),
    FileFormat.YAML: YamlAdapter(),
    FileFormat.TOML: TomlAdapter(),
    FileFormat.RAW: RawAdapter(),
    FileFormat.REGEX: RegexAdapter(),
}


def get_adapter(file_format: FileFormat) -> FormatAdapter:
    """Return the adapter for a format. Raises KeyError for unknown formats."""
    return ADAPTERS[file_format]
