"""
Dot-notation addressing over parsed structured documents.

Structured formats (JSON, YAML, TOML) are deserialized into a generic tree of
mappings and scalars. This module is the only place that walks or mutates
that tree: "tool.poetry.version" addresses tree["tool"]["poetry"]["version"].
"""

from collections.abc import Mapping, MutableMapping
from typing import Any

from core.exceptions import EmptyFieldPathError, FieldNotFoundError, FieldTypeError


def split_field(field: str) -> list[str]:
    """
    Split a dot-notation field path into its segments.

    Raises:
        EmptyFieldPathError: If the field is empty.
    """
    if not field:
        raise EmptyFieldPathError()
    return field.split(".")


def get_nested_value(tree: Mapping[str, Any], field: str) -> Any:
    """
    Retrieve a value from a nested mapping using dot notation.

    Args:
        tree: The parsed document.
        field: Dot-notation path, e.g. "package.version".

    Returns:
        The value stored at the path. It may be of any type.

    Raises:
        EmptyFieldPathError: If field is empty.
        FieldTypeError: If an intermediate value exists but is not a mapping.
        FieldNotFoundError: If any segment is absent.
    """
    parts = split_field(field)
    current: Any = tree

    for i, part in enumerate(parts):
        if not isinstance(current, Mapping):
            prefix = ".".join(parts[:i])
            raise FieldTypeError(
                prefix, message=f"field {prefix!r} is not an object at path {part!r}"
            )
        if part not in current:
            raise FieldNotFoundError(field)
        current = current[part]

    return current


def set_nested_value(
    tree: MutableMapping[str, Any], field: str, value: Any
) -> MutableMapping[str, Any]:
    """
    Set a value in a nested mapping using dot notation.

    Missing intermediate mappings are created. An intermediate value that
    exists but is not a mapping is never overwritten.

    Args:
        tree: The parsed document. Mutated in place.
        field: Dot-notation path, e.g. "tool.poetry.version".
        value: The value to store.

    Returns:
        The same tree, for chaining.

    Raises:
        EmptyFieldPathError: If field is empty.
        FieldTypeError: If an intermediate value is a scalar or list.
    """
    parts = split_field(field)
    current = tree

    for i, part in enumerate(parts[:-1]):
        if part not in current:
            current[part] = {}
        nxt = current[part]
        if not isinstance(nxt, MutableMapping):
            prefix = ".".join(parts[: i + 1])
            raise FieldTypeError(
                prefix, message=f"field {prefix!r} is not an object at path {part!r}"
            )
        current = nxt

    current[parts[-1]] = value
    return tree
