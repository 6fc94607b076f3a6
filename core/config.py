"""
Project configuration for discovery.

Configuration is optional. When present it lives in a JSON file at the
project root (".versync.json") and looks like:

    {
        "exclude": ["examples/*", "*.bak"],
        "discovery": {
            "enabled": true,
            "recursive": true,
            "module_max_depth": 10,
            "manifest_max_depth": 3
        }
    }

Every key may be omitted; absent values fall back to the defaults in
constants.py.
"""

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Any, Optional

from constants import DEFAULT_MODULE_MAX_DEPTH
from core.exceptions import ConfigLoadError, FileNotFoundInStorageError
from core.file_io import FileSystem


@dataclass(frozen=True)
class DiscoveryOptions:
    """
    Discovery switches.

    Attributes:
        enabled: When False, no .version markers are collected at all.
        recursive: When False, only the root .version marker is collected.
        module_max_depth: Depth limit for the .version walk.
        manifest_max_depth: Depth limit for the manifest walk. None means
            "use the default" (see DEFAULT_MANIFEST_MAX_DEPTH).
    """

    enabled: bool = True
    recursive: bool = True
    module_max_depth: int = DEFAULT_MODULE_MAX_DEPTH
    manifest_max_depth: Optional[int] = None


@dataclass(frozen=True)
class Config:
    exclude: tuple[str, ...] = ()
    discovery: DiscoveryOptions = field(default_factory=DiscoveryOptions)

    def exclude_patterns(self) -> list[str]:
        """Glob patterns matched against entry names and root-relative paths."""
        return list(self.exclude)

    def discovery_options(self) -> DiscoveryOptions:
        return self.discovery

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """
        Build a Config from decoded JSON.

        Raises:
            ConfigLoadError: If a value has the wrong type or a depth is negative.
        """
        if not isinstance(data, dict):
            raise ConfigLoadError("configuration must be a JSON object")

        exclude = data.get("exclude", [])
        if not isinstance(exclude, list) or not all(isinstance(p, str) for p in exclude):
            raise ConfigLoadError("'exclude' must be a list of glob patterns")

        raw = data.get("discovery", {})
        if not isinstance(raw, dict):
            raise ConfigLoadError("'discovery' must be an object")

        for key in ("enabled", "recursive"):
            if key in raw and not isinstance(raw[key], bool):
                raise ConfigLoadError(f"'discovery.{key}' must be a boolean")

        for key in ("module_max_depth", "manifest_max_depth"):
            if key not in raw:
                continue
            value = raw[key]
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigLoadError(f"'discovery.{key}' must be an integer")
            if value < 0:
                raise ConfigLoadError(f"'discovery.{key}' cannot be negative")

        options = DiscoveryOptions(
            enabled=raw.get("enabled", True),
            recursive=raw.get("recursive", True),
            module_max_depth=raw.get("module_max_depth", DEFAULT_MODULE_MAX_DEPTH),
            manifest_max_depth=raw.get("manifest_max_depth"),
        )
        return cls(exclude=tuple(exclude), discovery=options)


def load_config(fs: FileSystem, config_path: Path) -> Config:
    """
    Load configuration from a JSON file.

    Args:
        fs: Storage to read from.
        config_path: Path to the configuration file.

    Returns:
        The parsed Config, or a default Config if the file does not exist.

    Raises:
        ConfigLoadError: If the file is not valid JSON or fails validation.
        FileReadError: If the file exists but cannot be read.
    """
    try:
        data = fs.read_file(config_path)
    except FileNotFoundInStorageError:
        return Config()

    try:
        decoded = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigLoadError(
            message=f"Failed to parse configuration file: {config_path}",
            file_path=str(config_path),
            original_exception=e,
        ) from e

    try:
        return Config.from_dict(decoded)
    except ConfigLoadError as e:
        raise ConfigLoadError(
            message=f"Invalid configuration in {config_path}: {e.message}",
            file_path=str(config_path),
        ) from e
