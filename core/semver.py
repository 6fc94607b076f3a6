"""
Semantic version parsing used as a shape check during discovery.

Discovery only keeps manifest values that look like a semantic version, so
unrelated "version" fields (schema versions, API levels) do not pollute the
report. Version arithmetic is out of scope here.
"""

from dataclasses import dataclass
import re
from typing import Final

from core.exceptions import InvalidVersionError

# Guards the regex against pathological input.
MAX_VERSION_LENGTH: Final[int] = 128

_VERSION_RE: Final[re.Pattern[str]] = re.compile(
    r"^v?([^.\-+]+)\.([^.\-+]+)\.([^.\-+]+)"  # major.minor.patch
    r"(?:-([0-9A-Za-z\-.]+))?"  # optional pre-release
    r"(?:\+([0-9A-Za-z\-.]+))?$"  # optional build metadata
)


@dataclass(frozen=True)
class SemVersion:
    major: int
    minor: int
    patch: int
    pre_release: str = ""
    build: str = ""

    def __str__(self) -> str:
        s = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre_release:
            s += f"-{self.pre_release}"
        if self.build:
            s += f"+{self.build}"
        return s


def parse_version(value: str) -> SemVersion:
    """
    Parse a semantic version string.

    Supported forms: "1.2.3", "v1.2.3", "1.2.3-alpha.1", "1.2.3+build.7" and
    "1.2.3-rc.1+build.7". Surrounding whitespace is ignored.

    Raises:
        InvalidVersionError: If the string exceeds MAX_VERSION_LENGTH, does not
            match major.minor.patch, or a numeric part is not an integer.
    """
    trimmed = value.strip()
    if len(trimmed) > MAX_VERSION_LENGTH:
        raise InvalidVersionError(
            f"invalid version format: version string exceeds maximum length of {MAX_VERSION_LENGTH}"
        )

    m = _VERSION_RE.match(trimmed)
    if m is None:
        raise InvalidVersionError(f"invalid version format: {value!r}")

    parts: list[int] = []
    for label, raw in zip(("major", "minor", "patch"), m.groups()[:3]):
        if not (raw.isascii() and raw.isdigit()):
            raise InvalidVersionError(f"invalid version format: invalid {label} version: {raw!r}")
        parts.append(int(raw))

    return SemVersion(
        major=parts[0],
        minor=parts[1],
        patch=parts[2],
        pre_release=m.group(4) or "",
        build=m.group(5) or "",
    )


def is_valid_semver(value: str) -> bool:
    """Return True if value parses as a semantic version (a leading "v" is allowed)."""
    try:
        parse_version(value)
    except InvalidVersionError:
        return False
    return True
