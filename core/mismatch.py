"""
Version consistency analysis over a discovery result.

Comparisons are exact string comparisons: "v1.0.0" and "1.0.0" differ, as do
"1.0.0" and "1.0.0+build". Normalizing before comparing would hide drift in
the files a version bump rewrites.
"""

from core.models import DiscoveryResult, Mismatch, VersionSummary


def _compare(
    result: DiscoveryResult, expected: str, include_primary: bool
) -> list[Mismatch]:
    mismatches: list[Mismatch] = []
    primary = None if include_primary else result.primary_module

    for m in result.modules:
        if m is primary:
            continue
        if m.version and m.version != expected:
            mismatches.append(Mismatch(m.rel_path, expected, m.version))

    for s in result.manifests:
        if s.version and s.version != expected:
            mismatches.append(Mismatch(s.rel_path, expected, s.version))

    return sorted(mismatches, key=lambda m: m.source)


def detect_mismatches(result: DiscoveryResult | None) -> list[Mismatch]:
    """
    Compare every version source against the result's primary version.

    The primary module itself is not compared. Sources with an empty version
    are ignored.

    Returns:
        Mismatches sorted by source path; empty if there is no primary version.
    """
    if result is None:
        return []

    expected = result.primary_version
    if not expected:
        return []

    return _compare(result, expected, include_primary=False)


def detect_mismatches_with_base(
    result: DiscoveryResult | None, base_version: str
) -> list[Mismatch]:
    """Compare every version source, the primary included, against base_version."""
    if result is None or not base_version:
        return []
    return _compare(result, base_version, include_primary=True)


def get_unique_versions(result: DiscoveryResult | None) -> list[str]:
    """Return the sorted set of non-empty versions found across all sources."""
    if result is None:
        return []

    versions = {m.version for m in result.modules if m.version}
    versions |= {s.version for s in result.manifests if s.version}
    return sorted(versions)


def is_version_consistent(result: DiscoveryResult | None) -> bool:
    """True if every source carries the same version (or there are none)."""
    return len(get_unique_versions(result)) <= 1


def get_version_summary(result: DiscoveryResult | None) -> list[VersionSummary]:
    """
    Group sources by version.

    Returns:
        One VersionSummary per distinct version, most common first; ties are
        broken by version string. Sources within a summary are sorted.
    """
    if result is None:
        return []

    by_version: dict[str, list[str]] = {}
    for m in result.modules:
        if m.version:
            by_version.setdefault(m.version, []).append(m.rel_path)
    for s in result.manifests:
        if s.version:
            by_version.setdefault(s.version, []).append(s.rel_path)

    summaries = [
        VersionSummary(version=v, count=len(sources), sources=sorted(sources))
        for v, sources in by_version.items()
    ]
    return sorted(summaries, key=lambda s: (-s.count, s.version))
