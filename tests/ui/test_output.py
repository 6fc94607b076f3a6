"""
Tests for the output module.

Tests cover:
- OutputFormat.parse
- format_summary / quiet_summary
- result_to_dict: JSON structure
- DiscoveryFormatter: text, table and JSON rendering
"""

import io
import json

import pytest
from rich.console import Console

from core.models import (
    DiscoveryResult,
    ManifestSource,
    Mismatch,
    SyncCandidate,
    VersionModule,
)
from models import FileFormat
from ui.output import (
    DiscoveryFormatter,
    OutputFormat,
    format_summary,
    quiet_summary,
    result_to_dict,
)


def make_result(mismatch: bool = True) -> DiscoveryResult:
    manifest_version = "2.0.0" if mismatch else "1.0.0"
    result = DiscoveryResult(
        modules=[VersionModule("root", "/repo/.version", ".version", "1.0.0", "/repo")],
        manifests=[
            ManifestSource(
                path="/repo/package.json",
                rel_path="package.json",
                filename="package.json",
                version=manifest_version,
                format=FileFormat.JSON,
                field="version",
                description="Node.js (package.json)",
            )
        ],
        sync_candidates=[
            SyncCandidate(
                path="package.json",
                format=FileFormat.JSON,
                version=manifest_version,
                description="Node.js (package.json)",
                field="version",
            )
        ],
    )
    if mismatch:
        result.mismatches = [Mismatch("package.json", "1.0.0", "2.0.0")]
    return result


# ============================================================================
# Tests for OutputFormat
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "value,expected",
    [
        ("json", OutputFormat.JSON),
        ("TABLE", OutputFormat.TABLE),
        ("text", OutputFormat.TEXT),
        ("xml", OutputFormat.TEXT),
    ],
)
def test_output_format_parse(value, expected):
    """Should parse case-insensitively and fall back to TEXT."""
    assert OutputFormat.parse(value) is expected


# ============================================================================
# Tests for summaries
# ============================================================================


@pytest.mark.unit
def test_format_summary_empty():
    """Should say nothing was found."""
    assert "No version sources found" in format_summary(DiscoveryResult())


@pytest.mark.unit
def test_format_summary_counts():
    """Should list counts and the primary version."""
    summary = format_summary(make_result())

    assert "1 version file(s)" in summary
    assert "1 manifest(s)" in summary
    assert "1 mismatch(es)" in summary
    assert "Primary version: [bold]1.0.0[/bold]" in summary


@pytest.mark.unit
def test_quiet_summary():
    """Should render a single plain line."""
    assert quiet_summary(make_result()) == (
        "Mode: SingleModule | Modules: 1 | Manifests: 1 | Mismatches: 1 | Version: 1.0.0"
    )
    assert quiet_summary(DiscoveryResult()) == "Mode: NoModules | Modules: 0 | Manifests: 0"


# ============================================================================
# Tests for result_to_dict
# ============================================================================


@pytest.mark.unit
def test_result_to_dict_structure():
    """Should expose every list plus a summary."""
    data = result_to_dict(make_result())

    assert data["mode"] == "SingleModule"
    assert data["modules"] == [{"name": "root", "path": ".version", "version": "1.0.0"}]
    assert data["manifests"][0]["format"] == "json"
    assert data["mismatches"] == [
        {"source": "package.json", "expected": "1.0.0", "actual": "2.0.0"}
    ]
    assert data["sync_candidates"] == [
        {
            "path": "package.json",
            "format": "json",
            "field": "version",
            "description": "Node.js (package.json)",
        }
    ]
    assert data["summary"] == {
        "module_count": 1,
        "manifest_count": 1,
        "mismatch_count": 1,
        "has_mismatches": True,
        "primary_version": "1.0.0",
        "is_version_consistent": False,
    }


@pytest.mark.unit
def test_result_to_dict_omits_empty_candidate_fields():
    """Should leave out empty field and pattern values."""
    result = DiscoveryResult(
        sync_candidates=[SyncCandidate("lib/.version", FileFormat.RAW, "1.0.0", "Version file (lib/.version)")]
    )

    assert result_to_dict(result)["sync_candidates"] == [
        {"path": "lib/.version", "format": "raw", "description": "Version file (lib/.version)"}
    ]


# ============================================================================
# Tests for DiscoveryFormatter
# ============================================================================


@pytest.mark.unit
def test_format_result_json():
    """Should return parseable JSON."""
    output = DiscoveryFormatter(OutputFormat.JSON).format_result(make_result(mismatch=False))

    data = json.loads(output)
    assert data["summary"]["is_version_consistent"] is True
    assert data["mismatches"] == []


@pytest.mark.unit
def test_format_result_text_sections():
    """Should render every populated section as plain text."""
    output = DiscoveryFormatter(OutputFormat.TEXT).format_result(make_result())

    assert "Discovery Results" in output
    assert "Project Type: Single Module" in output
    assert "Version Files (.version):" in output
    assert ".version (1.0.0)" in output
    assert "Manifest Files:" in output
    assert "package.json (Node.js (package.json): 2.0.0)" in output
    assert "Version Mismatches:" in output
    assert "package.json: expected 1.0.0, found 2.0.0" in output
    assert "Sync Candidates:" in output


@pytest.mark.unit
def test_format_result_text_empty():
    """Should skip empty sections."""
    output = DiscoveryFormatter().format_result(DiscoveryResult())

    assert "Project Type: No .version files found" in output
    assert "Manifest Files:" not in output
    assert "No version sources found" in output


@pytest.mark.unit
def test_format_result_text_escapes_markup():
    """Should print values that look like markup verbatim."""
    result = DiscoveryResult(
        modules=[VersionModule("x", "/repo/[red]/.version", "[red]/.version", "1.0.0", "/repo/[red]")]
    )

    output = DiscoveryFormatter().format_result(result)

    assert "[red]/.version" in output


@pytest.mark.unit
def test_format_result_table():
    """Should render titled tables."""
    output = DiscoveryFormatter(OutputFormat.TABLE).format_result(make_result())

    assert "Version Files" in output
    assert "Manifest Files" in output
    assert "Version Mismatches" in output
    assert "EXPECTED" in output
    assert "Node.js (package.json)" in output


@pytest.mark.unit
def test_print_result_json_is_not_styled():
    """Should print raw JSON on the given console."""
    buffer = io.StringIO()
    console = Console(file=buffer, width=200, color_system=None)

    DiscoveryFormatter(OutputFormat.JSON).print_result(make_result(), console)

    assert json.loads(buffer.getvalue())["mode"] == "SingleModule"
