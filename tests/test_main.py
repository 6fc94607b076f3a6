"""
End-to-end tests for the versync CLI.

Tests cover:
- discover: text, JSON and quiet output, configuration errors
- read / write: every error path exits with code 1
"""

import json

import pytest
from typer.testing import CliRunner

from main import app

runner = CliRunner()


def flat(output: str) -> str:
    """Collapse whitespace so terminal wrapping does not affect assertions."""
    return " ".join(output.split())


@pytest.fixture
def project(tmp_path):
    (tmp_path / ".version").write_text("1.0.0\n", encoding="utf-8")
    (tmp_path / "package.json").write_text(
        '{\n  "name": "demo",\n  "version": "0.9.0"\n}\n', encoding="utf-8"
    )
    return tmp_path


# ============================================================================
# Tests for discover
# ============================================================================


@pytest.mark.integration
def test_discover_text(project):
    """Should print the report with the mismatch."""
    result = runner.invoke(app, ["discover", "--path", str(project), "--no-interactive"])

    assert result.exit_code == 0
    output = flat(result.output)
    assert "Project Type: Single Module" in output
    assert "package.json: expected 1.0.0, found 0.9.0" in output


@pytest.mark.integration
def test_discover_json(project):
    """Should print machine-readable JSON."""
    result = runner.invoke(app, ["discover", "--path", str(project), "--format", "json"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["summary"]["primary_version"] == "1.0.0"
    assert data["mismatches"] == [
        {"source": "package.json", "expected": "1.0.0", "actual": "0.9.0"}
    ]


@pytest.mark.integration
def test_discover_quiet(project):
    """Should print a single summary line."""
    result = runner.invoke(app, ["discover", "--path", str(project), "--quiet"])

    assert result.exit_code == 0
    assert flat(result.output) == (
        "Mode: SingleModule | Modules: 1 | Manifests: 1 | Mismatches: 1 | Version: 1.0.0"
    )


@pytest.mark.integration
def test_discover_max_depth(tmp_path):
    """Should limit the manifest scan depth."""
    (tmp_path / "web").mkdir()
    (tmp_path / "web" / "package.json").write_text('{"version": "1.0.0"}', encoding="utf-8")

    shallow = runner.invoke(
        app, ["discover", "--path", str(tmp_path), "--format", "json", "--max-depth", "0"]
    )
    deep = runner.invoke(
        app, ["discover", "--path", str(tmp_path), "--format", "json", "--max-depth", "1"]
    )

    assert json.loads(shallow.output)["manifests"] == []
    assert len(json.loads(deep.output)["manifests"]) == 1


@pytest.mark.integration
def test_discover_uses_config_file(project):
    """Should honour exclude patterns from .versync.json."""
    (project / ".versync.json").write_text('{"exclude": ["package.json"]}', encoding="utf-8")

    result = runner.invoke(app, ["discover", "--path", str(project), "--format", "json"])

    assert result.exit_code == 0
    assert json.loads(result.output)["manifests"] == []


@pytest.mark.integration
def test_discover_invalid_config(project):
    """Should exit with code 1 for a malformed configuration file."""
    (project / ".versync.json").write_text("{oops", encoding="utf-8")

    result = runner.invoke(app, ["discover", "--path", str(project)])

    assert result.exit_code == 1
    assert "Configuration Error" in result.output


# ============================================================================
# Tests for read / write
# ============================================================================


@pytest.mark.integration
def test_read_json(project):
    """Should print the version."""
    result = runner.invoke(
        app, ["read", str(project / "package.json"), "--format", "json", "--field", "version"]
    )

    assert result.exit_code == 0
    assert result.output.strip() == "0.9.0"


@pytest.mark.integration
def test_read_missing_field_option(project):
    """Should reject a structured read without --field."""
    result = runner.invoke(app, ["read", str(project / "package.json"), "--format", "json"])

    assert result.exit_code == 1
    assert "field is required for JSON format" in flat(result.output)


@pytest.mark.integration
def test_read_missing_file(tmp_path):
    """Should exit with code 1 and a storage error."""
    result = runner.invoke(app, ["read", str(tmp_path / "VERSION"), "--format", "raw"])

    assert result.exit_code == 1
    assert "File I/O Error" in result.output


@pytest.mark.integration
def test_read_unknown_format(project):
    """Should reject an unknown format."""
    result = runner.invoke(app, ["read", str(project / ".version"), "--format", "ini"])

    assert result.exit_code == 1
    assert "invalid format: ini" in flat(result.output)


@pytest.mark.integration
def test_write_json_preserves_layout(project):
    """Should update only the version token."""
    result = runner.invoke(
        app,
        ["write", str(project / "package.json"), "1.0.0", "--format", "json", "--field", "version"],
    )

    assert result.exit_code == 0
    assert (project / "package.json").read_text(encoding="utf-8") == (
        '{\n  "name": "demo",\n  "version": "1.0.0"\n}\n'
    )


@pytest.mark.integration
def test_write_regex_no_match(project):
    """Should exit with code 1 when the pattern does not match."""
    target = project / "version.go"
    target.write_text("package main\n", encoding="utf-8")

    result = runner.invoke(
        app,
        ["write", str(target), "2.0.0", "--format", "regex", "--pattern", r'Version = "(.+)"'],
    )

    assert result.exit_code == 1
    assert "Content Error" in result.output
    assert target.read_text(encoding="utf-8") == "package main\n"
