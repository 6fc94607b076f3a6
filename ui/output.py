"""
Rendering of discovery results.

Results can be rendered as styled text, as rich tables, or as JSON for
scripts. Text and table output are drawn on a rich Console; format_result()
renders onto an off-screen console and returns plain text, which keeps the
formatter easy to test, while print_result() draws on the real terminal.
"""

from enum import StrEnum
import io
import json

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from core.mismatch import is_version_consistent
from core.models import DiscoveryResult

RULE_WIDTH = 70


class OutputFormat(StrEnum):
    TEXT = "text"
    JSON = "json"
    TABLE = "table"

    @classmethod
    def parse(cls, value: str) -> "OutputFormat":
        """Convert a string to an OutputFormat, falling back to TEXT."""
        try:
            return cls(value.lower())
        except ValueError:
            return cls.TEXT


def format_summary(result: DiscoveryResult) -> str:
    """Return a one-line summary with rich markup."""
    parts: list[str] = []
    if result.modules:
        parts.append(f"{len(result.modules)} version file(s)")
    if result.manifests:
        parts.append(f"{len(result.manifests)} manifest(s)")
    if result.mismatches:
        parts.append(f"[yellow]{len(result.mismatches)} mismatch(es)[/yellow]")

    if not parts:
        return "[dim]No version sources found[/dim]"

    summary = "Found: " + ", ".join(parts)
    if result.primary_version:
        summary += f" | Primary version: [bold]{escape(result.primary_version)}[/bold]"
    return summary


def quiet_summary(result: DiscoveryResult) -> str:
    """Return a single plain-text line for --quiet mode."""
    line = (
        f"Mode: {result.mode} | Modules: {len(result.modules)}"
        f" | Manifests: {len(result.manifests)}"
    )
    if result.mismatches:
        line += f" | Mismatches: {len(result.mismatches)}"
    if result.primary_version:
        line += f" | Version: {result.primary_version}"
    return line


def result_to_dict(result: DiscoveryResult) -> dict:
    """Convert a result into JSON-serializable data."""
    return {
        "mode": str(result.mode),
        "modules": [
            {"name": m.name, "path": m.rel_path, "version": m.version}
            for m in result.modules
        ],
        "manifests": [
            {
                "path": m.rel_path,
                "filename": m.filename,
                "version": m.version,
                "format": str(m.format),
                "field": m.field,
                "description": m.description,
            }
            for m in result.manifests
        ],
        "mismatches": [
            {
                "source": m.source,
                "expected": m.expected_version,
                "actual": m.actual_version,
            }
            for m in result.mismatches
        ],
        "sync_candidates": [
            {
                k: v
                for k, v in {
                    "path": c.path,
                    "format": str(c.format),
                    "field": c.field,
                    "pattern": c.pattern,
                    "description": c.description,
                }.items()
                if v or k in ("path", "format", "description")
            }
            for c in result.sync_candidates
        ],
        "summary": {
            "module_count": len(result.modules),
            "manifest_count": len(result.manifests),
            "mismatch_count": len(result.mismatches),
            "has_mismatches": result.has_mismatches,
            "primary_version": result.primary_version,
            "is_version_consistent": is_version_consistent(result),
        },
    }


class DiscoveryFormatter:
    """Renders a DiscoveryResult in one OutputFormat."""

    def __init__(self, output_format: OutputFormat = OutputFormat.TEXT):
        self.output_format = output_format

    def format_result(self, result: DiscoveryResult) -> str:
        """Render result and return it as plain text."""
        if self.output_format is OutputFormat.JSON:
            return json.dumps(result_to_dict(result), indent=2)

        buffer = io.StringIO()
        console = Console(file=buffer, width=120, color_system=None)
        self.render(result, console)
        return buffer.getvalue()

    def print_result(self, result: DiscoveryResult, console: Console) -> None:
        """Render result on console (JSON is printed without markup)."""
        if self.output_format is OutputFormat.JSON:
            console.print(self.format_result(result), markup=False, highlight=False)
            return
        self.render(result, console)

    def render(self, result: DiscoveryResult, console: Console) -> None:
        if self.output_format is OutputFormat.TABLE:
            self._render_tables(result, console)
        else:
            self._render_text(result, console)

    def _render_text(self, result: DiscoveryResult, console: Console) -> None:
        console.print()
        console.print("[cyan]Discovery Results[/cyan]")
        console.print("[dim]" + "-" * RULE_WIDTH + "[/dim]")
        console.print(f"Project Type: [bold]{result.mode.label}[/bold]")
        console.print()

        if result.modules:
            console.print("[cyan]Version Files (.version):[/cyan]")
            for m in result.modules:
                console.print(
                    f"  [green]✓[/green] {escape(m.rel_path)} [dim]({escape(m.version)})[/dim]",
                    highlight=False,
                )
            console.print()

        if result.manifests:
            console.print("[cyan]Manifest Files:[/cyan]")
            for s in result.manifests:
                console.print(
                    f"  [green]✓[/green] {escape(s.rel_path)} [dim]({escape(s.description)}: {escape(s.version)})[/dim]",
                    highlight=False,
                )
            console.print()

        if result.mismatches:
            console.print("[yellow]Version Mismatches:[/yellow]")
            for mm in result.mismatches:
                console.print(
                    f"  [yellow]⚠[/yellow] {escape(mm.source)}: expected {escape(mm.expected_version)}, found {escape(mm.actual_version)}",
                    highlight=False,
                )
            console.print()

        if result.sync_candidates:
            console.print("[cyan]Sync Candidates:[/cyan]")
            for c in result.sync_candidates:
                console.print(
                    f"  - {escape(c.path)} [dim]({escape(c.description)})[/dim]", highlight=False
                )
            console.print()

        console.print("[dim]" + "-" * RULE_WIDTH + "[/dim]")
        console.print(format_summary(result), highlight=False)

    def _render_tables(self, result: DiscoveryResult, console: Console) -> None:
        console.print()
        console.print("[cyan]Discovery Results[/cyan]")

        if result.modules:
            table = Table(title="Version Files")
            table.add_column("PATH")
            table.add_column("VERSION")
            table.add_column("MODULE")
            for m in result.modules:
                table.add_row(m.rel_path, m.version, m.name)
            console.print(table)

        if result.manifests:
            table = Table(title="Manifest Files")
            table.add_column("PATH")
            table.add_column("VERSION")
            table.add_column("TYPE")
            for s in result.manifests:
                table.add_row(s.rel_path, s.version, s.description)
            console.print(table)

        if result.mismatches:
            table = Table(title="Version Mismatches")
            table.add_column("SOURCE")
            table.add_column("EXPECTED")
            table.add_column("ACTUAL")
            for mm in result.mismatches:
                table.add_row(mm.source, mm.expected_version, mm.actual_version)
            console.print(table)

        console.print(format_summary(result), highlight=False)
