"""
Interactive follow-up after discovery.

Once discovery has reported where versions live, the workflow offers to fix
what it found:

1. No .version marker but a version elsewhere: offer to create .version at
   the project root holding the primary version.
2. Mismatches: offer to rewrite the out-of-sync files with the primary
   version, letting the user choose which ones.

Each file is written independently. A failure on one file is reported and
the remaining files are still processed; there is no rollback.
"""

from pathlib import Path
from typing import Optional

from rich import print as pr
from rich.markup import escape

from constants import VERSION_FILENAME
from core.cancellation import CancellationToken
from core.exceptions import VersyncError
from core.models import DiscoveryResult, SyncCandidate
from core.parser import FileConfig, VersionWriter
from models import FileFormat
from ui.prompts import FileTreeBuilder, Prompter


class SyncWorkflow:
    """
    Drives the post-discovery prompts and writes.

    Attributes:
        prompter: Source of user answers.
        result: The discovery result to act on.
        writer: Writer used for every file update.
        root: Scan root; sync candidate paths are relative to it.
        token: Optional cancellation token passed to every write.
    """

    def __init__(
        self,
        prompter: Prompter,
        result: DiscoveryResult,
        writer: VersionWriter,
        root: Path,
        token: Optional[CancellationToken] = None,
    ):
        self.prompter = prompter
        self.result = result
        self.writer = writer
        self.root = root
        self.token = token

    def run(self) -> list[str]:
        """
        Run the workflow.

        Returns:
            list[str]: Paths (relative to root) that were written.
        """
        written: list[str] = []

        if not self.result.has_modules and self.result.primary_version:
            written.extend(self._offer_version_file())

        if self.result.has_mismatches:
            written.extend(self._sync_mismatches())

        return written

    def _offer_version_file(self) -> list[str]:
        path = self.root / VERSION_FILENAME
        if self.writer.exists(str(path), self.token):
            return []

        version = self.result.primary_version
        if not self.prompter.confirm(
            f"No {VERSION_FILENAME} file found. Create one with version {version}?"
        ):
            return []

        if self._write(FileConfig(path=str(path), format=FileFormat.RAW), VERSION_FILENAME):
            return [VERSION_FILENAME]
        return []

    def mismatched_candidates(self) -> list[SyncCandidate]:
        """Sync candidates whose file is reported as a mismatch."""
        sources = {m.source for m in self.result.mismatches}
        return [c for c in self.result.sync_candidates if c.path in sources]

    def _sync_mismatches(self) -> list[str]:
        candidates = self.mismatched_candidates()
        if not candidates:
            return []

        version = self.result.primary_version
        if not self.prompter.confirm(
            f"{len(candidates)} file(s) are out of sync with {version}. Update them now?"
        ):
            return []

        by_path = {Path(c.path): c for c in candidates}
        options = [
            (f"{label}  ({by_path[value].version} → {version})", value)
            for label, value in FileTreeBuilder(list(by_path)).render()
            if value in by_path
        ]
        selected = self.prompter.multi_select(
            "Select the files to update", options, defaults=list(by_path)
        )

        written: list[str] = []
        for path in selected:
            candidate = by_path.get(Path(path))
            if candidate is None:
                continue
            cfg = candidate.to_file_config()
            cfg = FileConfig(
                path=str(self.root / cfg.path),
                format=cfg.format,
                field=cfg.field,
                pattern=cfg.pattern,
            )
            if self._write(cfg, candidate.path):
                written.append(candidate.path)
        return written

    def _write(self, cfg: FileConfig, display_path: str) -> bool:
        version = self.result.primary_version
        try:
            self.writer.write(cfg, version, self.token)
        except VersyncError as e:
            pr(f"[red]Error:[/red] {escape(e.message)}")
            return False

        pr(f"[green]✓[/green] Updated {escape(display_path)} to [bold]{escape(version)}[/bold]")
        return True
