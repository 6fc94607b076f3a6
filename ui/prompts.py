"""
Interactive user prompts for the versync CLI.

This module abstracts the three interactive questions the sync workflow asks
(yes/no, pick one, pick many) behind a Prompter protocol, so the workflow can
be driven by `inquirer` in a terminal and by a scripted MockPrompter in tests.
It also provides a FileTreeBuilder that renders file paths as an ASCII tree
for selection lists.

Dependencies:
    - inquirer: Interactive terminal prompts
    - typer: Aborting the CLI when a prompt is dismissed
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, Sequence, TypeVar

import inquirer  # type: ignore
from inquirer.themes import GreenPassion  # type: ignore
import typer

T = TypeVar("T")


class Prompter(Protocol):
    """
    Protocol for interactive questions.

    Options are (label, value) pairs; the selected values are returned.
    """

    def confirm(self, prompt: str, default: bool = True) -> bool:
        """Ask a yes/no question."""

    def select(self, prompt: str, options: Sequence[tuple[str, T]]) -> T:
        """Ask the user to pick exactly one option."""

    def multi_select(
        self,
        prompt: str,
        options: Sequence[tuple[str, T]],
        defaults: Sequence[T] = (),
    ) -> list[T]:
        """Ask the user to pick any number of options."""


class InquirerPrompter:
    """
    Prompter backed by inquirer.

    Dismissing a prompt (Ctrl+C) exits the CLI via typer.Exit.
    """

    def _ask(self, question: object) -> object:
        answers = inquirer.prompt([question], theme=GreenPassion())
        if not answers:
            raise typer.Exit()
        return answers["answer"]

    def confirm(self, prompt: str, default: bool = True) -> bool:
        return bool(self._ask(inquirer.Confirm("answer", message=prompt, default=default)))

    def select(self, prompt: str, options: Sequence[tuple[str, T]]) -> T:
        return self._ask(  # type: ignore[return-value]
            inquirer.List("answer", message=prompt, choices=list(options))
        )

    def multi_select(
        self,
        prompt: str,
        options: Sequence[tuple[str, T]],
        defaults: Sequence[T] = (),
    ) -> list[T]:
        question = inquirer.Checkbox(
            "answer",
            message=f"{prompt} [SPACEBAR] to toggle, [ENTER] to submit",
            choices=list(options),
            default=list(defaults),
        )
        return list(self._ask(question))  # type: ignore[call-overload]


class MockPrompter:
    """
    Scripted implementation of Prompter for testing.

    Answers are consumed in order from the per-method queues. When a queue is
    empty, confirm() returns the prompt default, select() the first option and
    multi_select() the defaults.

    Attributes (for test inspection):
        confirm_calls: Prompts passed to confirm()
        select_calls: (prompt, options) passed to select()
        multi_select_calls: (prompt, options, defaults) passed to multi_select()
    """

    def __init__(
        self,
        confirms: Sequence[bool] = (),
        selects: Sequence[object] = (),
        multi_selects: Sequence[list[object]] = (),
    ):
        self.confirms = list(confirms)
        self.selects = list(selects)
        self.multi_selects = list(multi_selects)

        self.confirm_calls: list[str] = []
        self.select_calls: list[tuple[str, list[tuple[str, object]]]] = []
        self.multi_select_calls: list[
            tuple[str, list[tuple[str, object]], list[object]]
        ] = []

    def confirm(self, prompt: str, default: bool = True) -> bool:
        self.confirm_calls.append(prompt)
        if self.confirms:
            return self.confirms.pop(0)
        return default

    def select(self, prompt: str, options: Sequence[tuple[str, T]]) -> T:
        self.select_calls.append((prompt, list(options)))
        if self.selects:
            return self.selects.pop(0)  # type: ignore[return-value]
        return options[0][1]

    def multi_select(
        self,
        prompt: str,
        options: Sequence[tuple[str, T]],
        defaults: Sequence[T] = (),
    ) -> list[T]:
        self.multi_select_calls.append((prompt, list(options), list(defaults)))
        if self.multi_selects:
            return self.multi_selects.pop(0)  # type: ignore[return-value]
        return list(defaults)


class FileTreeBuilder:
    """
    Builds a hierarchical tree structure from a list of paths for display in prompts.

    Paths are grouped under their parent directory and rendered with ASCII
    box-drawing characters (├──, └──, │), so a monorepo's version files read
    as a directory tree in selection lists.

    Attributes:
        paths: Paths to render. They are sorted before the tree is built.
    """

    class _TreeNode:
        def __init__(self, path: Path, value: Path | None = None):
            self.path = path
            self.value = value
            self.children: list[FileTreeBuilder._TreeNode] = []

    def __init__(self, paths: list[Path]):
        self.paths = sorted(paths)

    def render(self) -> list[tuple[str, Path]]:
        """
        Build and render the tree as (label, path) choices.

        Directories appear as header rows whose value is the directory itself;
        callers typically keep only the rows whose value is one of the input
        paths.

        Returns:
            list[tuple[str, Path]]: Display labels with tree characters, paired
                with the path each row stands for.
        """
        return self._render_helper(self._build_tree())

    def _render_helper(
        self, nodes: list[FileTreeBuilder._TreeNode], prefix: str = ""
    ) -> list[tuple[str, Path]]:
        choices: list[tuple[str, Path]] = []
        count = len(nodes)

        for i, node in enumerate(nodes):
            is_last = i == count - 1
            connector = "└── " if is_last else "├── "
            name = node.path.name or str(node.path)
            label = f"{prefix}{connector}{name}" + ("" if node.value else "/")
            choices.append((label, node.value or node.path))

            child_prefix = prefix + ("    " if is_last else "│   ")
            choices.extend(self._render_helper(node.children, child_prefix))
        return choices

    def _build_tree(self) -> list[FileTreeBuilder._TreeNode]:
        roots: list[FileTreeBuilder._TreeNode] = []
        dirs: dict[Path, FileTreeBuilder._TreeNode] = {}

        def node_for_dir(directory: Path) -> list[FileTreeBuilder._TreeNode]:
            if directory == Path("."):
                return roots
            if directory not in dirs:
                dirs[directory] = FileTreeBuilder._TreeNode(directory)
                node_for_dir(directory.parent).append(dirs[directory])
            return dirs[directory].children

        for path in self.paths:
            node_for_dir(path.parent).append(FileTreeBuilder._TreeNode(path, path))

        return roots
