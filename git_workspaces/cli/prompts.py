"""Terminal prompts feeding the pure choice resolver."""

from typing import List, Optional, Sequence

from rich.console import Console
from rich.prompt import Prompt

from git_workspaces.choices import PromptKind, RemoveMode, WORK_TYPE_LABELS, resolve_choice

console = Console()


class Prompter:
    """Asks the operator, or answers with defaults when not interactive.

    Non-interactive confirmations are answered yes.
    """

    def __init__(self, interactive: bool = True):
        self.interactive = interactive

    def _ask(self, question: str, default: str = "") -> str:
        if not self.interactive:
            return default
        return Prompt.ask(question, default=default, show_default=bool(default), console=console)

    def _menu(self, entries: Sequence[str], cancel_label: Optional[str] = None) -> None:
        for number, entry in enumerate(entries, start=1):
            console.print(f"  {number}) {entry}")
        if cancel_label:
            console.print(f"  0) {cancel_label}")

    def text(self, question: str) -> str:
        return self._ask(f"[cyan]{question}[/cyan]")

    def work_type(self) -> str:
        if self.interactive:
            console.print("[cyan]What type of work is this?[/cyan]")
            self._menu(WORK_TYPE_LABELS)
        return resolve_choice(PromptKind.WORK_TYPE, WORK_TYPE_LABELS, self._ask("\nEnter number", "1"))

    def select_many(self, title: str, candidates: Sequence[str]) -> List[str]:
        """Numbers separated by spaces. Non-interactive selects nothing."""
        if self.interactive:
            console.print(f"[green]{title}:[/green]")
            self._menu(candidates)
        answer = self._ask("\n[cyan]Enter numbers to include (space-separated, e.g. '1 3 5')[/cyan]")
        return resolve_choice(PromptKind.MULTI_SELECT, candidates, answer)

    def select_one(
        self, title: str, candidates: Sequence[str], cancel_label: str = "Cancel", default: str = ""
    ) -> Optional[str]:
        """Number or name; None when cancelled. Non-interactive answers with default."""
        if self.interactive:
            console.print(f"[cyan]{title}[/cyan]")
            self._menu(candidates, cancel_label)
        return resolve_choice(PromptKind.SINGLE_SELECT, candidates, self._ask("\nEnter number or name", default))

    def remove_mode(self) -> RemoveMode:
        if self.interactive:
            console.print("[yellow]What do you want to do?[/yellow]")
            console.print("  1) Remove worktree only (keep all branches)")
            console.print("  2) Remove worktree + delete local branches (default)")
            console.print("  0) Cancel")
        return resolve_choice(PromptKind.REMOVE_MODE, (), self._ask("\nEnter number", "2"))

    def confirm(self, question: str) -> bool:
        """Defaults to no when asked, yes when not interactive."""
        answer = self._ask(f"{question} \\[y/N]") if self.interactive else "y"
        return resolve_choice(PromptKind.CONFIRM, (), answer)

    def confirm_default_yes(self, question: str) -> bool:
        return resolve_choice(PromptKind.CONFIRM_DEFAULT_YES, (), self._ask(f"{question} \\[Y/n]"))
