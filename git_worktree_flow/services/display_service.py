"""Rich rendering of the branch overview and of workflow results"""
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from git_worktree_flow.formatters import (
    format_dirty,
    format_divergence,
    format_failure,
    format_success,
)
from git_worktree_flow.models.branch import BranchEntry
from git_worktree_flow.models.results import WorkflowResult
from git_worktree_flow.utils.logging import get_logger

logger = get_logger(__name__)


class DisplayService:
    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        self.console = console or Console()
        self.verbose = verbose

    def display_overview(self, entries: List[BranchEntry], base_ref: Optional[str] = None) -> None:
        """Display local branches with their worktree, changes and divergence."""
        if not entries:
            self.console.print("[yellow]No local branches found.[/yellow]")
            return

        table = Table()
        table.add_column("Branch")
        table.add_column("Worktree")
        table.add_column("Changes")
        table.add_column(f"vs {base_ref}" if base_ref else "Sync")

        for entry in entries:
            name = escape(entry.name)
            if entry.is_current:
                name = f"* {name}"
            if entry.is_orphaned:
                worktree = f"[red]{escape(entry.worktree_path)} (missing)[/red]"
            elif entry.is_main_worktree:
                worktree = "(main)"
            else:
                worktree = escape(entry.worktree_path) if entry.has_worktree else ""
            table.add_row(
                name,
                worktree,
                format_dirty(entry.dirty),
                format_divergence(entry.divergence),
                style="bold" if entry.is_current else None,
            )

        self.console.print(table)
        if self.verbose:
            self.console.print("\n* = Current directory     ↑ = Ahead     ↓ = Behind")

    def display_result(self, result: WorkflowResult) -> None:
        """Display a workflow result; cancellations print a short notice only."""
        if result.cancelled:
            self.console.print("[yellow]Cancelled[/yellow]")
            return
        if result.failure is not None:
            if result.payload is not None:
                # Partial batch: show what did succeed first
                self.console.print(format_success(result.payload))
            self.console.print(format_failure(result.failure))
            return
        self.console.print(format_success(result.payload))
