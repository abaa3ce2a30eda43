"""Status formatting utilities."""

from typing import Optional

from git_worktree_flow.constants import STATUS_LABELS
from git_worktree_flow.models.branch import Divergence
from git_worktree_flow.models.sync import SyncState

SYNC_STATE_DISPLAY = {
    SyncState.IDLE: "[green]idle[/green]",
    SyncState.MERGING_CLEAN: "[cyan]merging[/cyan]",
    SyncState.CONFLICTED: "[red]conflicted[/red]",
    SyncState.READY_TO_FINALIZE: "[yellow]ready to finalize[/yellow]",
}


def format_status_code(code: str) -> str:
    """
    Human label for a `git status --porcelain` code.

    Args:
        code: Two-column code with padding removed ("M", "??", "MM", ...)

    Returns:
        Label such as "Modified"; unknown codes fall back to the first
        known column, then to the raw code
    """
    if code in STATUS_LABELS:
        return STATUS_LABELS[code]
    for column in code:
        if column in STATUS_LABELS:
            return STATUS_LABELS[column]
    return code


def format_sync_state(state: SyncState) -> str:
    return SYNC_STATE_DISPLAY.get(state, state.value)


def format_divergence(divergence: Optional[Divergence]) -> str:
    """Format ahead/behind counts as "↑2 ↓1", "synced" or "" when unknown."""
    if divergence is None:
        return ""
    if divergence.is_synced:
        return "synced"
    parts = []
    if divergence.ahead:
        parts.append(f"↑{divergence.ahead}")
    if divergence.behind:
        parts.append(f"↓{divergence.behind}")
    return " ".join(parts)


def format_dirty(dirty: Optional[bool]) -> str:
    if dirty is None:
        return ""
    return "[yellow]modified[/yellow]" if dirty else "clean"
