"""Workflow outcome formatting."""

from typing import List

from rich.markup import escape

from git_worktree_flow.models.results import (
    CommitResult,
    CreateResult,
    PushResult,
    RemovalFailure,
    RemovalResult,
    ResyncResult,
    SwitchOutcome,
    SwitchResult,
    SyncResult,
    WorkflowFailure,
)
from git_worktree_flow.models.sync import ConflictAction, SyncState


def format_removal_failures(items: List[RemovalFailure]) -> str:
    """
    Bullet list of failed removal items.

    Example:
        "  • feature/a: Git operation 'remove_worktree' failed: ... is locked"
    """
    return "\n".join(f"  • {escape(item.branch)}: {escape(item.reason)}" for item in items)


def format_failure(failure: WorkflowFailure) -> str:
    """Format a failure with its operation and git's own message."""
    text = f"[red]{escape(failure.operation)} failed:[/red] {escape(failure.message)}"
    if failure.items:
        text += "\n" + format_removal_failures(failure.items)
    return text


def _format_sync(result: SyncResult) -> str:
    if result.state == SyncState.CONFLICTED:
        files = "\n".join(f"  • {escape(f)}" for f in result.conflict_files)
        text = (
            f"[yellow]Merge conflicts in '{escape(result.branch_name)}' "
            f"({escape(result.directory)}):[/yellow]\n{files}"
        )
        return text + "\nResolve them, stage the files, then run 'resync' in that directory."
    if result.action == ConflictAction.ABORT:
        return f"Merge of {escape(result.base_ref)} into '{escape(result.branch_name)}' aborted"
    if result.merge_commit:
        return f"[green]'{escape(result.branch_name)}' synced with {escape(result.base_ref)}[/green]"
    return f"'{escape(result.branch_name)}' is already up to date with {escape(result.base_ref)}"


def format_success(payload) -> str:
    """One-line (or short) summary of a successful workflow payload."""
    if isinstance(payload, CreateResult):
        return (
            f"[green]Created '{escape(payload.branch_name)}'[/green] from {escape(payload.base_ref)} "
            f"at {escape(payload.worktree_path)}"
        )
    if isinstance(payload, SwitchResult):
        if payload.outcome == SwitchOutcome.ALREADY_CURRENT:
            return f"Already on '{escape(payload.branch_name)}'"
        if payload.outcome == SwitchOutcome.OPENED_WORKTREE:
            return f"'{escape(payload.branch_name)}' is checked out in {escape(payload.directory)}"
        text = f"[green]Switched to '{escape(payload.branch_name)}'[/green]"
        return text + " (changes stashed)" if payload.stashed else text
    if isinstance(payload, SyncResult):
        return _format_sync(payload)
    if isinstance(payload, ResyncResult):
        if not payload.finalized:
            return f"No merge in progress in {escape(payload.directory)}"
        text = f"[green]Merge finalized on '{escape(payload.branch_name or '')}'[/green]"
        return f"{text} ({payload.commit})" if payload.commit else text
    if isinstance(payload, RemovalResult):
        lines = [f"[green]Removed {len(payload.succeeded)} branch(es)[/green]"]
        lines.extend(f"  • {escape(name)}" for name in payload.succeeded)
        if payload.remote_deleted:
            lines.append(f"Remote branches deleted: {escape(', '.join(payload.remote_deleted))}")
        return "\n".join(lines)
    if isinstance(payload, CommitResult):
        text = f"[green]Committed {len(payload.files)} file(s) on '{escape(payload.branch_name)}'[/green]"
        if payload.commit:
            text += f" ({payload.commit})"
        return text
    if isinstance(payload, PushResult):
        text = f"[green]Pushed {len(payload.commits)} commit(s) on '{escape(payload.branch_name)}'[/green]"
        return text + " (upstream set)" if payload.set_upstream else text
    return "Done" if payload is None else escape(str(payload))
