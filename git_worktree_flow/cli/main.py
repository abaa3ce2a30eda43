"""Command-line interface for git-worktree-flow"""

import os
import sys
from typing import List, Optional

from rich.console import Console

from git_worktree_flow.cli.args import parse_args
from git_worktree_flow.config import Config
from git_worktree_flow.core import WorktreeFlow
from git_worktree_flow.models.branch import CreateMode
from git_worktree_flow.models.results import WorkflowResult
from git_worktree_flow.models.sync import ConflictAction, StageMode
from git_worktree_flow.services.display_service import DisplayService
from git_worktree_flow.services.prompt_service import RichPrompter
from git_worktree_flow.services.workspace_opener import create_workspace_opener
from git_worktree_flow.utils.logging import setup_logging

console = Console()


def _stage_mode(args) -> Optional[StageMode]:
    if args.all:
        return StageMode.ALL
    if args.staged:
        return StageMode.STAGED
    if args.paths:
        return StageMode.PICK
    return None


def run_command(flow: WorktreeFlow, args) -> WorkflowResult:
    """Dispatch parsed arguments to the matching workflow."""
    command = args.command
    if command == "list":
        return flow.overview()
    if command == "create":
        mode = CreateMode(args.mode) if args.mode else None
        return flow.create_branch(mode=mode, base=args.base, branch_name=args.branch)
    if command == "switch":
        return flow.switch_branch(branch_name=args.branch, stash=args.stash)
    if command == "sync":
        on_conflict = ConflictAction(args.on_conflict) if args.on_conflict else None
        return flow.sync_branch(branch_name=args.branch, on_conflict=on_conflict)
    if command == "resync":
        return flow.resync(args.directory or os.getcwd())
    if command == "abort":
        return flow.abort_merge(args.directory or os.getcwd())
    if command == "remove":
        return flow.remove_branches(
            selection=args.branches or None, delete_remote=args.delete_remote, assume_yes=args.yes
        )
    if command == "commit":
        return flow.commit(
            directory=args.directory,
            stage_mode=_stage_mode(args),
            message=args.message,
            paths=args.paths or None,
        )
    if command == "push":
        return flow.push(directory=args.directory, assume_yes=args.yes)
    raise ValueError(f"Unknown command: {command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    parsed_args = parse_args(argv)
    try:
        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

        config = Config.from_git_config(
            parsed_args.repo,
            remote_name=parsed_args.remote,
            open_command=parsed_args.open_command,
            verbose=parsed_args.verbose,
            debug=parsed_args.debug,
        )

        if parsed_args.debug:
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                console.print(f"  {key}: {value}")

        flow = WorktreeFlow(
            parsed_args.repo,
            config,
            prompter=RichPrompter(console),
            opener=create_workspace_opener(config.open_command, console),
        )
        display = DisplayService(console, verbose=parsed_args.verbose)

        result = run_command(flow, parsed_args)
        if result.ok and parsed_args.command == "list":
            display.display_overview(result.payload.entries, result.payload.base_ref)
        else:
            display.display_result(result)

        return 0 if result.ok or result.cancelled else 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 0
    except ValueError as e:
        # Invalid configuration values
        console.print(f"[red]Error: {e}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
