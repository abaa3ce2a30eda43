"""Command-line argument parsing for git-worktree-flow."""

import argparse
from typing import List, Optional

from git_worktree_flow.__version__ import __version__
from git_worktree_flow.models.branch import CreateMode
from git_worktree_flow.models.sync import ConflictAction


def _add_directory_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--dir",
        dest="directory",
        metavar="PATH",
        help="Directory to operate in (default: current directory)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per workflow."""
    parser = argparse.ArgumentParser(
        prog="git-worktree-flow",
        description="Branch workflows where every branch lives in its own git worktree",
        epilog="Defaults can be set in git config under [worktree-flow]: "
        "remote, open-command, worktree-suffix, default-branches, delete-remote.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument("--version", action="version", version=f"git-worktree-flow {__version__}")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--repo", default=".", metavar="PATH", help="Path inside the repository")
    parser.add_argument("--remote", help="Remote name (default: origin)")
    parser.add_argument(
        "--open-command",
        metavar="CMD",
        help="Command that opens a directory as a workspace, e.g. 'code --new-window'",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    subparsers.add_parser("list", help="Show local branches, their worktrees and divergence")

    create = subparsers.add_parser("create", help="Create a branch in its own worktree")
    create.add_argument("branch", nargs="?", help="New branch name (prompted if omitted)")
    create.add_argument(
        "--mode",
        choices=[mode.value for mode in CreateMode],
        help="default: from the remote default branch; local: from a local branch; "
        "remote: clone a remote branch",
    )
    create.add_argument("--base", help="Base branch for --mode local or remote")

    switch = subparsers.add_parser("switch", help="Open a branch's worktree or check it out here")
    switch.add_argument("branch", nargs="?", help="Branch to switch to (prompted if omitted)")
    switch.add_argument(
        "--stash",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Stash uncommitted changes before an in-place checkout (default: ask)",
    )

    sync = subparsers.add_parser("sync", help="Merge the remote default branch into a branch")
    sync.add_argument("branch", nargs="?", help="Branch to sync (prompted if omitted)")
    sync.add_argument(
        "--on-conflict",
        choices=[action.value for action in ConflictAction],
        help="What to do when the merge conflicts (default: ask)",
    )

    resync = subparsers.add_parser("resync", help="Finalize a merge once conflicts are resolved")
    _add_directory_option(resync)

    abort = subparsers.add_parser("abort", help="Abort the merge in progress")
    _add_directory_option(abort)

    remove = subparsers.add_parser("remove", help="Delete branches together with their worktrees")
    remove.add_argument("branches", nargs="*", help="Branches to remove (prompted if omitted)")
    remove.add_argument(
        "--delete-remote",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Also delete the branches on the remote",
    )
    remove.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation")

    commit = subparsers.add_parser("commit", help="Commit changes in a worktree")
    _add_directory_option(commit)
    staging = commit.add_mutually_exclusive_group()
    staging.add_argument("-a", "--all", action="store_true", help="Stage all changes")
    staging.add_argument("--staged", action="store_true", help="Commit only staged changes")
    commit.add_argument("-m", "--message", help="Commit message (prompted if omitted)")
    commit.add_argument("paths", nargs="*", help="Files to stage and commit")

    push = subparsers.add_parser("push", help="Push the branch, setting its upstream on first push")
    _add_directory_option(push)
    push.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments; no subcommand means ``list``."""
    args = build_parser().parse_args(argv)
    if args.command is None:
        args.command = "list"
    return args
