"""Git operations service: every mutating command git-worktree-flow issues."""

import os
from typing import List, Optional, Union, TYPE_CHECKING

from git_worktree_flow.services.git.executor import GitExecutor
from git_worktree_flow.utils.logging import get_logger

if TYPE_CHECKING:
    from git_worktree_flow.config import Config

logger = get_logger(__name__)

Directory = Union[str, os.PathLike]


class GitOperations:
    """Service for mutating Git operations.

    Each method is one git command; errors propagate as GitOperationError.
    """

    def __init__(self, executor: GitExecutor, config: "Config"):
        """Initialize the service.

        Args:
            executor: GitExecutor used for every git call
            config: Configuration (remote name)
        """
        self.executor = executor
        self.config = config
        self.remote_name = config.remote_name

    def fetch(self, directory: Directory, remote: Optional[str] = None) -> None:
        """Fetch ``remote`` (the configured remote by default)."""
        remote = remote or self.remote_name
        logger.info(f"Fetching {remote}...")
        self.executor.run(directory, "fetch", remote, operation="fetch")

    def checkout(self, directory: Directory, branch: str) -> None:
        """Check out ``branch`` in ``directory``."""
        self.executor.run(directory, "checkout", branch, operation="checkout", branch=branch)
        logger.info(f"Checked out {branch} in {directory}")

    def stash_push(self, directory: Directory, message: str, include_untracked: bool = True) -> None:
        """Stash uncommitted changes in ``directory`` under ``message``."""
        args = ["stash", "push"]
        if include_untracked:
            args.append("-u")
        self.executor.run(directory, *args, "-m", message, operation="stash")
        logger.info(f"Stashed changes in {directory}: {message}")

    def merge(self, directory: Directory, ref: str, no_edit: bool = True) -> str:
        """Merge ``ref`` into the branch checked out in ``directory``.

        Returns:
            git's merge output (e.g. "Already up to date.")
        """
        args = ["merge", ref]
        if no_edit:
            args.append("--no-edit")
        output = self.executor.run(directory, *args, operation="merge")
        logger.info(f"Merged {ref} in {directory}")
        return output

    def merge_abort(self, directory: Directory) -> None:
        """Abort the merge in progress in ``directory``."""
        self.executor.run(directory, "merge", "--abort", operation="merge_abort")
        logger.info(f"Aborted merge in {directory}")

    def stage_all(self, directory: Directory) -> None:
        """Stage every change in ``directory``, including deletions and new files."""
        self.executor.run(directory, "add", "-A", operation="stage")

    def stage_paths(self, directory: Directory, paths: List[str]) -> None:
        """Stage only ``paths``."""
        self.executor.run(directory, "add", "--", *paths, operation="stage")

    def commit(self, directory: Directory, message: Optional[str] = None) -> None:
        """Commit staged changes.

        Args:
            directory: Working directory
            message: Commit message; None keeps git's prepared message (--no-edit)
        """
        if message is None:
            self.executor.run(directory, "commit", "--no-edit", operation="commit")
        else:
            self.executor.run(directory, "commit", "-m", message, operation="commit")
        logger.info(f"Committed in {directory}")

    def push(self, directory: Directory) -> None:
        """Push the current branch to its upstream."""
        self.executor.run(directory, "push", operation="push")
        logger.info(f"Pushed from {directory}")

    def push_set_upstream(self, directory: Directory, branch: str, remote: Optional[str] = None) -> None:
        """Push ``branch`` to ``remote`` and make it the upstream."""
        remote = remote or self.remote_name
        self.executor.run(directory, "push", "-u", remote, branch, operation="push", branch=branch)
        logger.info(f"Pushed {branch} to {remote} (upstream set)")

    def delete_branch(self, directory: Directory, branch: str, force: bool = True) -> None:
        """Delete the local branch ``branch``."""
        flag = "-D" if force else "-d"
        self.executor.run(directory, "branch", flag, branch, operation="delete_branch", branch=branch)
        logger.info(f"Deleted local branch {branch}")

    def delete_remote_branch(self, directory: Directory, branch: str, remote: Optional[str] = None) -> None:
        """Delete ``branch`` on ``remote``."""
        remote = remote or self.remote_name
        self.executor.run(
            directory, "push", remote, "--delete", branch, operation="delete_remote_branch", branch=branch
        )
        logger.info(f"Deleted remote branch {remote}/{branch}")
