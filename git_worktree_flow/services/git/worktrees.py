"""Worktree operations service for git-worktree-flow."""

import os
from typing import Any, Dict, List, Optional, Union

from git_worktree_flow.exceptions import GitOperationError
from git_worktree_flow.models.worktree import WorktreeInfo
from git_worktree_flow.services.git.executor import GitExecutor
from git_worktree_flow.utils.logging import get_logger

logger = get_logger(__name__)

Directory = Union[str, os.PathLike]


class WorktreeService:
    """Service for listing, creating and removing git worktrees."""

    def __init__(self, executor: GitExecutor):
        """Initialize the worktree service.

        Args:
            executor: GitExecutor used for every git call
        """
        self.executor = executor

    @staticmethod
    def _build_info(entry: Dict[str, Any]) -> WorktreeInfo:
        path = entry["path"]
        return WorktreeInfo(
            path=path,
            branch_name=entry.get("branch", ""),
            commit_sha=entry.get("HEAD", ""),
            is_main=entry.get("is_main", False),
            is_orphaned=not os.path.exists(path),
        )

    def list_worktrees(self, directory: Directory) -> List[WorktreeInfo]:
        """Get all worktrees of the repository, primary directory first.

        Returns:
            List of WorktreeInfo objects
        """
        output = self.executor.run(directory, "worktree", "list", "--porcelain", operation="list_worktrees")

        # Porcelain format, one block per worktree:
        # worktree /path/to/worktree
        # HEAD commit_sha
        # branch refs/heads/branch-name   (or "detached")
        # (blank line between worktrees)
        worktrees: List[WorktreeInfo] = []
        current: Dict[str, Any] = {}
        for line in output.split("\n") + [""]:
            line = line.strip()

            if not line:
                if current.get("path"):
                    worktrees.append(self._build_info(current))
                current = {}
                continue

            if line.startswith("worktree "):
                current["path"] = line.split(" ", 1)[1]
                # First worktree in list is always the main one
                current["is_main"] = not worktrees
            elif line.startswith("HEAD "):
                current["HEAD"] = line.split(" ", 1)[1]
            elif line.startswith("branch "):
                branch_ref = line.split(" ", 1)[1]
                if branch_ref.startswith("refs/heads/"):
                    current["branch"] = branch_ref[len("refs/heads/"):]
                else:
                    current["branch"] = ""
            elif line == "detached":
                current["branch"] = ""

        logger.debug(f"Found {len(worktrees)} worktrees")
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

    def find_worktree_for_branch(self, directory: Directory, branch_name: str) -> Optional[WorktreeInfo]:
        """Get the worktree (primary directory included) that has ``branch_name`` checked out."""
        return next(
            (wt for wt in self.list_worktrees(directory) if wt.branch_name == branch_name),
            None,
        )

    def add_worktree_with_new_branch(
        self, directory: Directory, branch_name: str, path: Directory, base_ref: str, track: bool = False
    ) -> None:
        """Create ``branch_name`` at ``base_ref`` and check it out at ``path`` in one step.

        Args:
            directory: Directory inside the repository
            branch_name: New branch
            path: Worktree directory to create
            base_ref: Commit-ish the branch starts at
            track: Make ``base_ref`` (a remote branch) the upstream

        Raises:
            GitOperationError: If the path is in use, the branch exists or the base is invalid
        """
        self.executor.run(
            directory,
            "worktree",
            "add",
            "--track" if track else "--no-track",
            "-b",
            branch_name,
            os.fspath(path),
            base_ref,
            operation="create_branch_with_worktree",
            branch=branch_name,
        )
        logger.info(f"Created worktree for {branch_name} at {path} (base {base_ref})")

    def remove_worktree(self, directory: Directory, path: Directory, force: bool = False) -> None:
        """Remove the worktree at ``path``.

        Args:
            directory: Directory inside the repository
            path: Path to the worktree directory
            force: Discard uncommitted changes in the worktree

        Raises:
            GitOperationError: If git refuses (locked, missing, dirty without force)
        """
        args = ["worktree", "remove", os.fspath(path)]
        if force:
            args.append("--force")
        self.executor.run(directory, *args, operation="remove_worktree")
        logger.info(f"Removed worktree at {path}")

    def prune_worktrees(self, directory: Directory) -> bool:
        """Prune metadata of worktrees whose directories are gone.

        Returns:
            True on success; failures are logged, pruning is housekeeping only
        """
        try:
            self.executor.run(directory, "worktree", "prune", operation="prune_worktrees")
            logger.debug("Pruned orphaned worktree metadata")
            return True
        except GitOperationError as e:
            logger.warning(f"Failed to prune worktrees: {e}")
            return False
