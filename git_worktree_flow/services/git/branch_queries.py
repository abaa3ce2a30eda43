"""Branch query service for git-worktree-flow.

Read-only questions about a repository. Nothing here caches: every call
re-reads the live state of the directory it is given.
"""

import os
from typing import List, Optional, Union, TYPE_CHECKING

from git_worktree_flow.exceptions import DefaultBranchNotFoundError, GitOperationError
from git_worktree_flow.models.branch import Divergence, FileStatus
from git_worktree_flow.services.git.executor import GitExecutor
from git_worktree_flow.utils.logging import get_logger

if TYPE_CHECKING:
    from git_worktree_flow.config import Config

logger = get_logger(__name__)

Directory = Union[str, os.PathLike]


class BranchQueries:
    """Service for querying branch and working tree information."""

    def __init__(self, executor: GitExecutor, config: "Config"):
        """Initialize the branch queries service.

        Args:
            executor: GitExecutor used for every git call
            config: Configuration (remote name, default branch candidates)
        """
        self.executor = executor
        self.config = config
        self.remote_name = config.remote_name

    @staticmethod
    def _lines(output: str) -> List[str]:
        return [line for line in output.split("\n") if line.strip()]

    def get_current_branch(self, directory: Directory) -> str:
        """Get the branch checked out in ``directory`` ("HEAD" when detached)."""
        return self.executor.run(
            directory, "rev-parse", "--abbrev-ref", "HEAD", operation="get_current_branch"
        ).strip()

    def get_head_commit(self, directory: Directory) -> Optional[str]:
        """Get the commit HEAD points at, or None for an unborn branch."""
        try:
            return self.executor.run(directory, "rev-parse", "--verify", "-q", "HEAD").strip()
        except GitOperationError:
            return None

    def get_local_branches(self, directory: Directory) -> List[str]:
        """List local branch names."""
        output = self.executor.run(
            directory, "branch", "--format=%(refname:short)", operation="list_local_branches"
        )
        return [line.strip() for line in self._lines(output)]

    def get_remote_branches(self, directory: Directory, fetch: bool = True) -> List[str]:
        """List remote-tracking branches such as "origin/feature-x".

        Args:
            directory: Directory inside the repository
            fetch: Fetch all remotes first so the listing is current

        Returns:
            Remote branch names, without the ``<remote>/HEAD`` aliases
        """
        if fetch:
            logger.debug("Fetching all remotes before listing remote branches")
            self.executor.run(directory, "fetch", "--all", operation="fetch")

        output = self.executor.run(
            directory, "branch", "-r", "--format=%(refname:short)", operation="list_remote_branches"
        )
        branches = []
        for name in (line.strip() for line in self._lines(output)):
            # refs/remotes/origin/HEAD shortens to "origin" or "origin/HEAD"
            if "/" not in name or name.endswith("/HEAD"):
                continue
            branches.append(name)
        logger.debug(f"Found {len(branches)} remote branches")
        return branches

    def get_remotes(self, directory: Directory) -> List[str]:
        """List configured remote names."""
        output = self.executor.run(directory, "remote", operation="list_remotes")
        return [line.strip() for line in self._lines(output)]

    def get_default_remote_branch(self, directory: Directory) -> str:
        """Resolve the default integration branch, e.g. "origin/main".

        Uses the remote's symbolic HEAD, then probes the configured candidate
        names in order.

        Raises:
            DefaultBranchNotFoundError: If nothing resolves
        """
        try:
            ref = self.executor.run(
                directory, "symbolic-ref", f"refs/remotes/{self.remote_name}/HEAD", "--short"
            ).strip()
            if ref:
                logger.debug(f"Default branch from {self.remote_name}/HEAD: {ref}")
                return ref
        except GitOperationError as e:
            logger.debug(f"{self.remote_name}/HEAD not set: {e}")

        for candidate in self.config.default_branch_candidates:
            ref = f"{self.remote_name}/{candidate}"
            try:
                self.executor.run(directory, "rev-parse", "--verify", "-q", ref)
                logger.debug(f"Default branch by probe: {ref}")
                return ref
            except GitOperationError:
                continue

        raise DefaultBranchNotFoundError(self.remote_name, self.config.default_branch_candidates)

    def get_working_tree_status(self, directory: Directory) -> List[FileStatus]:
        """Get per-file status of ``directory`` (modified, added, untracked, ...)."""
        output = self.executor.run(
            directory, "status", "--porcelain", "-z", operation="get_working_tree_status"
        )

        # NUL-separated "XY path" records, paths unquoted
        fields = output.split("\0")
        entries = []
        i = 0
        while i < len(fields):
            record = fields[i]
            i += 1
            if len(record) < 4:
                continue
            index_status, worktree_status = record[0], record[1]
            if index_status in ("R", "C"):
                # Renames and copies carry the original path as the next field
                i += 1
            entries.append(
                FileStatus(path=record[3:], index_status=index_status, worktree_status=worktree_status)
            )
        return entries

    def is_dirty(self, directory: Directory) -> bool:
        """Check whether ``directory`` has uncommitted or untracked changes."""
        return bool(self.get_working_tree_status(directory))

    def get_divergence(self, directory: Directory, branch: str, reference: str) -> Divergence:
        """Count commits ``branch`` is ahead of and behind ``reference``."""
        output = self.executor.run(
            directory,
            "rev-list",
            "--left-right",
            "--count",
            f"{reference}...{branch}",
            operation="get_divergence",
            branch=branch,
        )
        behind, ahead = (int(value) for value in output.split())
        return Divergence(ahead=ahead, behind=behind)

    def get_conflict_files(self, directory: Directory) -> List[str]:
        """List files with unresolved merge conflicts in ``directory``."""
        output = self.executor.run(
            directory, "diff", "--name-only", "-z", "--diff-filter=U", operation="list_conflict_files"
        )
        return [path for path in output.split("\0") if path]

    def is_merge_in_progress(self, directory: Directory) -> bool:
        """Check whether ``directory`` has a merge in progress (MERGE_HEAD exists)."""
        try:
            self.executor.run(directory, "rev-parse", "-q", "--verify", "MERGE_HEAD")
            return True
        except GitOperationError:
            return False

    def has_upstream(self, directory: Directory, branch: str) -> bool:
        """Check whether ``branch`` has an upstream tracking branch."""
        try:
            self.executor.run(directory, "rev-parse", "--abbrev-ref", f"{branch}@{{upstream}}")
            return True
        except GitOperationError:
            return False

    def get_unpushed_commits(self, directory: Directory, upstream_ref: Optional[str] = None) -> List[str]:
        """List "<sha> <subject>" lines not yet on ``upstream_ref``.

        Args:
            directory: Working directory whose HEAD is inspected
            upstream_ref: Upstream to compare against; None lists the commits of
                HEAD that are on no branch of the configured remote
        """
        if upstream_ref:
            args = ["log", f"{upstream_ref}..HEAD", "--oneline"]
        else:
            args = ["log", "HEAD", "--oneline", "--not", f"--remotes={self.remote_name}"]
        output = self.executor.run(directory, *args, operation="list_unpushed_commits")
        return [line.strip() for line in self._lines(output)]
