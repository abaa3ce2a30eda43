"""Where each branch's dedicated working directory lives."""

import re
from pathlib import Path
from typing import Union

from git_worktree_flow.constants import WORKTREE_DIR_SUFFIX

_PATH_SEPARATORS = re.compile(r"[\\/]")


class WorktreePathPolicy:
    """Maps (repository root, branch) to a worktree directory.

    Worktrees are siblings of the repository: for /code/app and branch
    feature/x the directory is /code/app-worktrees/feature-x. Names that
    differ only by "/" versus "-" (feature/x, feature-x) map to the same
    directory; git rejects the second worktree add.
    """

    def __init__(self, suffix: str = WORKTREE_DIR_SUFFIX):
        self.suffix = suffix

    def base_directory(self, repo_root: Union[str, Path]) -> Path:
        """Directory holding all worktrees of ``repo_root``."""
        root = Path(repo_root)
        return root.parent / f"{root.name}{self.suffix}"

    @staticmethod
    def directory_name(branch_name: str) -> str:
        """Branch name with every path separator replaced by a hyphen."""
        return _PATH_SEPARATORS.sub("-", branch_name)

    def worktree_path(self, repo_root: Union[str, Path], branch_name: str) -> Path:
        """Path of the dedicated worktree for ``branch_name``."""
        return self.base_directory(repo_root) / self.directory_name(branch_name)
