"""Repository discovery and validation."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import git

from git_worktree_flow.exceptions import RepositoryNotFoundError
from git_worktree_flow.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RepositoryContext:
    """The repository a workflow operates on.

    ``root`` is the primary working directory (never a linked worktree);
    ``current_directory`` is the working tree the caller is standing in,
    which may be a linked worktree of the same repository.
    """

    root: Path
    current_directory: Path

    @classmethod
    def discover(cls, path: Union[str, os.PathLike]) -> "RepositoryContext":
        """Find the repository containing ``path``.

        Raises:
            RepositoryNotFoundError: If ``path`` is not inside a git working tree
        """
        try:
            repo = git.Repo(path, search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise RepositoryNotFoundError(str(path)) from e

        try:
            if repo.bare or repo.working_tree_dir is None:
                raise RepositoryNotFoundError(str(path), "bare repository")

            current = Path(repo.working_tree_dir).resolve()
            # The common git dir belongs to the primary working directory
            common_dir = Path(repo.common_dir)
            if not common_dir.is_absolute():
                common_dir = Path(repo.git_dir, common_dir)
            root = common_dir.resolve().parent
        finally:
            repo.close()

        logger.debug(f"Discovered repository root={root} current={current}")
        return cls(root=root, current_directory=current)

    def validate(self) -> "RepositoryContext":
        """Re-check that ``root`` is still a git top level.

        Returns:
            This context, or one whose current directory falls back to the
            root when the current directory has disappeared

        Raises:
            RepositoryNotFoundError: If the root no longer resolves to a git top level
        """
        try:
            repo = git.Repo(self.root)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise RepositoryNotFoundError(str(self.root), "no longer a git repository") from e

        try:
            top_level = repo.working_tree_dir
        finally:
            repo.close()

        if top_level is None or Path(top_level).resolve() != self.root.resolve():
            raise RepositoryNotFoundError(str(self.root), "not a repository top level")

        if not self.current_directory.is_dir():
            logger.info(f"{self.current_directory} disappeared, using {self.root}")
            return RepositoryContext(root=self.root, current_directory=self.root)
        return self

    def is_current_directory(self, path: Union[str, os.PathLike]) -> bool:
        """Check whether ``path`` names the directory the caller stands in."""
        return same_path(path, self.current_directory)


def same_path(a: Union[str, os.PathLike], b: Union[str, os.PathLike]) -> bool:
    """Compare two paths after resolving symlinks."""
    return os.path.realpath(a) == os.path.realpath(b)
