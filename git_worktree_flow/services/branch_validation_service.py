"""Branch validation service for git-worktree-flow."""

import re
from typing import Optional

from git_worktree_flow.exceptions import InvalidBranchNameError

_WHITESPACE = re.compile(r"\s")
_REMOTE_PREFIX = re.compile(r"^[^/]+/")


class BranchValidationService:
    """Service for validating branch names.

    Only emptiness and whitespace are checked; everything else is left to git.
    """

    @staticmethod
    def branch_name_error(branch_name: Optional[str]) -> Optional[str]:
        """
        Explain why a branch name is rejected.

        Args:
            branch_name: Candidate branch name

        Returns:
            Error text, or None if the name is acceptable
        """
        if not branch_name or not branch_name.strip():
            return "Branch name cannot be empty"
        if _WHITESPACE.search(branch_name):
            return "Branch name cannot contain spaces"
        return None

    @classmethod
    def validate_branch_name(cls, branch_name: Optional[str]) -> str:
        """
        Validate a branch name.

        Args:
            branch_name: Candidate branch name

        Returns:
            The branch name, unchanged

        Raises:
            InvalidBranchNameError: If the name is empty or contains whitespace
        """
        error = cls.branch_name_error(branch_name)
        if error:
            raise InvalidBranchNameError(branch_name or "", error)
        return branch_name

    @staticmethod
    def strip_remote_prefix(remote_branch: str) -> str:
        """Turn "origin/feature-x" into "feature-x"."""
        return _REMOTE_PREFIX.sub("", remote_branch)
