"""Tests for branch-name validation and the worktree path policy"""
from pathlib import Path

import pytest

from git_worktree_flow.exceptions import InvalidBranchNameError, PreconditionError
from git_worktree_flow.services.branch_validation_service import BranchValidationService
from git_worktree_flow.services.worktree_path_policy import WorktreePathPolicy


class TestBranchNameValidation:
    """Only emptiness and whitespace are rejected."""

    @pytest.mark.parametrize("name", ["feature/x", "fix-123", "release/v1.2", "a", "UPPER_case"])
    def test_accepts_names_git_accepts(self, name):
        assert BranchValidationService.branch_name_error(name) is None
        assert BranchValidationService.validate_branch_name(name) == name

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_rejects_empty(self, name):
        assert BranchValidationService.branch_name_error(name) == "Branch name cannot be empty"

    @pytest.mark.parametrize("name", ["my feature", "tab\tname", " leading"])
    def test_rejects_whitespace(self, name):
        with pytest.raises(InvalidBranchNameError) as exc_info:
            BranchValidationService.validate_branch_name(name)
        assert "spaces" in str(exc_info.value)

    def test_invalid_name_is_a_precondition_failure(self):
        with pytest.raises(PreconditionError):
            BranchValidationService.validate_branch_name("bad name")

    @pytest.mark.parametrize("remote_branch,expected", [
        ("origin/feature-x", "feature-x"),
        ("origin/feature/x", "feature/x"),
        ("upstream/main", "main"),
    ])
    def test_strip_remote_prefix(self, remote_branch, expected):
        assert BranchValidationService.strip_remote_prefix(remote_branch) == expected


class TestWorktreePathPolicy:
    """Worktrees live in a sibling directory of the repository."""

    def test_sibling_directory(self):
        policy = WorktreePathPolicy()
        assert policy.base_directory("/code/app") == Path("/code/app-worktrees")

    def test_flat_branch(self):
        policy = WorktreePathPolicy()
        assert policy.worktree_path("/code/app", "bugfix") == Path("/code/app-worktrees/bugfix")

    def test_hierarchical_branch_is_flattened(self):
        policy = WorktreePathPolicy()
        assert policy.worktree_path("/code/app", "feature/ui/login") == Path(
            "/code/app-worktrees/feature-ui-login"
        )

    def test_backslash_is_a_separator_too(self):
        assert WorktreePathPolicy.directory_name("feature\\x") == "feature-x"

    def test_deterministic(self):
        policy = WorktreePathPolicy()
        assert policy.worktree_path("/r", "feature/x") == policy.worktree_path("/r", "feature/x")

    def test_separator_collision_is_accepted(self):
        """feature/x and feature-x share a directory; git refuses the second add."""
        policy = WorktreePathPolicy()
        assert policy.worktree_path("/r", "feature/x") == policy.worktree_path("/r", "feature-x")

    def test_custom_suffix(self):
        policy = WorktreePathPolicy("-wt")
        assert policy.worktree_path("/code/app", "x") == Path("/code/app-wt/x")
