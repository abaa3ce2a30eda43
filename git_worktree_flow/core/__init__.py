"""Workflow facade for git-worktree-flow."""

from .worktree_flow import WorktreeFlow

__all__ = ["WorktreeFlow"]
