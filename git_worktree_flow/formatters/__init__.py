"""Formatting utilities for git-worktree-flow.

- status: file status codes, sync states and divergence
- results: workflow outcomes and failures
"""

from .status import (
    format_status_code,
    format_sync_state,
    format_divergence,
    format_dirty,
)

from .results import (
    format_failure,
    format_removal_failures,
    format_success,
)

__all__ = [
    # Status
    "format_status_code",
    "format_sync_state",
    "format_divergence",
    "format_dirty",
    # Results
    "format_failure",
    "format_removal_failures",
    "format_success",
]
