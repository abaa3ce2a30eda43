"""Sync state machine model"""
from enum import Enum


class SyncState(Enum):
    """State of a directory with respect to an integration merge.

    Never stored: always derived from MERGE_HEAD and the unmerged paths.
    """
    IDLE = "idle"
    MERGING_CLEAN = "merging-clean"  # Only observed mid-call, right after a clean merge
    CONFLICTED = "conflicted"
    READY_TO_FINALIZE = "ready-to-finalize"


class ConflictAction(Enum):
    """What to do with a conflicting sync."""
    OPEN = "open"  # Hand the directory to the user, merge left in progress
    ABORT = "abort"  # git merge --abort


class StageMode(Enum):
    """What a commit should include."""
    ALL = "all"
    STAGED = "staged"
    PICK = "pick"
