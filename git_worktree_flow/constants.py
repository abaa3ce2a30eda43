"""Shared constants for git-worktree-flow."""

DEFAULT_REMOTE = "origin"
DEFAULT_BRANCH_CANDIDATES = ["main", "master"]
WORKTREE_DIR_SUFFIX = "-worktrees"

# git config section read by Config.from_git_config
GIT_CONFIG_SECTION = "worktree-flow"

STASH_MESSAGE_TEMPLATE = "auto-stash before switching to {branch}"

# Substring git prints when `push --delete` targets a missing remote branch
REMOTE_REF_MISSING = "remote ref does not exist"

# Labels for `git status --porcelain` codes
STATUS_LABELS = {
    "M": "Modified",
    "A": "Added",
    "D": "Deleted",
    "R": "Renamed",
    "C": "Copied",
    "U": "Unmerged",
    "??": "Untracked",
    "AM": "Added + Modified",
    "MM": "Modified (staged + unstaged)",
}

# Conflict resolution actions offered after a conflicting sync
ACTION_OPEN_WORKSPACE = "Open in New Window"
ACTION_ABORT_MERGE = "Abort Merge"

# Dirty working tree resolutions offered before an in-place checkout
ACTION_STASH_AND_SWITCH = "Switch Anyway (stash changes)"
ACTION_CANCEL = "Cancel"

# Removal confirmation choices
ACTION_DELETE = "Delete"
ACTION_DELETE_WITH_REMOTE = "Delete + Remove Remote"

# Push confirmation choices
ACTION_PUSH = "Push"
