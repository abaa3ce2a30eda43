"""Configuration handling for git-worktree-flow"""

from dataclasses import dataclass, field, fields
from typing import Optional, List

import git

from git_worktree_flow.constants import (
    DEFAULT_BRANCH_CANDIDATES,
    DEFAULT_REMOTE,
    GIT_CONFIG_SECTION,
    WORKTREE_DIR_SUFFIX,
)
from git_worktree_flow.utils.logging import get_logger

logger = get_logger(__name__)

# git config key -> Config field
GIT_CONFIG_KEYS = {
    "remote": "remote_name",
    "open-command": "open_command",
    "worktree-suffix": "worktree_dir_suffix",
    "default-branches": "default_branch_candidates",
    "delete-remote": "delete_remote",
}


@dataclass
class Config:
    """Configuration for git-worktree-flow with validation."""

    # Remote handling
    remote_name: str = DEFAULT_REMOTE
    default_branch_candidates: List[str] = field(
        default_factory=lambda: list(DEFAULT_BRANCH_CANDIDATES)
    )
    delete_remote: bool = False  # Default answer for remote deletion on removal

    # Worktree layout
    worktree_dir_suffix: str = WORKTREE_DIR_SUFFIX

    # Workspace opening (None = print the path)
    open_command: Optional[str] = None

    # Output
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_remote_name()
        self._validate_default_branch_candidates()
        self._validate_worktree_dir_suffix()
        self._validate_open_command()

    def _validate_remote_name(self):
        """Validate remote_name is a single non-empty word."""
        if not self.remote_name or not self.remote_name.strip():
            raise ValueError("remote_name cannot be empty")
        self.remote_name = self.remote_name.strip()
        if any(ch.isspace() for ch in self.remote_name):
            raise ValueError(f"remote_name cannot contain whitespace, got '{self.remote_name}'")

    def _validate_default_branch_candidates(self):
        """Validate default_branch_candidates, accepting a comma separated string."""
        if isinstance(self.default_branch_candidates, str):
            self.default_branch_candidates = self.default_branch_candidates.split(",")
        if not isinstance(self.default_branch_candidates, list):
            raise ValueError("default_branch_candidates must be a list")
        candidates = [name.strip() for name in self.default_branch_candidates if name and name.strip()]
        if not candidates:
            raise ValueError("default_branch_candidates cannot be empty")
        self.default_branch_candidates = candidates

    def _validate_worktree_dir_suffix(self):
        """Validate worktree_dir_suffix is usable as part of a directory name."""
        if not self.worktree_dir_suffix:
            raise ValueError("worktree_dir_suffix cannot be empty")
        if "/" in self.worktree_dir_suffix or "\\" in self.worktree_dir_suffix:
            raise ValueError(
                f"worktree_dir_suffix cannot contain path separators, got '{self.worktree_dir_suffix}'"
            )

    def _validate_open_command(self):
        """Normalize a blank open_command to None."""
        if self.open_command is not None and not self.open_command.strip():
            self.open_command = None

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)

    @classmethod
    def from_git_config(cls, repo_path: str, **overrides) -> "Config":
        """Create Config from the repository's [worktree-flow] git config section.

        Keyword overrides (typically CLI flags) win over git config values;
        overrides set to None are ignored.

        Args:
            repo_path: Path inside the repository
            **overrides: Config field values to apply on top

        Returns:
            Config instance
        """
        values = {}
        try:
            repo = git.Repo(repo_path, search_parent_directories=True)
            with repo.config_reader() as reader:
                if reader.has_section(GIT_CONFIG_SECTION):
                    for key, field_name in GIT_CONFIG_KEYS.items():
                        if reader.has_option(GIT_CONFIG_SECTION, key):
                            values[field_name] = reader.get_value(GIT_CONFIG_SECTION, key)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            logger.debug(f"No git config available at {repo_path}: {e}")

        if "open_command" in values:
            values["open_command"] = str(values["open_command"])
        if "delete_remote" in values and isinstance(values["delete_remote"], str):
            values["delete_remote"] = values["delete_remote"].lower() in ("true", "yes", "1", "on")

        values.update({k: v for k, v in overrides.items() if v is not None})
        logger.debug(f"Loaded configuration: {values}")
        return cls.from_dict(values)
