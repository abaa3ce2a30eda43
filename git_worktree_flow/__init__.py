"""
git-worktree-flow - branch and worktree workflows on top of git
"""

from .__version__ import __version__
from .core import WorktreeFlow
from .cli.main import main

__all__ = ["WorktreeFlow", "main", "__version__"]
