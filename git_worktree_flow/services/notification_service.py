"""Repository-state-changed notifications."""

import itertools
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Optional

from git_worktree_flow.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StateChangeEvent:
    """A workflow changed refs, worktrees or the index."""
    operation: str  # "create", "switch", "sync", "resync", "abort", "remove", "commit", "push"
    repo_root: str
    directory: Optional[str] = None
    branch: Optional[str] = None


@dataclass(frozen=True)
class SubscriptionToken:
    """Opaque handle returned by subscribe()."""
    id: int


Listener = Callable[[StateChangeEvent], None]


class StateChangeNotifier:
    """Observer registry for repository-state-changed events."""

    def __init__(self):
        self._listeners: Dict[SubscriptionToken, Listener] = {}
        self._lock = Lock()
        self._ids = itertools.count(1)

    def subscribe(self, listener: Listener) -> SubscriptionToken:
        """Register ``listener``; keep the token to unsubscribe."""
        with self._lock:
            token = SubscriptionToken(next(self._ids))
            self._listeners[token] = listener
        logger.debug(f"Listener subscribed ({token.id})")
        return token

    def unsubscribe(self, token: SubscriptionToken) -> bool:
        """Remove a listener. Returns False if the token was unknown."""
        with self._lock:
            removed = self._listeners.pop(token, None) is not None
        logger.debug(f"Listener unsubscribed ({token.id}): {removed}")
        return removed

    def notify(self, event: StateChangeEvent) -> None:
        """Deliver ``event`` to every listener.

        A failing listener is logged and skipped; the workflow that fired the
        event has already completed its mutation.
        """
        with self._lock:
            listeners = list(self._listeners.values())
        logger.debug(f"Repository state changed: {event}")
        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.warning(f"State change listener failed: {e}", exc_info=True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)
