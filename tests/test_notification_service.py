"""Tests for repository-state-changed notifications"""
from git_worktree_flow.services.notification_service import StateChangeEvent, StateChangeNotifier


def make_event(operation="create"):
    return StateChangeEvent(operation, "/repo", "/repo-worktrees/x", "x")


class TestStateChangeNotifier:

    def test_delivers_to_every_listener(self):
        notifier = StateChangeNotifier()
        first, second = [], []
        notifier.subscribe(first.append)
        notifier.subscribe(second.append)

        notifier.notify(make_event())

        assert first == second == [make_event()]

    def test_unsubscribe(self):
        notifier = StateChangeNotifier()
        received = []
        token = notifier.subscribe(received.append)

        assert notifier.unsubscribe(token) is True
        notifier.notify(make_event())

        assert received == []
        assert len(notifier) == 0

    def test_unsubscribe_unknown_token(self):
        notifier = StateChangeNotifier()
        token = notifier.subscribe(lambda event: None)
        notifier.unsubscribe(token)
        assert notifier.unsubscribe(token) is False

    def test_tokens_are_distinct(self):
        notifier = StateChangeNotifier()
        assert notifier.subscribe(print) != notifier.subscribe(print)
        assert len(notifier) == 2

    def test_failing_listener_does_not_stop_delivery(self, caplog):
        notifier = StateChangeNotifier()
        received = []

        def broken(event):
            raise RuntimeError("display crashed")

        notifier.subscribe(broken)
        notifier.subscribe(received.append)

        notifier.notify(make_event("sync"))

        assert [e.operation for e in received] == ["sync"]
        assert "display crashed" in caplog.text
