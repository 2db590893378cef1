"""Notification dispatcher registry.

Uses the in-memory fake by default; a transport-backed dispatcher can be
installed with set_dispatcher() at startup.
"""

from laundry.dispatch.fake_adapter import FakeNotificationDispatcher
from laundry.dispatch.port import NotificationDispatcher

_current_dispatcher: NotificationDispatcher | None = None


def get_dispatcher() -> NotificationDispatcher:
    """Return the configured dispatcher (singleton)."""
    global _current_dispatcher
    if _current_dispatcher is None:
        _current_dispatcher = FakeNotificationDispatcher()
    return _current_dispatcher


def set_dispatcher(dispatcher: NotificationDispatcher) -> None:
    global _current_dispatcher
    _current_dispatcher = dispatcher


def reset_dispatcher() -> None:
    """Reset the dispatcher singleton (useful for testing)."""
    global _current_dispatcher
    _current_dispatcher = None
