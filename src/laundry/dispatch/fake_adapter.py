"""Fake notification dispatcher that records events in memory."""

from laundry.dispatch.port import NotificationDeliveryError, NotificationDispatcher, NotificationEvent


class FakeNotificationDispatcher(NotificationDispatcher):
    def __init__(self):
        self.sent: list[NotificationEvent] = []
        self.should_succeed = True
        self.failure_reason = "Notification delivery failed"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Notification delivery failed"):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def notify(self, event: NotificationEvent) -> None:
        if not self.should_succeed:
            raise NotificationDeliveryError(self.failure_reason)
        self.sent.append(event)

    def sent_for(self, order_id: str) -> list[NotificationEvent]:
        return [event for event in self.sent if event.order_id == str(order_id)]

    def reset(self):
        """Clear sent events (useful between tests)."""
        self.sent.clear()
        self.should_succeed = True
        self.failure_reason = "Notification delivery failed"
