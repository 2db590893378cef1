"""Notification dispatcher port: the outbound side of every order transition.

Transport (push, SMS, email) lives behind this interface. The order flow
hands over one ``NotificationEvent`` per committed transition and moves on;
a failing dispatcher never affects the order.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum


class NotificationKind(Enum):
    CREATED = "created"
    PAYMENT_CONFIRMED = "payment_confirmed"
    CLAIMED = "claimed"
    STATUS_CHANGED = "status_changed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class Audience(Enum):
    CUSTOMER = "customer"
    OPERATOR = "operator"
    ELIGIBLE_OPERATORS_IN_ZIP = "eligible_operators_in_zip"


@dataclass(frozen=True)
class NotificationEvent:
    order_id: str
    kind: NotificationKind
    audience: Audience
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "kind": self.kind.value,
            "audience": self.audience.value,
            "data": self.data,
        }


class NotificationDeliveryError(Exception):
    """The dispatcher could not accept the notification."""


class NotificationDispatcher(ABC):
    """Abstract interface for notification dispatch adapters."""

    @abstractmethod
    def notify(self, event: NotificationEvent) -> None:
        """Hand ``event`` to the transport.

        Raises:
            NotificationDeliveryError: when the transport rejects it.
        """
        ...
