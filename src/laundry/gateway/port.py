"""Payment gateway port (abstract interface).

The order flow never talks to a payment provider directly. It asks this
port for a payment intent at placement, for a percentage refund on
cancellation, and to authenticate capture webhooks.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class IntentResult:
    """Result of creating a payment intent."""

    success: bool
    intent_id: str | None = None
    client_secret: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class RefundResult:
    """Result of a refund attempt."""

    success: bool
    gateway_refund_id: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_intent(self, total_cents: int, order_id: str) -> IntentResult:
        """Open a payment intent the customer's client can confirm."""
        ...

    @abstractmethod
    def refund(self, order_id: str, percentage: int) -> RefundResult:
        """Refund ``percentage`` of what was captured for ``order_id``."""
        ...

    @abstractmethod
    def verify_webhook_signature(self, payload: str, signature: str) -> bool:
        """Verify that a webhook payload is authentically from the gateway."""
        ...
