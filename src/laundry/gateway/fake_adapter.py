"""Configurable fake payment gateway for development and testing.

Simulates intents and refunds without external calls. Behaviour can be
flipped at runtime through ``/payments/gateway/configure`` or directly in
tests. Webhooks are signed with an HMAC-SHA256 of the raw payload.
"""

import hashlib
import hmac
from uuid import uuid4

from laundry.gateway.port import IntentResult, PaymentGateway, RefundResult


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, webhook_secret: str = "whsec_local") -> None:
        self.webhook_secret = webhook_secret
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def reset(self) -> None:
        self.should_succeed = True
        self.failure_reason = "Card declined"
        self.calls.clear()

    def create_intent(self, total_cents: int, order_id: str) -> IntentResult:
        self.calls.append({"method": "create_intent", "total_cents": total_cents, "order_id": order_id})

        if self.should_succeed:
            intent_id = f"pi_fake_{uuid4().hex[:12]}"
            return IntentResult(
                success=True,
                intent_id=intent_id,
                client_secret=f"{intent_id}_secret_{uuid4().hex[:8]}",
            )
        return IntentResult(success=False, failure_reason=self.failure_reason)

    def refund(self, order_id: str, percentage: int) -> RefundResult:
        self.calls.append({"method": "refund", "order_id": order_id, "percentage": percentage})

        if self.should_succeed:
            return RefundResult(success=True, gateway_refund_id=f"re_fake_{uuid4().hex[:12]}")
        return RefundResult(success=False, failure_reason=self.failure_reason)

    def sign(self, payload: str) -> str:
        """Signature the gateway would send for ``payload``."""
        return hmac.new(self.webhook_secret.encode(), payload.encode(), hashlib.sha256).hexdigest()

    def verify_webhook_signature(self, payload: str, signature: str) -> bool:
        return hmac.compare_digest(self.sign(payload), signature or "")
