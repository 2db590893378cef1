"""Order cancellation and the refund that follows it.

The refund percentage depends only on the state the order was in when the
cancellation was accepted (``[custom.refund_policy]``). The refund itself
is requested after the cancellation commits; a gateway failure is logged
and the order stays cancelled.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from laundry import settings
from laundry.domain import laundry
from laundry.gateway import get_gateway
from laundry.order.events import OrderCancelled, PaymentCapturedAfterClose
from laundry.order.order import Order

logger = structlog.get_logger(__name__)


@laundry.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    initiator = String(required=True, max_length=100)  # customer id or "admin"
    reason = Text()


@laundry.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        refund_percentage = settings.refund_percentage_for(order.status)
        order.cancel(
            reason=command.reason,
            cancelled_by=command.initiator,
            refund_percentage=refund_percentage,
        )
        repo.add(order)
        return {"refund_percentage": refund_percentage, "new_status": order.status}


def request_refund(order_id: str, percentage: int, amount_cents: int) -> bool:
    """Ask the gateway to refund ``percentage`` of the captured amount."""
    try:
        result = get_gateway().refund(order_id, percentage)
    except Exception as e:
        logger.error("Refund request raised", order_id=order_id, error=str(e))
        return False

    if result.success:
        logger.info(
            "Refund requested",
            order_id=order_id,
            percentage=percentage,
            amount_cents=amount_cents,
            refund_id=result.gateway_refund_id,
        )
    else:
        logger.error(
            "Refund failed",
            order_id=order_id,
            percentage=percentage,
            reason=result.failure_reason,
        )
    return result.success


@laundry.event_handler(part_of=Order)
class RefundEventHandler:
    """Requests refunds once the change that owes them has committed."""

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        if not event.refund_amount_cents:
            # Nothing was captured, or the policy refunds nothing
            return
        request_refund(str(event.order_id), event.refund_percentage, event.refund_amount_cents)

    @handle(PaymentCapturedAfterClose)
    def on_late_capture(self, event: PaymentCapturedAfterClose) -> None:
        if not event.refund_amount_cents:
            return
        request_refund(str(event.order_id), event.refund_percentage, event.refund_amount_cents)
