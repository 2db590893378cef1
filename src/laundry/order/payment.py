"""Payment outcomes reported by the gateway.

Capture confirmations and failures arrive from the gateway webhook; intent
expiry arrives as an external timeout signal. Each one resolves a ``placed``
order exactly once. A capture that lands after the order was cancelled or
failed leaves the order closed and is refunded.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from laundry.domain import laundry
from laundry.order.order import Order, OrderStatus, PaymentStatus, invalid_transition

logger = structlog.get_logger(__name__)


@laundry.command(part_of="Order")
class ConfirmPayment:
    """The gateway captured the payment for an order."""

    order_id = Identifier(required=True)
    payment_intent_id = String(max_length=255)


@laundry.command(part_of="Order")
class RecordPaymentFailure:
    """The gateway declined the payment."""

    order_id = Identifier(required=True)
    reason = String(max_length=500)


@laundry.command(part_of="Order")
class ExpirePaymentIntent:
    """The payment intent expired before the customer completed it."""

    order_id = Identifier(required=True)


@laundry.command_handler(part_of=Order)
class PaymentOutcomeHandler:
    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        # Gateways redeliver webhooks; a second capture is a no-op
        if order.payment_status == PaymentStatus.CAPTURED.value:
            logger.info("Duplicate payment confirmation ignored", order_id=str(order.id))
            return order.status

        # Free orders opened at placement; there is nothing to capture
        if not order.requires_payment and order.status != OrderStatus.PLACED.value:
            logger.info("Payment confirmation for free order ignored", order_id=str(order.id))
            return order.status

        if order.status in (OrderStatus.CANCELLED.value, OrderStatus.FAILED.value):
            order.record_late_capture()
            repo.add(order)
            logger.warning(
                "Payment captured after order closed",
                order_id=str(order.id),
                status=order.status,
                intent_id=command.payment_intent_id,
            )
            return order.status

        order.confirm_payment()
        repo.add(order)
        logger.info("Payment confirmed", order_id=str(order.id), intent_id=command.payment_intent_id)
        return order.status

    @handle(RecordPaymentFailure)
    def record_failure(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if order.status == OrderStatus.FAILED.value:
            logger.info("Duplicate payment failure ignored", order_id=str(order.id))
            return order.status

        order.mark_failed(command.reason or "Payment failed")
        repo.add(order)
        logger.info("Payment failed", order_id=str(order.id), reason=command.reason)
        return order.status

    @handle(ExpirePaymentIntent)
    def expire_intent(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        # Only an uncaptured order can lapse
        if order.status != OrderStatus.PLACED.value:
            raise invalid_transition(OrderStatus(order.status), OrderStatus.FAILED)
        order.mark_failed("Payment intent expired")
        repo.add(order)
        return order.status
