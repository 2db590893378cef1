"""One dispatcher call per committed order transition.

Each status-changing Order event maps to one ``NotificationEvent``.
Dispatch runs after the transition has committed and any failure is
logged and dropped, so a broken transport never blocks or reverts an order.
"""

import structlog
from protean.utils.mixins import handle

from laundry.dispatch import get_dispatcher
from laundry.dispatch.port import Audience, NotificationEvent, NotificationKind
from laundry.domain import laundry
from laundry.operator.registration import eligible_operator_ids
from laundry.order.events import (
    OrderCancelled,
    OrderClaimed,
    OrderFailed,
    OrderPlaced,
    OrderStatusChanged,
    PaymentConfirmed,
)
from laundry.order.order import Order

logger = structlog.get_logger(__name__)


def _order_number(order_id) -> str:
    return str(order_id)[:8].upper()


def dispatch(event: NotificationEvent) -> bool:
    """Send ``event``; return whether the dispatcher accepted it."""
    try:
        get_dispatcher().notify(event)
    except Exception as e:
        logger.error(
            "Failed to dispatch notification",
            order_id=event.order_id,
            kind=event.kind.value,
            audience=event.audience.value,
            error=str(e),
        )
        return False
    return True


def operators_to_alert(zip_code: str, order_id) -> list[str] | None:
    """Eligible operators for ``zip_code``, or ``None`` when the lookup fails."""
    try:
        return eligible_operator_ids(zip_code)
    except Exception as e:
        logger.error("Failed to resolve operators to alert", order_id=str(order_id), zip_code=zip_code, error=str(e))
        return None


@laundry.event_handler(part_of=Order)
class OrderNotificationHandler:
    """Tells the customer (or the operators in the zip) what just happened."""

    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        dispatch(
            NotificationEvent(
                order_id=str(event.order_id),
                kind=NotificationKind.CREATED,
                audience=Audience.CUSTOMER,
                data={
                    "customer_id": str(event.customer_id),
                    "order_number": _order_number(event.order_id),
                    "status": event.status,
                    "total_cents": event.total_amount_cents,
                    "pickup_window_start": event.pickup_window_start.isoformat(),
                    "pickup_window_end": event.pickup_window_end.isoformat(),
                },
            )
        )

    @handle(PaymentConfirmed)
    def on_payment_confirmed(self, event: PaymentConfirmed) -> None:
        """Alert every reachable operator serving the order's zip."""
        operator_ids = operators_to_alert(event.zip_code, event.order_id)
        if operator_ids is None:
            return
        logger.info(
            "Alerting operators about new order",
            order_id=str(event.order_id),
            zip_code=event.zip_code,
            operator_count=len(operator_ids),
        )
        dispatch(
            NotificationEvent(
                order_id=str(event.order_id),
                kind=NotificationKind.PAYMENT_CONFIRMED,
                audience=Audience.ELIGIBLE_OPERATORS_IN_ZIP,
                data={
                    "operator_ids": operator_ids,
                    "zip_code": event.zip_code,
                    "order_number": _order_number(event.order_id),
                    "status": event.status,
                    "service_type": event.service_type,
                    "is_express": bool(event.is_express),
                    "pickup_window_start": event.pickup_window_start.isoformat(),
                },
            )
        )

    @handle(OrderClaimed)
    def on_order_claimed(self, event: OrderClaimed) -> None:
        dispatch(
            NotificationEvent(
                order_id=str(event.order_id),
                kind=NotificationKind.CLAIMED,
                audience=Audience.CUSTOMER,
                data={
                    "customer_id": str(event.customer_id),
                    "order_number": _order_number(event.order_id),
                    "operator_id": str(event.operator_id),
                    "status": event.status,
                },
            )
        )

    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        dispatch(
            NotificationEvent(
                order_id=str(event.order_id),
                kind=NotificationKind.STATUS_CHANGED,
                audience=Audience.CUSTOMER,
                data={
                    "customer_id": str(event.customer_id),
                    "order_number": _order_number(event.order_id),
                    "previous_status": event.previous_status,
                    "status": event.status,
                    "current_step": event.current_step,
                },
            )
        )

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        dispatch(
            NotificationEvent(
                order_id=str(event.order_id),
                kind=NotificationKind.CANCELLED,
                audience=Audience.CUSTOMER,
                data={
                    "customer_id": str(event.customer_id),
                    "order_number": _order_number(event.order_id),
                    "status": event.status,
                    "refund_percentage": event.refund_percentage,
                    "refund_amount_cents": event.refund_amount_cents,
                },
            )
        )

    @handle(OrderFailed)
    def on_order_failed(self, event: OrderFailed) -> None:
        dispatch(
            NotificationEvent(
                order_id=str(event.order_id),
                kind=NotificationKind.FAILED,
                audience=Audience.CUSTOMER,
                data={
                    "customer_id": str(event.customer_id),
                    "order_number": _order_number(event.order_id),
                    "status": event.status,
                    "reason": event.reason,
                },
            )
        )


@laundry.event_handler(part_of=Order)
class ClaimedOrderBroadcastHandler:
    """Tells the other operators in the zip that a claimed order is gone."""

    @handle(OrderClaimed)
    def on_order_claimed(self, event: OrderClaimed) -> None:
        operator_ids = operators_to_alert(event.zip_code, event.order_id)
        if operator_ids is None:
            return
        others = [op for op in operator_ids if op != str(event.operator_id)]
        if not others:
            return
        dispatch(
            NotificationEvent(
                order_id=str(event.order_id),
                kind=NotificationKind.CLAIMED,
                audience=Audience.ELIGIBLE_OPERATORS_IN_ZIP,
                data={"operator_ids": others, "zip_code": event.zip_code, "status": event.status},
            )
        )
