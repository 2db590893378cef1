"""The customer's view of their orders."""

from protean.core.projector import on
from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from laundry.domain import laundry
from laundry.order.events import (
    OrderCancelled,
    OrderClaimed,
    OrderFailed,
    OrderPlaced,
    OrderProgressRecorded,
    OrderStatusChanged,
    PaymentConfirmed,
)
from laundry.order.order import Order


@laundry.projection
class OrderSummary:
    order_id = Identifier(identifier=True, required=True)
    customer_id = Identifier(required=True)
    operator_id = Identifier()
    zip_code = String(max_length=10)
    service_type = String()
    status = String(required=True)
    current_step = Integer()
    total_amount_cents = Integer(default=0)
    refund_percentage = Integer()
    pickup_window_start = DateTime()
    delivery_window_start = DateTime()
    created_at = DateTime()
    updated_at = DateTime()


@laundry.projector(projector_for=OrderSummary, aggregates=[Order])
class OrderSummaryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        current_domain.repository_for(OrderSummary).add(
            OrderSummary(
                order_id=event.order_id,
                customer_id=event.customer_id,
                zip_code=event.zip_code,
                service_type=event.service_type,
                status=event.status,
                total_amount_cents=event.total_amount_cents,
                pickup_window_start=event.pickup_window_start,
                delivery_window_start=event.delivery_window_start,
                created_at=event.placed_at,
                updated_at=event.placed_at,
            )
        )

    def _update(self, order_id, updated_at, **changes):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(str(order_id))
        for name, value in changes.items():
            setattr(summary, name, value)
        summary.updated_at = updated_at
        repo.add(summary)

    @on(PaymentConfirmed)
    def on_payment_confirmed(self, event):
        self._update(event.order_id, event.confirmed_at, status=event.status)

    @on(OrderClaimed)
    def on_order_claimed(self, event):
        self._update(event.order_id, event.claimed_at, status=event.status, operator_id=event.operator_id)

    @on(OrderStatusChanged)
    def on_status_changed(self, event):
        self._update(event.order_id, event.changed_at, status=event.status, current_step=event.current_step)

    @on(OrderProgressRecorded)
    def on_progress_recorded(self, event):
        self._update(event.order_id, event.recorded_at, current_step=event.current_step)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        self._update(
            event.order_id,
            event.cancelled_at,
            status=event.status,
            current_step=None,
            refund_percentage=event.refund_percentage,
        )

    @on(OrderFailed)
    def on_order_failed(self, event):
        self._update(event.order_id, event.failed_at, status=event.status)


def orders_for_customer(customer_id: str) -> list[OrderSummary]:
    """Newest first."""
    items = (
        current_domain.repository_for(OrderSummary)._dao.query.filter(customer_id=customer_id).all().items
    )
    return sorted(items, key=lambda summary: summary.created_at, reverse=True)
