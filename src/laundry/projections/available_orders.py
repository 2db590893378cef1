"""Operator feed of paid, unclaimed orders by zip code."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from laundry.domain import laundry
from laundry.operator.operator import OperatorCandidate
from laundry.order.events import OrderCancelled, OrderClaimed, OrderFailed, PaymentConfirmed
from laundry.order.order import Order


@laundry.projection
class AvailableOrder:
    order_id = Identifier(identifier=True, required=True)
    zip_code = String(required=True, max_length=10)
    service_type = String(required=True)
    is_express = Boolean(default=False)
    total_amount_cents = Integer(default=0)
    pickup_window_start = DateTime()
    pickup_window_end = DateTime()
    listed_at = DateTime()


@laundry.projector(projector_for=AvailableOrder, aggregates=[Order])
class AvailableOrderProjector:
    @on(PaymentConfirmed)
    def on_payment_confirmed(self, event):
        current_domain.repository_for(AvailableOrder).add(
            AvailableOrder(
                order_id=event.order_id,
                zip_code=event.zip_code,
                service_type=event.service_type,
                is_express=event.is_express,
                total_amount_cents=event.total_amount_cents,
                pickup_window_start=event.pickup_window_start,
                pickup_window_end=event.pickup_window_end,
                listed_at=event.confirmed_at,
            )
        )

    def _delist(self, order_id):
        repo = current_domain.repository_for(AvailableOrder)
        try:
            record = repo.get(str(order_id))
            repo._dao.delete(record)
        except ObjectNotFoundError:
            pass

    @on(OrderClaimed)
    def on_order_claimed(self, event):
        self._delist(event.order_id)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        self._delist(event.order_id)

    @on(OrderFailed)
    def on_order_failed(self, event):
        self._delist(event.order_id)


def available_orders_for(operator_id: str) -> list[AvailableOrder]:
    """Unclaimed orders in the zips ``operator_id`` serves, soonest pickup first.

    Raises:
        ObjectNotFoundError: the operator is not registered.
    """
    operator = current_domain.repository_for(OperatorCandidate).get(operator_id)
    repo = current_domain.repository_for(AvailableOrder)
    found = []
    for zip_code in operator.zip_codes or []:
        found.extend(repo._dao.query.filter(zip_code=zip_code).all().items)
    return sorted(found, key=lambda record: record.pickup_window_start)
