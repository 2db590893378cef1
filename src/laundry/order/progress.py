"""Operator progression: status advances and step evidence."""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from laundry.domain import laundry
from laundry.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@laundry.command(part_of="Order")
class AdvanceOrderStatus:
    """Move a claimed order exactly one step forward."""

    order_id = Identifier(required=True)
    operator_id = Identifier(required=True)
    target_status = String(required=True, choices=OrderStatus)
    evidence_uri = String(max_length=1000)


@laundry.command(part_of="Order")
class RecordStepProgress:
    """Complete a sub-step inside in_progress or out_for_delivery."""

    order_id = Identifier(required=True)
    operator_id = Identifier(required=True)
    step = Integer(required=True, min_value=1)
    evidence_uri = String(max_length=1000)


@laundry.command_handler(part_of=Order)
class OrderProgressHandler:
    @handle(AdvanceOrderStatus)
    def advance(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.advance_to(
            OrderStatus(command.target_status),
            operator_id=command.operator_id,
            evidence_uri=command.evidence_uri,
        )
        repo.add(order)
        logger.info(
            "Order status advanced",
            order_id=str(order.id),
            operator_id=str(command.operator_id),
            status=order.status,
        )
        return order.status

    @handle(RecordStepProgress)
    def record_step(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_progress(
            operator_id=command.operator_id,
            step=command.step,
            evidence_uri=command.evidence_uri,
        )
        repo.add(order)
        return order.current_step
