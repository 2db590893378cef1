"""Claim arbitration: the race between operators for an unclaimed order.

``ClaimOrder`` is a compare-and-set: the handler loads the order, applies
the ``unclaimed and unassigned`` guard and writes it back under the
repository's optimistic version check. When two operators race, the second
commit fails with ``ExpectedVersionError``. Handler-level version retry is
disabled in domain.toml, so the loser is never replayed.

``ClaimCoordinator`` turns every losing outcome into a ``ClaimResult``
instead of an exception. Callers should move on to another order rather
than retry.
"""

from dataclasses import dataclass
from enum import Enum

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError, ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from laundry.domain import laundry
from laundry.order.order import Order

logger = structlog.get_logger(__name__)


class ClaimRefusal(Enum):
    ALREADY_CLAIMED = "AlreadyClaimed"
    NOT_CLAIMABLE = "NotClaimable"


@dataclass(frozen=True)
class ClaimResult:
    success: bool
    order_id: str
    operator_id: str
    reason: ClaimRefusal | None = None

    def to_dict(self) -> dict:
        if self.success:
            return {"success": True}
        return {"success": False, "reason": self.reason.value}


@laundry.command(part_of="Order")
class ClaimOrder:
    order_id = Identifier(required=True)
    operator_id = Identifier(required=True)


@laundry.command_handler(part_of=Order)
class ClaimOrderHandler:
    @handle(ClaimOrder)
    def claim_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.claim(command.operator_id)
        repo.add(order)


class ClaimCoordinator:
    """Single entry point for operators taking ownership of an order."""

    def claim(self, order_id: str, operator_id: str) -> ClaimResult:
        """Attempt the claim once.

        Raises:
            ObjectNotFoundError: ``order_id`` does not exist.
        """
        order_id, operator_id = str(order_id), str(operator_id)
        try:
            current_domain.process(ClaimOrder(order_id=order_id, operator_id=operator_id), asynchronous=False)
        except ExpectedVersionError:
            # Another operator committed first
            logger.info("Claim lost on version conflict", order_id=order_id, operator_id=operator_id)
            return ClaimResult(
                success=False, order_id=order_id, operator_id=operator_id, reason=ClaimRefusal.ALREADY_CLAIMED
            )
        except ValidationError as exc:
            codes = exc.messages.get("code", [])
            for refusal in ClaimRefusal:
                if refusal.value in codes:
                    logger.info(
                        "Claim refused",
                        order_id=order_id,
                        operator_id=operator_id,
                        reason=refusal.value,
                    )
                    return ClaimResult(success=False, order_id=order_id, operator_id=operator_id, reason=refusal)
            raise

        logger.info("Order claimed", order_id=order_id, operator_id=operator_id)
        return ClaimResult(success=True, order_id=order_id, operator_id=operator_id)
