"""Operator candidate registration and availability."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, List, String
from protean.utils.globals import current_domain

from laundry.domain import laundry
from laundry.operator.operator import OperatorCandidate


@laundry.command(part_of="OperatorCandidate")
class RegisterOperatorCandidate:
    """Register (or re-register) an approved operator and the zips they serve."""

    operator_id = Identifier(required=True)
    name = String(max_length=150)
    zip_codes = List(content_type=String(max_length=10))
    is_online = Boolean(default=False)
    notifications_enabled = Boolean(default=True)


@laundry.command(part_of="OperatorCandidate")
class UpdateOperatorAvailability:
    """Toggle an operator's online/active/notification flags."""

    operator_id = Identifier(required=True)
    is_online = Boolean()
    is_active = Boolean()
    notifications_enabled = Boolean()


@laundry.command_handler(part_of=OperatorCandidate)
class OperatorCandidateHandler:
    @handle(RegisterOperatorCandidate)
    def register(self, command):
        repo = current_domain.repository_for(OperatorCandidate)
        try:
            operator = repo.get(command.operator_id)
            operator.name = command.name
        except ObjectNotFoundError:
            operator = OperatorCandidate(operator_id=command.operator_id, name=command.name)
        operator.assign_zip_codes(command.zip_codes or [])
        operator.set_availability(
            is_online=command.is_online,
            is_active=True,
            notifications_enabled=command.notifications_enabled,
        )
        repo.add(operator)
        return str(operator.operator_id)

    @handle(UpdateOperatorAvailability)
    def update_availability(self, command):
        repo = current_domain.repository_for(OperatorCandidate)
        operator = repo.get(command.operator_id)
        operator.set_availability(
            is_online=command.is_online,
            is_active=command.is_active,
            notifications_enabled=command.notifications_enabled,
        )
        repo.add(operator)


def eligible_operator_ids(zip_code: str) -> list[str]:
    """Operators who should be alerted about an order in ``zip_code``."""
    candidates = (
        current_domain.repository_for(OperatorCandidate)
        ._dao.query.filter(is_active=True, is_online=True, notifications_enabled=True)
        .all()
        .items
    )
    return sorted(str(op.operator_id) for op in candidates if op.serves(zip_code))
