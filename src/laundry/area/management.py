"""Service area administration commands."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, String
from protean.utils.globals import current_domain

from laundry.area.area import ServiceArea
from laundry.domain import laundry
from laundry.eligibility import AreaCapabilities


@laundry.command(part_of="ServiceArea")
class UpsertServiceArea:
    """Create a service area or replace its capability flags."""

    zip_code = String(required=True, max_length=10)
    allows_delivery = Boolean(default=False)
    allows_locker = Boolean(default=False)
    allows_express = Boolean(default=False)
    is_active = Boolean(default=True)


@laundry.command(part_of="ServiceArea")
class DeactivateServiceArea:
    """Stop accepting new orders for a zip code."""

    zip_code = String(required=True, max_length=10)


@laundry.command_handler(part_of=ServiceArea)
class ServiceAreaHandler:
    @handle(UpsertServiceArea)
    def upsert(self, command):
        repo = current_domain.repository_for(ServiceArea)
        try:
            area = repo.get(command.zip_code)
            area.update_flags(
                allows_delivery=command.allows_delivery,
                allows_locker=command.allows_locker,
                allows_express=command.allows_express,
                is_active=command.is_active,
            )
        except ObjectNotFoundError:
            area = ServiceArea.configure(
                zip_code=command.zip_code,
                allows_delivery=command.allows_delivery,
                allows_locker=command.allows_locker,
                allows_express=command.allows_express,
                is_active=command.is_active,
            )
        repo.add(area)
        return area.zip_code

    @handle(DeactivateServiceArea)
    def deactivate(self, command):
        repo = current_domain.repository_for(ServiceArea)
        area = repo.get(command.zip_code)
        area.update_flags(
            allows_delivery=area.allows_delivery,
            allows_locker=area.allows_locker,
            allows_express=area.allows_express,
            is_active=False,
        )
        repo.add(area)


def find_area(zip_code: str) -> AreaCapabilities | None:
    """Capabilities for ``zip_code``, or None when the zip is unknown."""
    try:
        return current_domain.repository_for(ServiceArea).get(zip_code).capabilities()
    except ObjectNotFoundError:
        return None
