"""Which zip codes FreshDrop serves, and how.

Owned by the service-area administration collaborator; the order flow only
reads it through ``capabilities()``.
"""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, String

from laundry.domain import laundry
from laundry.eligibility import AreaCapabilities


@laundry.aggregate
class ServiceArea:
    zip_code = String(identifier=True, required=True, max_length=10)
    allows_delivery = Boolean(default=False)
    allows_locker = Boolean(default=False)
    allows_express = Boolean(default=False)
    is_active = Boolean(default=True)
    updated_at = DateTime()

    @classmethod
    def configure(
        cls,
        zip_code: str,
        allows_delivery: bool = False,
        allows_locker: bool = False,
        allows_express: bool = False,
        is_active: bool = True,
    ):
        return cls(
            zip_code=zip_code,
            allows_delivery=allows_delivery,
            allows_locker=allows_locker,
            allows_express=allows_express,
            is_active=is_active,
            updated_at=datetime.now(UTC),
        )

    def update_flags(
        self,
        allows_delivery: bool,
        allows_locker: bool,
        allows_express: bool,
        is_active: bool,
    ) -> None:
        self.allows_delivery = allows_delivery
        self.allows_locker = allows_locker
        self.allows_express = allows_express
        self.is_active = is_active
        self.updated_at = datetime.now(UTC)

    def capabilities(self) -> AreaCapabilities:
        return AreaCapabilities(
            zip_code=self.zip_code,
            allows_delivery=bool(self.allows_delivery),
            allows_locker=bool(self.allows_locker),
            allows_express=bool(self.allows_express),
            is_active=bool(self.is_active),
        )
