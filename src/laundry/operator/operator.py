"""An operator as seen by notification targeting.

Onboarding and approval live outside this service; here we only keep the
flags that decide whether an operator should hear about a new order.
"""

from protean.fields import Boolean, Identifier, List, String

from laundry.domain import laundry


@laundry.aggregate
class OperatorCandidate:
    operator_id = Identifier(identifier=True, required=True)
    name = String(max_length=150)
    zip_codes = List(content_type=String(max_length=10))
    is_active = Boolean(default=True)
    is_online = Boolean(default=False)
    notifications_enabled = Boolean(default=True)

    def serves(self, zip_code: str) -> bool:
        return zip_code in (self.zip_codes or [])

    def is_reachable(self) -> bool:
        return bool(self.is_active and self.is_online and self.notifications_enabled)

    def set_availability(
        self,
        is_online: bool | None = None,
        is_active: bool | None = None,
        notifications_enabled: bool | None = None,
    ) -> None:
        if is_online is not None:
            self.is_online = is_online
        if is_active is not None:
            self.is_active = is_active
        if notifications_enabled is not None:
            self.notifications_enabled = notifications_enabled

    def assign_zip_codes(self, zip_codes: list[str]) -> None:
        self.zip_codes = sorted(set(zip_codes))
