"""May this zip code take this kind of order right now?

A pure gate evaluated before an order is created. Business refusals come back
as an ``EligibilityResult`` carrying a reason code; nothing here raises for
them.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

EXPRESS_CUTOFF_HOUR = 12


class PickupType(Enum):
    LOCKER = "locker"
    PICKUP_DELIVERY = "pickup_delivery"


class IneligibilityReason(Enum):
    AREA_NOT_SERVICED = "AreaNotServiced"
    SERVICE_TYPE_UNAVAILABLE = "ServiceTypeUnavailable"
    EXPRESS_UNAVAILABLE = "ExpressUnavailable"


class ExpressRefusal(Enum):
    """Why express was refused, so callers can word the message."""

    AREA = "area"
    CUTOFF = "cutoff"


_MESSAGES = {
    IneligibilityReason.AREA_NOT_SERVICED: "We do not service this zip code yet",
    IneligibilityReason.SERVICE_TYPE_UNAVAILABLE: "This service type is not available in this area",
    ExpressRefusal.AREA: "Express service is not available in this area",
    ExpressRefusal.CUTOFF: "Express orders must be placed before 12 PM",
}


@dataclass(frozen=True)
class AreaCapabilities:
    """The service-area flags the validator needs; decoupled from persistence."""

    zip_code: str
    allows_delivery: bool = False
    allows_locker: bool = False
    allows_express: bool = False
    is_active: bool = True


@dataclass(frozen=True)
class EligibilityResult:
    ok: bool
    reason: IneligibilityReason | None = None
    detail: ExpressRefusal | None = None

    @property
    def message(self) -> str:
        if self.ok:
            return ""
        return _MESSAGES[self.detail or self.reason]


ELIGIBLE = EligibilityResult(ok=True)


def validate(
    area: AreaCapabilities | None,
    pickup_type: str,
    is_express: bool,
    now_local: datetime,
    cutoff_hour: int = EXPRESS_CUTOFF_HOUR,
) -> EligibilityResult:
    """Check area coverage, pickup type and express availability, in that order."""
    if area is None or not area.is_active:
        return EligibilityResult(ok=False, reason=IneligibilityReason.AREA_NOT_SERVICED)

    kind = PickupType(pickup_type)
    if kind == PickupType.LOCKER and not area.allows_locker:
        return EligibilityResult(ok=False, reason=IneligibilityReason.SERVICE_TYPE_UNAVAILABLE)
    if kind == PickupType.PICKUP_DELIVERY and not area.allows_delivery:
        return EligibilityResult(ok=False, reason=IneligibilityReason.SERVICE_TYPE_UNAVAILABLE)

    if is_express:
        # The cutoff applies regardless of the area's express flag
        if now_local.hour >= cutoff_hour:
            return EligibilityResult(
                ok=False,
                reason=IneligibilityReason.EXPRESS_UNAVAILABLE,
                detail=ExpressRefusal.CUTOFF,
            )
        if not area.allows_express:
            return EligibilityResult(
                ok=False,
                reason=IneligibilityReason.EXPRESS_UNAVAILABLE,
                detail=ExpressRefusal.AREA,
            )

    return ELIGIBLE
