"""Turns a pickup date and slot into concrete pickup and delivery windows.

Slots are fixed daily intervals in the service's local timezone. Normal
orders are delivered in the same slot the next day; express orders are
delivered in the span immediately following pickup.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from enum import Enum

MIN_LEAD_HOURS = 1
EXPRESS_DELIVERY_SPAN_HOURS = 2


class WindowSlot(Enum):
    MORNING = "morning"
    LUNCH = "lunch"
    EVENING = "evening"


# Half-open [start, end) local times per slot
SLOT_TABLE = {
    WindowSlot.MORNING: (time(6, 0), time(8, 0)),
    WindowSlot.LUNCH: (time(12, 0), time(14, 0)),
    WindowSlot.EVENING: (time(17, 0), time(19, 0)),
}


class SchedulingError(Enum):
    LEAD_TIME_TOO_SHORT = "LeadTimeTooShort"
    UNKNOWN_WINDOW_SLOT = "UnknownWindowSlot"


@dataclass(frozen=True)
class TimeWindows:
    pickup_start: datetime
    pickup_end: datetime
    delivery_start: datetime
    delivery_end: datetime


@dataclass(frozen=True)
class ScheduleResult:
    ok: bool
    windows: TimeWindows | None = None
    reason: SchedulingError | None = None

    @property
    def message(self) -> str:
        if self.reason == SchedulingError.LEAD_TIME_TOO_SHORT:
            return "Pickup time must be at least 1 hour from now. Please select a later date or time window."
        if self.reason == SchedulingError.UNKNOWN_WINDOW_SLOT:
            return "Unknown time window"
        return ""


def local_now(tz: tzinfo) -> datetime:
    """Current wall-clock time in ``tz``. The only clock read in scheduling."""
    return datetime.now(tz)


def schedule(
    pickup_date: date,
    window_slot: str,
    is_express: bool,
    now_local: datetime,
    min_lead_hours: int = MIN_LEAD_HOURS,
    express_span_hours: int = EXPRESS_DELIVERY_SPAN_HOURS,
) -> ScheduleResult:
    """Compute pickup and delivery windows.

    ``now_local`` must be timezone aware; the windows are built in its
    timezone. Express delivery is only reachable once eligibility has
    already confirmed express for the order.
    """
    try:
        slot = WindowSlot(window_slot)
    except ValueError:
        return ScheduleResult(ok=False, reason=SchedulingError.UNKNOWN_WINDOW_SLOT)

    tz = now_local.tzinfo
    start_time, end_time = SLOT_TABLE[slot]
    pickup_start = datetime.combine(pickup_date, start_time, tzinfo=tz)
    pickup_end = datetime.combine(pickup_date, end_time, tzinfo=tz)

    if pickup_start < now_local + timedelta(hours=min_lead_hours):
        return ScheduleResult(ok=False, reason=SchedulingError.LEAD_TIME_TOO_SHORT)

    if is_express:
        delivery_start = pickup_end
        delivery_end = pickup_end + timedelta(hours=express_span_hours)
    else:
        next_day = pickup_date + timedelta(days=1)
        delivery_start = datetime.combine(next_day, start_time, tzinfo=tz)
        delivery_end = datetime.combine(next_day, end_time, tzinfo=tz)

    return ScheduleResult(
        ok=True,
        windows=TimeWindows(
            pickup_start=pickup_start,
            pickup_end=pickup_end,
            delivery_start=delivery_start,
            delivery_end=delivery_end,
        ),
    )
