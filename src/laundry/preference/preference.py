"""Selectable soap and temperature options.

Each preference carries its own cents cost, which is captured onto the order
at placement time so the order total never depends on later price edits.
"""

from enum import Enum

from protean.fields import Boolean, Identifier, Integer, String

from laundry.domain import laundry
from laundry.pricing import PreferenceCost


class PreferenceCategory(Enum):
    SOAP = "soap"
    WASH_TEMP = "wash_temp"
    DRY_TEMP = "dry_temp"


@laundry.aggregate
class LaundryPreference:
    preference_id = Identifier(identifier=True, required=True)
    category = String(required=True, choices=PreferenceCategory)
    name = String(required=True, max_length=100)
    price_cents = Integer(default=0, min_value=0)
    is_default = Boolean(default=False)
    is_active = Boolean(default=True)

    def as_cost(self) -> PreferenceCost:
        return PreferenceCost(
            preference_id=str(self.preference_id),
            category=self.category,
            price_cents=self.price_cents or 0,
        )
