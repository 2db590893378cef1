"""Preference catalogue administration and lookup."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Identifier, Integer, String
from protean.utils.globals import current_domain

from laundry.domain import laundry
from laundry.preference.preference import LaundryPreference, PreferenceCategory
from laundry.pricing import PreferenceCost


@laundry.command(part_of="LaundryPreference")
class UpsertPreference:
    """Create or reprice a laundry preference."""

    preference_id = Identifier(required=True)
    category = String(required=True, choices=PreferenceCategory)
    name = String(required=True, max_length=100)
    price_cents = Integer(default=0, min_value=0)
    is_default = Boolean(default=False)
    is_active = Boolean(default=True)


@laundry.command_handler(part_of=LaundryPreference)
class PreferenceHandler:
    @handle(UpsertPreference)
    def upsert(self, command):
        repo = current_domain.repository_for(LaundryPreference)
        try:
            pref = repo.get(command.preference_id)
            pref.category = command.category
            pref.name = command.name
            pref.price_cents = command.price_cents
            pref.is_default = command.is_default
            pref.is_active = command.is_active
        except ObjectNotFoundError:
            pref = LaundryPreference(
                preference_id=command.preference_id,
                category=command.category,
                name=command.name,
                price_cents=command.price_cents,
                is_default=command.is_default,
                is_active=command.is_active,
            )
        repo.add(pref)
        return str(pref.preference_id)


def resolve_preferences(selected: dict[str, str | None]) -> list[PreferenceCost]:
    """Turn ``{category: preference_id}`` into priced selections.

    Every category must be filled. A missing selection falls back to the
    category's active default; with no default available the order is
    rejected with ``MissingPreference``.
    """
    repo = current_domain.repository_for(LaundryPreference)
    costs = []
    for category in PreferenceCategory:
        preference_id = selected.get(category.value)
        if preference_id:
            try:
                pref = repo.get(preference_id)
            except ObjectNotFoundError:
                raise ValidationError(
                    {"code": ["UnknownPreference"], category.value: [f"Unknown preference {preference_id}"]}
                ) from None
            if pref.category != category.value or not pref.is_active:
                raise ValidationError(
                    {"code": ["UnknownPreference"], category.value: [f"{preference_id} is not a valid {category.value}"]}
                )
        else:
            defaults = repo._dao.query.filter(category=category.value, is_default=True, is_active=True).all().items
            if not defaults:
                raise ValidationError(
                    {"code": ["MissingPreference"], category.value: [f"A {category.value} preference is required"]}
                )
            pref = defaults[0]
        costs.append(pref.as_cost())
    return costs
