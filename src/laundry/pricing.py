"""Pricing engine: itemized quote for a laundry order.

Pure and deterministic: the same inputs always produce the same quote, all
amounts are integer cents, and nothing here touches configuration or I/O.
Callers resolve the active ``PricingPolicy`` and promotions table first
(see ``laundry.settings``).

    total = bags × base + express fee + preference costs + add-ons − promo
"""

from dataclasses import dataclass, field

from protean.exceptions import ValidationError

BASE_BAG_CENTS = 3500
EXPRESS_FEE_CENTS = 2000

ADD_ON_CENTS = {
    "fragrance_free": 300,
    "shirts_on_hangers": 800,
    "extra_rinse": 200,
}


@dataclass(frozen=True)
class PricingPolicy:
    """Unit prices applied by ``price()``."""

    base_bag_cents: int = BASE_BAG_CENTS
    express_fee_cents: int = EXPRESS_FEE_CENTS
    add_on_cents: dict = field(default_factory=lambda: dict(ADD_ON_CENTS))


@dataclass(frozen=True)
class AddOns:
    fragrance_free: bool = False
    shirts_on_hangers: bool = False
    extra_rinse: bool = False

    def enabled(self) -> list[str]:
        return [name for name in ADD_ON_CENTS if getattr(self, name)]


@dataclass(frozen=True)
class PreferenceCost:
    """A selected laundry preference and what it adds to the order."""

    preference_id: str
    category: str
    price_cents: int


@dataclass(frozen=True)
class LineItem:
    code: str
    description: str
    amount_cents: int


@dataclass(frozen=True)
class PriceQuote:
    line_items: tuple[LineItem, ...]
    subtotal_cents: int
    discount_cents: int
    total_cents: int
    promo_code: str | None = None
    promo_percent_off: int = 0


def _invalid(field_name: str, message: str) -> ValidationError:
    return ValidationError({"code": ["InvalidInput"], field_name: [message]})


def resolve_promotion(promo_code: str | None, promotions: dict[str, int] | None) -> int:
    """Percentage off for ``promo_code``; unknown or empty codes resolve to 0."""
    if not promo_code or not promotions:
        return 0
    return int(promotions.get(promo_code.strip().upper(), 0))


def price(
    bag_count: int,
    is_express: bool,
    preference_costs: list[PreferenceCost] | None = None,
    add_ons: AddOns | None = None,
    promo_code: str | None = None,
    promotions: dict[str, int] | None = None,
    policy: PricingPolicy | None = None,
) -> PriceQuote:
    """Compute the itemized quote for an order.

    Raises ``ValidationError`` (code ``InvalidInput``) for a bag count below
    one, a negative preference cost, or a promotion outside 0-100 percent.
    An unresolved promo code is not an error; it simply discounts nothing.
    """
    policy = policy or PricingPolicy()
    add_ons = add_ons or AddOns()

    if bag_count is None or bag_count < 1:
        raise _invalid("bag_count", "Bag count must be at least 1")

    items = [
        LineItem(
            code="bags",
            description=f"{bag_count} bag(s) @ {policy.base_bag_cents} cents",
            amount_cents=bag_count * policy.base_bag_cents,
        )
    ]

    if is_express:
        items.append(LineItem(code="express", description="Express turnaround", amount_cents=policy.express_fee_cents))

    for pref in preference_costs or []:
        if pref.price_cents < 0:
            raise _invalid("preferences", f"Preference {pref.preference_id} has a negative cost")
        if pref.price_cents:
            items.append(
                LineItem(
                    code=f"preference:{pref.category}",
                    description=f"{pref.category} preference",
                    amount_cents=pref.price_cents,
                )
            )

    for name in add_ons.enabled():
        items.append(
            LineItem(
                code=f"add_on:{name}",
                description=name.replace("_", " ").capitalize(),
                amount_cents=int(policy.add_on_cents.get(name, 0)),
            )
        )

    subtotal = sum(item.amount_cents for item in items)

    percent_off = resolve_promotion(promo_code, promotions)
    if not 0 <= percent_off <= 100:
        raise _invalid("promo_code", f"Promotion must be between 0 and 100 percent, got {percent_off}")

    # Floor the discounted total to whole cents
    total = (subtotal * (100 - percent_off)) // 100
    discount = subtotal - total

    return PriceQuote(
        line_items=tuple(items),
        subtotal_cents=subtotal,
        discount_cents=discount,
        total_cents=total,
        promo_code=promo_code.strip().upper() if percent_off else None,
        promo_percent_off=percent_off,
    )
