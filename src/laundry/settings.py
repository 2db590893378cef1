"""Business settings read from the ``[custom]`` section of domain.toml.

The pure components (pricing, eligibility, scheduling) take plain values;
these helpers translate the active configuration overlay into those values
so that command handlers and API routes share one source of truth.
"""

from zoneinfo import ZoneInfo

from laundry.domain import laundry
from laundry.pricing import ADD_ON_CENTS, BASE_BAG_CENTS, EXPRESS_FEE_CENTS, PricingPolicy

DEFAULT_TIMEZONE = "America/New_York"

# Used when the configuration omits a refund schedule
_DEFAULT_REFUND_POLICY = {"placed": 100, "unclaimed": 100, "claimed": 75}


def _custom() -> dict:
    return laundry.config.get("custom") or {}


def pricing_policy() -> PricingPolicy:
    custom = _custom()
    add_ons = dict(ADD_ON_CENTS)
    add_ons.update({name: int(cents) for name, cents in (custom.get("add_on_cents") or {}).items()})
    return PricingPolicy(
        base_bag_cents=int(custom.get("base_bag_cents", BASE_BAG_CENTS)),
        express_fee_cents=int(custom.get("express_fee_cents", EXPRESS_FEE_CENTS)),
        add_on_cents=add_ons,
    )


def promotions() -> dict[str, int]:
    """Promo code → percentage off. Codes are matched case-insensitively."""
    table = _custom().get("promotions") or {}
    return {code.upper(): int(percent) for code, percent in table.items()}


def refund_percentage_for(status: str) -> int:
    policy = _custom().get("refund_policy") or _DEFAULT_REFUND_POLICY
    if status not in policy:
        return 0
    return int(policy[status])


def express_cutoff_hour() -> int:
    return int(_custom().get("express_cutoff_hour", 12))


def min_lead_hours() -> int:
    return int(_custom().get("min_lead_hours", 1))


def express_delivery_span_hours() -> int:
    return int(_custom().get("express_delivery_span_hours", 2))


def local_timezone() -> ZoneInfo:
    return ZoneInfo(_custom().get("local_timezone") or DEFAULT_TIMEZONE)


def webhook_secret() -> str:
    return (_custom().get("webhook") or {}).get("secret", "")
