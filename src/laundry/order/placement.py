"""Order placement and quoting.

Placement is the only place an order is priced and scheduled. Every check
(area eligibility, lead time, preference selection, payment intent) runs
before the order is persisted, so a refused request leaves nothing behind.
"""

from datetime import datetime

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Date, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from laundry import settings
from laundry.area.management import find_area
from laundry.domain import laundry
from laundry.eligibility import PickupType, validate
from laundry.gateway import get_gateway
from laundry.order.order import Order, ServiceType
from laundry.preference.management import resolve_preferences
from laundry.pricing import AddOns, PriceQuote, price
from laundry.scheduling import WindowSlot, local_now, schedule

logger = structlog.get_logger(__name__)


@laundry.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    zip_code = String(required=True, max_length=10)
    pickup_type = String(required=True, choices=PickupType)
    service_type = String(required=True, choices=ServiceType)
    is_express = Boolean(default=False)
    bag_count = Integer(required=True)
    pickup_date = Date(required=True)
    window_slot = String(required=True, choices=WindowSlot)

    # Preference ids by category; blank selections fall back to defaults
    soap_preference_id = Identifier()
    wash_temp_preference_id = Identifier()
    dry_temp_preference_id = Identifier()

    fragrance_free = Boolean(default=False)
    shirts_on_hangers = Boolean(default=False)
    extra_rinse = Boolean(default=False)
    promo_code = String(max_length=50)

    pickup_address = String(max_length=500)
    delivery_address = String(max_length=500)
    locker_id = String(max_length=100)
    special_instructions = Text()


def _add_ons(command) -> AddOns:
    return AddOns(
        fragrance_free=bool(command.fragrance_free),
        shirts_on_hangers=bool(command.shirts_on_hangers),
        extra_rinse=bool(command.extra_rinse),
    )


def _selected_preferences(command) -> dict[str, str | None]:
    return {
        "soap": command.soap_preference_id,
        "wash_temp": command.wash_temp_preference_id,
        "dry_temp": command.dry_temp_preference_id,
    }


def quote_order(
    bag_count: int,
    is_express: bool,
    selected_preferences: dict[str, str | None],
    add_ons: AddOns | None = None,
    promo_code: str | None = None,
) -> PriceQuote:
    """Price an order without placing it."""
    return price(
        bag_count=bag_count,
        is_express=is_express,
        preference_costs=resolve_preferences(selected_preferences),
        add_ons=add_ons,
        promo_code=promo_code,
        promotions=settings.promotions(),
        policy=settings.pricing_policy(),
    )


def _refuse(code: str, field_name: str, message: str) -> ValidationError:
    return ValidationError({"code": [code], field_name: [message]})


@laundry.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        now_local: datetime = local_now(settings.local_timezone())

        eligibility = validate(
            find_area(command.zip_code),
            command.pickup_type,
            bool(command.is_express),
            now_local,
            cutoff_hour=settings.express_cutoff_hour(),
        )
        if not eligibility.ok:
            field_name = "is_express" if eligibility.detail else "zip_code"
            raise _refuse(eligibility.reason.value, field_name, eligibility.message)

        scheduled = schedule(
            command.pickup_date,
            command.window_slot,
            bool(command.is_express),
            now_local,
            min_lead_hours=settings.min_lead_hours(),
            express_span_hours=settings.express_delivery_span_hours(),
        )
        if not scheduled.ok:
            raise _refuse(scheduled.reason.value, "pickup_date", scheduled.message)

        order = Order.place(
            customer_id=command.customer_id,
            zip_code=command.zip_code,
            pickup_type=command.pickup_type,
            service_type=command.service_type,
            is_express=bool(command.is_express),
            bag_count=command.bag_count,
            windows=scheduled.windows,
            window_slot=command.window_slot,
            preferences=resolve_preferences(_selected_preferences(command)),
            add_ons=_add_ons(command),
            promo_code=command.promo_code,
            promotions=settings.promotions(),
            policy=settings.pricing_policy(),
            pickup_address=command.pickup_address,
            delivery_address=command.delivery_address,
            locker_id=command.locker_id,
            special_instructions=command.special_instructions,
        )

        client_secret = None
        if order.requires_payment:
            intent = get_gateway().create_intent(order.total_amount_cents, str(order.id))
            if not intent.success:
                logger.warning(
                    "Payment intent creation failed",
                    order_id=str(order.id),
                    reason=intent.failure_reason,
                )
                raise _refuse("PaymentUnavailable", "payment", intent.failure_reason or "Payment is unavailable")
            order.attach_payment_intent(intent.intent_id)
            client_secret = intent.client_secret
        else:
            # Nothing to capture: open the order to operators right away
            order.confirm_payment()

        current_domain.repository_for(Order).add(order)
        logger.info(
            "Order placed",
            order_id=str(order.id),
            zip_code=order.zip_code,
            total_cents=order.total_amount_cents,
            status=order.status,
        )
        return {
            "order_id": str(order.id),
            "client_secret": client_secret,
            "total_cents": order.total_amount_cents,
            "status": order.status,
        }
