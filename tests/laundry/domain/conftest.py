from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from laundry.order.order import Order
from laundry.pricing import AddOns, PreferenceCost
from laundry.scheduling import TimeWindows

NY = ZoneInfo("America/New_York")


@pytest.fixture()
def windows():
    pickup_start = datetime(2026, 3, 2, 17, 0, tzinfo=NY)
    return TimeWindows(
        pickup_start=pickup_start,
        pickup_end=pickup_start + timedelta(hours=2),
        delivery_start=pickup_start + timedelta(days=1),
        delivery_end=pickup_start + timedelta(days=1, hours=2),
    )


@pytest.fixture()
def new_order(windows):
    """Factory for a freshly placed order with its events cleared."""

    def _build(**overrides):
        fields = {
            "customer_id": "cust-001",
            "zip_code": "10001",
            "pickup_type": "pickup_delivery",
            "service_type": "wash_fold",
            "is_express": False,
            "bag_count": 2,
            "windows": windows,
            "window_slot": "evening",
            "preferences": [PreferenceCost(preference_id="soap-hypo", category="soap", price_cents=200)],
            "add_ons": AddOns(fragrance_free=True),
        }
        fields.update(overrides)
        order = Order.place(**fields)
        order._events.clear()
        return order

    return _build


@pytest.fixture()
def placed_order(new_order):
    return new_order()


@pytest.fixture()
def unclaimed(placed_order):
    placed_order.attach_payment_intent("pi_123")
    placed_order.confirm_payment()
    placed_order._events.clear()
    return placed_order


@pytest.fixture()
def claimed(unclaimed):
    unclaimed.claim("op-a")
    unclaimed._events.clear()
    return unclaimed
