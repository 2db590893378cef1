from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture

NEW_YORK = ZoneInfo("America/New_York")

# Monday early morning: every slot today is still at least one hour away
DEFAULT_MOMENT = datetime(2026, 3, 2, 4, 30, tzinfo=NEW_YORK)


class FrozenClock:
    """Stands in for ``local_now`` so placement sees a fixed wall clock."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def set(self, hour: int, minute: int = 0) -> None:
        self.moment = self.moment.replace(hour=hour, minute=minute)

    def today(self):
        return self.moment.date()

    def __call__(self, tz):
        return self.moment.astimezone(tz)


@pytest.fixture(scope="session")
def laundry_bed():
    from laundry.domain import laundry

    bed = DomainFixture(laundry)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(laundry_bed):
    with laundry_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def _reset_adapters():
    from laundry.dispatch import reset_dispatcher
    from laundry.gateway import reset_gateway

    reset_gateway()
    reset_dispatcher()
    yield
    reset_gateway()
    reset_dispatcher()


@pytest.fixture(autouse=True)
def clock(monkeypatch):
    frozen = FrozenClock(DEFAULT_MOMENT)
    monkeypatch.setattr("laundry.order.placement.local_now", frozen)
    return frozen


@pytest.fixture()
def gateway():
    from laundry.gateway import get_gateway

    return get_gateway()


@pytest.fixture()
def dispatcher():
    from laundry.dispatch import get_dispatcher

    return get_dispatcher()


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------
@pytest.fixture()
def service_areas():
    from laundry.area.management import UpsertServiceArea

    current_domain.process(
        UpsertServiceArea(zip_code="10001", allows_delivery=True, allows_locker=True, allows_express=True),
        asynchronous=False,
    )
    current_domain.process(
        UpsertServiceArea(zip_code="10002", allows_delivery=True, allows_locker=False, allows_express=False),
        asynchronous=False,
    )


@pytest.fixture()
def preferences():
    from laundry.preference.management import UpsertPreference

    catalogue = [
        ("soap-standard", "soap", "Standard detergent", 0, True),
        ("soap-hypo", "soap", "Hypoallergenic", 200, False),
        ("wash-cold", "wash_temp", "Cold", 0, True),
        ("wash-hot", "wash_temp", "Hot", 0, False),
        ("dry-low", "dry_temp", "Low heat", 0, True),
        ("dry-air", "dry_temp", "Air dry", 150, False),
    ]
    for preference_id, category, name, price_cents, is_default in catalogue:
        current_domain.process(
            UpsertPreference(
                preference_id=preference_id,
                category=category,
                name=name,
                price_cents=price_cents,
                is_default=is_default,
            ),
            asynchronous=False,
        )


@pytest.fixture()
def operators():
    from laundry.operator.registration import RegisterOperatorCandidate

    roster = [
        ("op-a", ["10001"], True),
        ("op-b", ["10001", "10002"], True),
        ("op-c", ["10001"], False),
        ("op-d", ["10002"], True),
    ]
    for operator_id, zip_codes, is_online in roster:
        current_domain.process(
            RegisterOperatorCandidate(
                operator_id=operator_id,
                name=operator_id.upper(),
                zip_codes=zip_codes,
                is_online=is_online,
            ),
            asynchronous=False,
        )
    return [operator_id for operator_id, _, _ in roster]


@pytest.fixture()
def marketplace(service_areas, preferences, operators):
    """Areas, preference catalogue and operators seeded together."""
    return operators


# ---------------------------------------------------------------------------
# Order helpers
# ---------------------------------------------------------------------------
@pytest.fixture()
def place_order(marketplace, clock):
    """Place an order through the command path; keyword overrides apply."""
    from laundry.order.placement import PlaceOrder

    def _place(**overrides):
        fields = {
            "customer_id": "cust-001",
            "zip_code": "10001",
            "pickup_type": "pickup_delivery",
            "service_type": "wash_fold",
            "is_express": False,
            "bag_count": 2,
            "pickup_date": clock.today(),
            "window_slot": "evening",
            "pickup_address": "350 5th Ave, New York, NY",
        }
        fields.update(overrides)
        return current_domain.process(PlaceOrder(**fields), asynchronous=False)

    return _place


@pytest.fixture()
def confirm_payment():
    from laundry.order.payment import ConfirmPayment

    def _confirm(order_id):
        return current_domain.process(ConfirmPayment(order_id=order_id), asynchronous=False)

    return _confirm


@pytest.fixture()
def unclaimed_order(place_order, confirm_payment):
    """A paid order waiting for an operator; returns its id."""
    order_id = place_order()["order_id"]
    confirm_payment(order_id)
    return order_id


@pytest.fixture()
def claimed_order(unclaimed_order):
    from laundry.order.claiming import ClaimCoordinator

    result = ClaimCoordinator().claim(unclaimed_order, "op-a")
    assert result.success
    return unclaimed_order


@pytest.fixture()
def load_order():
    from laundry.order.order import Order

    def _load(order_id):
        return current_domain.repository_for(Order).get(order_id)

    return _load
