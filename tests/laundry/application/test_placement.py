"""Order placement through PlaceOrder: validation, pricing and payment intent."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from laundry.order.order import Order, OrderStatus, PaymentStatus
from protean import current_domain
from protean.exceptions import ValidationError


def _order_count():
    return len(current_domain.repository_for(Order)._dao.query.all().items)


class TestSuccessfulPlacement:
    def test_returns_pending_order_and_client_secret(self, place_order, gateway, load_order):
        result = place_order()

        assert result["status"] == OrderStatus.PLACED.value
        assert result["client_secret"]
        assert result["total_cents"] == 2 * 3500

        order = load_order(result["order_id"])
        assert order.payment_status == PaymentStatus.PENDING.value
        assert order.payment_intent_id.startswith("pi_fake_")
        assert gateway.calls == [
            {"method": "create_intent", "total_cents": 7000, "order_id": result["order_id"]}
        ]

    def test_defaults_fill_unselected_preferences(self, place_order, load_order):
        order = load_order(place_order()["order_id"])
        assert sorted(p.preference_id for p in order.preferences) == ["dry-low", "soap-standard", "wash-cold"]

    def test_paid_preferences_and_add_ons_are_priced(self, place_order):
        result = place_order(
            bag_count=3,
            soap_preference_id="soap-hypo",
            dry_temp_preference_id="dry-air",
            shirts_on_hangers=True,
        )
        assert result["total_cents"] == 3 * 3500 + 200 + 150 + 800

    def test_express_morning_order(self, place_order, clock, load_order):
        # 04:30 local: morning pickup is 90 minutes away and before the cutoff
        result = place_order(is_express=True, window_slot="morning", bag_count=3, soap_preference_id="soap-hypo")
        assert result["total_cents"] == 12700

        order = load_order(result["order_id"])
        assert order.pickup_window_start == datetime(2026, 3, 2, 6, 0, tzinfo=ZoneInfo("America/New_York"))
        assert order.delivery_window_start == order.pickup_window_end
        assert order.delivery_window_end - order.delivery_window_start == timedelta(hours=2)

    def test_locker_order(self, place_order):
        assert place_order(pickup_type="locker", locker_id="LKR-7")["status"] == "placed"

    def test_free_order_skips_payment(self, place_order, gateway, load_order):
        result = place_order(promo_code="staffqa")

        assert result["total_cents"] == 0
        assert result["client_secret"] is None
        assert result["status"] == OrderStatus.UNCLAIMED.value
        assert gateway.calls == []
        assert load_order(result["order_id"]).payment_status == PaymentStatus.NOT_REQUIRED.value


class TestRefusedPlacement:
    def _assert_refused(self, place_order, code, **overrides):
        with pytest.raises(ValidationError) as exc:
            place_order(**overrides)
        assert exc.value.messages["code"] == [code]
        assert _order_count() == 0
        return exc.value

    def test_unknown_zip(self, place_order):
        self._assert_refused(place_order, "AreaNotServiced", zip_code="99999")

    def test_locker_not_offered(self, place_order):
        self._assert_refused(place_order, "ServiceTypeUnavailable", zip_code="10002", pickup_type="locker")

    def test_express_not_offered_in_area(self, place_order):
        self._assert_refused(place_order, "ExpressUnavailable", zip_code="10002", is_express=True)

    def test_express_after_cutoff(self, place_order, clock):
        clock.set(13)
        exc = self._assert_refused(place_order, "ExpressUnavailable", is_express=True)
        assert "12 PM" in exc.messages["is_express"][0]

    def test_after_cutoff_non_express_still_placeable(self, place_order, clock):
        clock.set(13)
        assert place_order(is_express=False, window_slot="evening")["status"] == "placed"

    def test_lead_time_too_short(self, place_order, clock):
        clock.set(16, 30)
        self._assert_refused(place_order, "LeadTimeTooShort", window_slot="evening")

    def test_bag_count_below_one(self, place_order):
        self._assert_refused(place_order, "InvalidInput", bag_count=0)

    def test_unknown_preference(self, place_order):
        self._assert_refused(place_order, "UnknownPreference", soap_preference_id="soap-gold")

    def test_preference_from_wrong_category(self, place_order):
        self._assert_refused(place_order, "UnknownPreference", soap_preference_id="wash-hot")

    def test_payment_intent_failure_persists_nothing(self, place_order, gateway):
        gateway.configure(should_succeed=False, failure_reason="Gateway down")
        exc = self._assert_refused(place_order, "PaymentUnavailable")
        assert exc.messages["payment"] == ["Gateway down"]
