"""Payment outcomes: capture, failure, duplicate webhooks and intent expiry."""

import pytest
from laundry.order.order import OrderStatus, PaymentStatus
from laundry.order.payment import ConfirmPayment, ExpirePaymentIntent, RecordPaymentFailure
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


def test_capture_opens_order(place_order, load_order):
    order_id = place_order()["order_id"]

    status = current_domain.process(ConfirmPayment(order_id=order_id), asynchronous=False)

    assert status == OrderStatus.UNCLAIMED.value
    order = load_order(order_id)
    assert order.payment_status == PaymentStatus.CAPTURED.value


def test_duplicate_capture_is_ignored(unclaimed_order, load_order):
    before = load_order(unclaimed_order)._version
    status = current_domain.process(ConfirmPayment(order_id=unclaimed_order), asynchronous=False)
    assert status == OrderStatus.UNCLAIMED.value
    assert load_order(unclaimed_order)._version == before


def test_failure_fails_order(place_order, load_order):
    order_id = place_order()["order_id"]
    current_domain.process(RecordPaymentFailure(order_id=order_id, reason="Card declined"), asynchronous=False)

    order = load_order(order_id)
    assert order.status == OrderStatus.FAILED.value
    assert order.failure_reason == "Card declined"


def test_expiry_fails_placed_order(place_order, load_order):
    order_id = place_order()["order_id"]
    current_domain.process(ExpirePaymentIntent(order_id=order_id), asynchronous=False)
    assert load_order(order_id).status == OrderStatus.FAILED.value


def test_expiry_does_not_touch_paid_order(unclaimed_order, load_order):
    with pytest.raises(ValidationError) as exc:
        current_domain.process(ExpirePaymentIntent(order_id=unclaimed_order), asynchronous=False)
    assert exc.value.messages["code"] == ["InvalidTransition"]
    assert load_order(unclaimed_order).status == OrderStatus.UNCLAIMED.value


def test_unknown_order(marketplace):
    with pytest.raises(ObjectNotFoundError):
        current_domain.process(ConfirmPayment(order_id="missing"), asynchronous=False)


def test_duplicate_capture_of_free_order_is_ignored(place_order, load_order, gateway):
    order_id = place_order(promo_code="STAFFQA")["order_id"]
    before = load_order(order_id)._version

    status = current_domain.process(ConfirmPayment(order_id=order_id), asynchronous=False)

    assert status == OrderStatus.UNCLAIMED.value
    order = load_order(order_id)
    assert order.payment_status == PaymentStatus.NOT_REQUIRED.value
    assert order._version == before


class TestCaptureAfterClose:
    def _refunds(self, gateway):
        return [call for call in gateway.calls if call["method"] == "refund"]

    def test_capture_after_cancellation_is_refunded_in_full(self, place_order, load_order, gateway):
        from laundry.order.cancellation import CancelOrder

        order_id = place_order()["order_id"]
        current_domain.process(CancelOrder(order_id=order_id, initiator="cust-001"), asynchronous=False)

        status = current_domain.process(ConfirmPayment(order_id=order_id), asynchronous=False)

        assert status == OrderStatus.CANCELLED.value
        order = load_order(order_id)
        assert order.status == OrderStatus.CANCELLED.value
        assert order.payment_status == PaymentStatus.CAPTURED.value
        assert self._refunds(gateway) == [{"method": "refund", "order_id": order_id, "percentage": 100}]

    def test_capture_after_failure_is_refunded_in_full(self, place_order, load_order, gateway):
        order_id = place_order()["order_id"]
        current_domain.process(ExpirePaymentIntent(order_id=order_id), asynchronous=False)

        status = current_domain.process(ConfirmPayment(order_id=order_id), asynchronous=False)

        assert status == OrderStatus.FAILED.value
        assert load_order(order_id).payment_status == PaymentStatus.CAPTURED.value
        assert self._refunds(gateway) == [{"method": "refund", "order_id": order_id, "percentage": 100}]

    def test_redelivered_late_capture_refunds_once(self, place_order, gateway):
        from laundry.order.cancellation import CancelOrder

        order_id = place_order()["order_id"]
        current_domain.process(CancelOrder(order_id=order_id, initiator="admin"), asynchronous=False)

        current_domain.process(ConfirmPayment(order_id=order_id), asynchronous=False)
        current_domain.process(ConfirmPayment(order_id=order_id), asynchronous=False)

        assert len(self._refunds(gateway)) == 1
