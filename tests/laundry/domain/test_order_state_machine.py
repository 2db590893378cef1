"""Order state machine: legal edges, guards and one event per transition."""

import pytest
from laundry.order.events import (
    OrderCancelled,
    OrderClaimed,
    OrderFailed,
    OrderProgressRecorded,
    OrderStatusChanged,
    PaymentConfirmed,
)
from laundry.order.order import (
    _VALID_TRANSITIONS,
    CANCELLABLE_STATUSES,
    TERMINAL_STATUSES,
    OrderStatus,
    PaymentStatus,
)
from protean.exceptions import ValidationError


def _walk_to(order, target):
    """Drive a claimed order forward until it reaches ``target``."""
    path = [OrderStatus.IN_PROGRESS, OrderStatus.WASHED, OrderStatus.OUT_FOR_DELIVERY, OrderStatus.COMPLETED]
    for status in path:
        if order.status == target.value:
            break
        order.advance_to(status, "op-a")
    order._events.clear()
    return order


class TestTransitionTable:
    def test_terminal_states_have_no_exits(self):
        for status in TERMINAL_STATUSES:
            assert _VALID_TRANSITIONS[status] == set()

    def test_only_pre_work_states_are_cancellable(self):
        cancellable = {s for s, targets in _VALID_TRANSITIONS.items() if OrderStatus.CANCELLED in targets}
        assert cancellable == set(CANCELLABLE_STATUSES)


class TestPayment:
    def test_confirm_payment_opens_the_order(self, placed_order):
        placed_order.confirm_payment()
        assert placed_order.status == OrderStatus.UNCLAIMED.value
        assert placed_order.payment_status == PaymentStatus.CAPTURED.value
        assert [type(e) for e in placed_order._events] == [PaymentConfirmed]

    def test_confirm_twice_is_invalid(self, unclaimed):
        with pytest.raises(ValidationError) as exc:
            unclaimed.confirm_payment()
        assert exc.value.messages["code"] == ["InvalidTransition"]

    def test_mark_failed_from_placed(self, placed_order):
        placed_order.mark_failed("Card declined")
        assert placed_order.status == OrderStatus.FAILED.value
        assert placed_order.payment_status == PaymentStatus.FAILED.value
        assert placed_order.failure_reason == "Card declined"
        assert isinstance(placed_order._events[-1], OrderFailed)

    def test_cannot_fail_after_claim(self, claimed):
        with pytest.raises(ValidationError):
            claimed.mark_failed("late")
        assert claimed.status == OrderStatus.CLAIMED.value


class TestClaim:
    def test_claim_assigns_operator(self, unclaimed):
        unclaimed.claim("op-a")
        assert unclaimed.status == OrderStatus.CLAIMED.value
        assert unclaimed.operator_id == "op-a"
        assert unclaimed.claimed_at is not None
        assert [type(e) for e in unclaimed._events] == [OrderClaimed]

    def test_second_claim_is_already_claimed(self, claimed):
        with pytest.raises(ValidationError) as exc:
            claimed.claim("op-b")
        assert exc.value.messages["code"] == ["AlreadyClaimed"]
        assert claimed.operator_id == "op-a"

    def test_unpaid_order_is_not_claimable(self, placed_order):
        with pytest.raises(ValidationError) as exc:
            placed_order.claim("op-a")
        assert exc.value.messages["code"] == ["NotClaimable"]
        assert placed_order.operator_id is None


class TestOperatorProgression:
    def test_full_happy_path(self, claimed):
        for status in ("in_progress", "washed", "out_for_delivery", "completed"):
            claimed.advance_to(OrderStatus(status), "op-a")
            assert claimed.status == status
        assert claimed.completed_at is not None
        assert len([e for e in claimed._events if isinstance(e, OrderStatusChanged)]) == 4

    def test_skipping_to_completed_is_invalid(self, claimed):
        with pytest.raises(ValidationError) as exc:
            claimed.advance_to(OrderStatus.COMPLETED, "op-a")
        assert exc.value.messages["code"] == ["InvalidTransition"]
        assert claimed.status == OrderStatus.CLAIMED.value
        assert claimed._events == []

    def test_cannot_move_backwards(self, claimed):
        _walk_to(claimed, OrderStatus.WASHED)
        with pytest.raises(ValidationError):
            claimed.advance_to(OrderStatus.IN_PROGRESS, "op-a")
        assert claimed.status == OrderStatus.WASHED.value

    def test_only_assigned_operator_may_advance(self, claimed):
        with pytest.raises(ValidationError) as exc:
            claimed.advance_to(OrderStatus.IN_PROGRESS, "op-b")
        assert exc.value.messages["code"] == ["NotAssignedOperator"]
        assert claimed.status == OrderStatus.CLAIMED.value

    def test_advance_cannot_cancel(self, claimed):
        with pytest.raises(ValidationError):
            claimed.advance_to(OrderStatus.CANCELLED, "op-a")

    def test_stepped_status_starts_at_step_one(self, claimed):
        claimed.advance_to(OrderStatus.IN_PROGRESS, "op-a", evidence_uri="s3://bags/1.jpg")
        assert claimed.current_step == 1
        assert len(claimed.evidence) == 1
        claimed.advance_to(OrderStatus.WASHED, "op-a")
        assert claimed.current_step is None


class TestStepProgress:
    def test_record_forward_step(self, claimed):
        _walk_to(claimed, OrderStatus.IN_PROGRESS)
        claimed.record_progress("op-a", 2, evidence_uri="s3://bags/2.jpg")
        assert claimed.current_step == 2
        assert claimed.evidence[-1].step == 2
        assert [type(e) for e in claimed._events] == [OrderProgressRecorded]

    def test_steps_only_move_forward(self, claimed):
        _walk_to(claimed, OrderStatus.IN_PROGRESS)
        claimed.record_progress("op-a", 3)
        with pytest.raises(ValidationError):
            claimed.record_progress("op-a", 2)
        assert claimed.current_step == 3

    def test_no_steps_while_washed(self, claimed):
        _walk_to(claimed, OrderStatus.WASHED)
        with pytest.raises(ValidationError):
            claimed.record_progress("op-a", 2)


class TestCancel:
    def test_cancel_unclaimed_keeps_no_operator(self, unclaimed):
        unclaimed.cancel(reason="Changed plans", cancelled_by="cust-001", refund_percentage=100)
        assert unclaimed.status == OrderStatus.CANCELLED.value
        assert unclaimed.operator_id is None
        event = unclaimed._events[-1]
        assert isinstance(event, OrderCancelled)
        assert event.refund_amount_cents == unclaimed.total_amount_cents

    def test_cancel_claimed_keeps_the_claimant(self, claimed):
        claimed.cancel(reason=None, cancelled_by="admin", refund_percentage=75)
        assert claimed.operator_id == "op-a"
        assert claimed.refund_percentage == 75
        assert claimed._events[-1].refund_amount_cents == claimed.total_amount_cents * 75 // 100

    def test_unpaid_cancellation_refunds_nothing(self, placed_order):
        placed_order.cancel(reason=None, cancelled_by="cust-001", refund_percentage=100)
        assert placed_order._events[-1].refund_amount_cents == 0

    def test_cannot_cancel_once_work_started(self, claimed):
        _walk_to(claimed, OrderStatus.IN_PROGRESS)
        with pytest.raises(ValidationError) as exc:
            claimed.cancel(reason=None, cancelled_by="cust-001", refund_percentage=75)
        assert exc.value.messages["code"] == ["InvalidTransition"]


class TestTerminalStates:
    def test_cancelled_order_rejects_everything(self, unclaimed):
        unclaimed.cancel(reason=None, cancelled_by="admin", refund_percentage=100)
        for attempt in (
            lambda: unclaimed.claim("op-a"),
            unclaimed.confirm_payment,
            lambda: unclaimed.mark_failed("x"),
            lambda: unclaimed.cancel(reason=None, cancelled_by="admin", refund_percentage=100),
        ):
            with pytest.raises(ValidationError):
                attempt()
        assert unclaimed.status == OrderStatus.CANCELLED.value

    def test_completed_order_rejects_everything(self, claimed):
        _walk_to(claimed, OrderStatus.COMPLETED)
        with pytest.raises(ValidationError):
            claimed.cancel(reason=None, cancelled_by="admin", refund_percentage=0)
        with pytest.raises(ValidationError):
            claimed.advance_to(OrderStatus.COMPLETED, "op-a")
        with pytest.raises(ValidationError):
            claimed.record_progress("op-a", 5)
