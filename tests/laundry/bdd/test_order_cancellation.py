"""BDD tests for cancellation and the refund policy."""

from laundry.order.cancellation import CancelOrder
from laundry.order.progress import AdvanceOrderStatus
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/order_cancellation.feature")


@given(parsers.cfparse('operator "{operator_id}" has started washing'))
def started_washing(order_id, operator_id):
    current_domain.process(
        AdvanceOrderStatus(order_id=order_id, operator_id=operator_id, target_status="in_progress"),
        asynchronous=False,
    )


@given("the payment gateway rejects refunds")
def gateway_rejects(gateway):
    gateway.configure(should_succeed=False, failure_reason="Refund window closed")


@when("the customer cancels the order")
def customer_cancels(order_id, outcome, error):
    try:
        outcome["cancel"] = current_domain.process(
            CancelOrder(order_id=order_id, initiator="cust-001", reason="Plans changed"),
            asynchronous=False,
        )
    except ValidationError as exc:
        error["exc"] = exc


@then(parsers.cfparse("the refund percentage is {percentage:d}"))
def refund_percentage_is(outcome, order_id, load_order, percentage):
    assert outcome["cancel"]["refund_percentage"] == percentage
    assert load_order(order_id).refund_percentage == percentage


@then(parsers.cfparse("the gateway is asked to refund {percentage:d} percent"))
def refund_requested(gateway, order_id, percentage):
    refunds = [call for call in gateway.calls if call["method"] == "refund"]
    assert refunds == [{"method": "refund", "order_id": order_id, "percentage": percentage}]


@then("no refund is requested")
def no_refund(gateway):
    assert [call for call in gateway.calls if call["method"] == "refund"] == []
