"""Shared BDD fixtures and step definitions for the laundry domain."""

from datetime import datetime, time, timedelta

import pytest
from laundry.order.claiming import ClaimCoordinator
from laundry.order.order import OrderStatus
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def order_request():
    """Keyword overrides collected by Given steps before an order is placed."""
    return {}


@pytest.fixture()
def outcome():
    """Results of When steps that are not exceptions."""
    return {}


@pytest.fixture()
def local_moment(clock):
    """Build ``hhmm`` on the clock's current date (plus ``days_after``) in its timezone."""

    def _at(hhmm: str, days_after: int = 0) -> datetime:
        day = clock.today() + timedelta(days=days_after)
        return datetime.combine(day, time.fromisoformat(hhmm), tzinfo=clock.moment.tzinfo)

    return _at


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("the FreshDrop marketplace is open")
def marketplace_is_open(marketplace):
    """Service areas 10001 and 10002, the preference catalogue and four operators."""


@given(parsers.cfparse('the local time is "{hhmm}"'))
def local_time_is(clock, hhmm):
    moment = time.fromisoformat(hhmm)
    clock.set(moment.hour, moment.minute)


@given("a paid order waiting for an operator", target_fixture="order_id")
def paid_order(unclaimed_order):
    return unclaimed_order


@given("an order awaiting payment", target_fixture="order_id")
def order_awaiting_payment(place_order):
    return place_order()["order_id"]


@given(parsers.cfparse('the order is claimed by "{operator_id}"'))
def order_is_claimed(order_id, operator_id):
    assert ClaimCoordinator().claim(order_id, operator_id).success


@given(parsers.cfparse('an order in status "{status}"'), target_fixture="order_id")
def order_in_status(status, place_order, confirm_payment):
    order_id = place_order()["order_id"]
    if status == OrderStatus.PLACED.value:
        return order_id
    confirm_payment(order_id)
    if status == OrderStatus.CLAIMED.value:
        assert ClaimCoordinator().claim(order_id, "op-a").success
    return order_id


# ---------------------------------------------------------------------------
# Then steps (shared)
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the request is refused with "{code}"'))
def request_refused_with(error, code):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)
    assert error["exc"].messages["code"] == [code]


@then("the request succeeds")
def request_succeeds(error):
    assert error["exc"] is None, f"Unexpected error: {error['exc']}"


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order_id, load_order, status):
    assert load_order(order_id).status == status
