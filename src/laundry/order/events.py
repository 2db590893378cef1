"""Order domain events, one per committed state transition.

Every status change raises exactly one of these. They carry enough context
(customer, operator, zip, new status) for notification targeting and the
read-side projections without re-loading the order.
"""

from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from laundry.domain import laundry


@laundry.event(part_of="Order")
class OrderPlaced:
    """A customer submitted a priced, scheduled order."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    zip_code = String(required=True)
    pickup_type = String(required=True)
    service_type = String(required=True)
    is_express = Boolean(default=False)
    bag_count = Integer(required=True)
    total_amount_cents = Integer(required=True)
    discount_amount_cents = Integer(default=0)
    promo_code = String()
    pickup_window_start = DateTime(required=True)
    pickup_window_end = DateTime(required=True)
    delivery_window_start = DateTime(required=True)
    delivery_window_end = DateTime(required=True)
    status = String(required=True)
    placed_at = DateTime(required=True)


@laundry.event(part_of="Order")
class PaymentConfirmed:
    """Payment was captured (or not needed); the order is open for claiming."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    zip_code = String(required=True)
    service_type = String(required=True)
    is_express = Boolean(default=False)
    total_amount_cents = Integer(required=True)
    payment_status = String(required=True)
    pickup_window_start = DateTime(required=True)
    pickup_window_end = DateTime(required=True)
    status = String(required=True)
    confirmed_at = DateTime(required=True)


@laundry.event(part_of="Order")
class OrderClaimed:
    """An operator won the claim on an unclaimed order."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    zip_code = String(required=True)
    operator_id = Identifier(required=True)
    status = String(required=True)
    claimed_at = DateTime(required=True)


@laundry.event(part_of="Order")
class OrderStatusChanged:
    """The assigned operator moved the order one step forward."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    zip_code = String(required=True)
    operator_id = Identifier(required=True)
    previous_status = String(required=True)
    status = String(required=True)
    current_step = Integer()
    evidence_uri = String(max_length=1000)
    changed_at = DateTime(required=True)


@laundry.event(part_of="Order")
class OrderProgressRecorded:
    """A sub-step within in_progress or out_for_delivery was completed."""

    __version__ = 1

    order_id = Identifier(required=True)
    operator_id = Identifier(required=True)
    status = String(required=True)
    current_step = Integer(required=True)
    evidence_uri = String(max_length=1000)
    recorded_at = DateTime(required=True)


@laundry.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled by the customer or an admin."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    zip_code = String(required=True)
    operator_id = Identifier()
    previous_status = String(required=True)
    status = String(required=True)
    refund_percentage = Integer(required=True)
    refund_amount_cents = Integer(default=0)
    reason = Text()
    cancelled_by = String(required=True)
    cancelled_at = DateTime(required=True)


@laundry.event(part_of="Order")
class OrderFailed:
    """Payment failed or its intent expired before capture."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    zip_code = String(required=True)
    previous_status = String(required=True)
    status = String(required=True)
    reason = String(max_length=500)
    failed_at = DateTime(required=True)


@laundry.event(part_of="Order")
class PaymentCapturedAfterClose:
    """The gateway captured money for an order that was already cancelled or failed.

    Not a status change: the order stays closed and the captured amount is
    handed back through a refund.
    """

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    zip_code = String(required=True)
    status = String(required=True)
    refund_percentage = Integer(required=True)
    refund_amount_cents = Integer(default=0)
    captured_at = DateTime(required=True)
