"""Order aggregate (CQRS): the state machine at the heart of fulfilment.

An order is priced and scheduled once, at placement, and from then on only
moves along the edges below. Each transition method validates its source
state, mutates the order inside ``atomic_change`` and raises exactly one
event. The ``status`` field carries the same transition map, so a direct
assignment that skips the state machine is rejected by the framework.

State Machine:
    PLACED → UNCLAIMED → CLAIMED → IN_PROGRESS → WASHED → OUT_FOR_DELIVERY → COMPLETED
    {PLACED, UNCLAIMED, CLAIMED} → CANCELLED
    {PLACED, UNCLAIMED} → FAILED
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    Status,
    String,
    Text,
    ValueObject,
)

from laundry.domain import laundry
from laundry.eligibility import PickupType
from laundry.order.events import (
    OrderCancelled,
    OrderClaimed,
    OrderFailed,
    OrderPlaced,
    OrderProgressRecorded,
    OrderStatusChanged,
    PaymentCapturedAfterClose,
    PaymentConfirmed,
)
from laundry.pricing import AddOns, PreferenceCost, PriceQuote, PricingPolicy, price
from laundry.scheduling import TimeWindows, WindowSlot


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PLACED = "placed"
    UNCLAIMED = "unclaimed"
    CLAIMED = "claimed"
    IN_PROGRESS = "in_progress"
    WASHED = "washed"
    OUT_FOR_DELIVERY = "out_for_delivery"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class ServiceType(Enum):
    WASH_FOLD = "wash_fold"
    WASH_HANG_DRY = "wash_hang_dry"
    EXPRESS = "express"
    DELICATES_AIRDRY = "delicates_airdry"


class PaymentStatus(Enum):
    NOT_REQUIRED = "not_required"
    PENDING = "pending"
    CAPTURED = "captured"
    FAILED = "failed"


_VALID_TRANSITIONS = {
    OrderStatus.PLACED: {OrderStatus.UNCLAIMED, OrderStatus.CANCELLED, OrderStatus.FAILED},
    OrderStatus.UNCLAIMED: {OrderStatus.CLAIMED, OrderStatus.CANCELLED, OrderStatus.FAILED},
    OrderStatus.CLAIMED: {OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED},
    OrderStatus.IN_PROGRESS: {OrderStatus.WASHED},
    OrderStatus.WASHED: {OrderStatus.OUT_FOR_DELIVERY},
    OrderStatus.OUT_FOR_DELIVERY: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),  # terminal
    OrderStatus.CANCELLED: set(),  # terminal
    OrderStatus.FAILED: set(),  # terminal
}

# Status groupings shared by every component; do not redefine elsewhere.
PRE_CLAIM_STATUSES = frozenset({OrderStatus.PLACED, OrderStatus.UNCLAIMED})
OPERATOR_STATUSES = frozenset(
    {
        OrderStatus.CLAIMED,
        OrderStatus.IN_PROGRESS,
        OrderStatus.WASHED,
        OrderStatus.OUT_FOR_DELIVERY,
        OrderStatus.COMPLETED,
    }
)
CANCELLABLE_STATUSES = frozenset({OrderStatus.PLACED, OrderStatus.UNCLAIMED, OrderStatus.CLAIMED})
FAILABLE_STATUSES = frozenset({OrderStatus.PLACED, OrderStatus.UNCLAIMED})
TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED, OrderStatus.FAILED})

# Operator-driven forward steps, in order
OPERATOR_PROGRESSION = (
    OrderStatus.CLAIMED,
    OrderStatus.IN_PROGRESS,
    OrderStatus.WASHED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.COMPLETED,
)

# Statuses with UI sub-steps tracked in ``current_step``
STEPPED_STATUSES = frozenset({OrderStatus.IN_PROGRESS, OrderStatus.OUT_FOR_DELIVERY})


def invalid_transition(current: OrderStatus, target: OrderStatus) -> ValidationError:
    return ValidationError(
        {
            "code": ["InvalidTransition"],
            "status": [f"Cannot transition from {current.value} to {target.value}"],
        }
    )


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@laundry.value_object(part_of="Order")
class AddOnSelection:
    """Optional extras chosen by the customer."""

    fragrance_free = Boolean(default=False)
    shirts_on_hangers = Boolean(default=False)
    extra_rinse = Boolean(default=False)

    def as_add_ons(self) -> AddOns:
        return AddOns(
            fragrance_free=bool(self.fragrance_free),
            shirts_on_hangers=bool(self.shirts_on_hangers),
            extra_rinse=bool(self.extra_rinse),
        )


@laundry.value_object(part_of="Order")
class PricingSnapshot:
    """Unit prices in force when the order was placed."""

    base_bag_cents = Integer(required=True, min_value=0)
    express_fee_cents = Integer(required=True, min_value=0)
    fragrance_free_cents = Integer(default=0, min_value=0)
    shirts_on_hangers_cents = Integer(default=0, min_value=0)
    extra_rinse_cents = Integer(default=0, min_value=0)

    @classmethod
    def from_policy(cls, policy: PricingPolicy) -> "PricingSnapshot":
        return cls(
            base_bag_cents=policy.base_bag_cents,
            express_fee_cents=policy.express_fee_cents,
            fragrance_free_cents=policy.add_on_cents.get("fragrance_free", 0),
            shirts_on_hangers_cents=policy.add_on_cents.get("shirts_on_hangers", 0),
            extra_rinse_cents=policy.add_on_cents.get("extra_rinse", 0),
        )

    def as_policy(self) -> PricingPolicy:
        return PricingPolicy(
            base_bag_cents=self.base_bag_cents,
            express_fee_cents=self.express_fee_cents,
            add_on_cents={
                "fragrance_free": self.fragrance_free_cents,
                "shirts_on_hangers": self.shirts_on_hangers_cents,
                "extra_rinse": self.extra_rinse_cents,
            },
        )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@laundry.entity(part_of="Order")
class SelectedPreference:
    """A soap/temperature choice with its cost locked at placement."""

    preference_id = Identifier(required=True)
    category = String(required=True, max_length=20)
    price_cents = Integer(default=0, min_value=0)


@laundry.entity(part_of="Order")
class PriceLine:
    """One itemized component of the order total."""

    code = String(required=True, max_length=50)
    description = String(max_length=200)
    amount_cents = Integer(required=True, min_value=0)


@laundry.entity(part_of="Order")
class StepEvidence:
    """An opaque reference (photo URI etc.) captured at a fulfilment step."""

    status = String(required=True, max_length=30)
    step = Integer()
    uri = String(required=True, max_length=1000)
    recorded_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@laundry.aggregate
class Order:
    customer_id = Identifier(required=True)
    zip_code = String(required=True, max_length=10)
    pickup_type = String(required=True, choices=PickupType)
    service_type = String(required=True, choices=ServiceType)
    is_express = Boolean(default=False)

    # Assignment
    operator_id = Identifier()
    claimed_at = DateTime()

    # Scheduling
    window_slot = String(choices=WindowSlot)
    pickup_window_start = DateTime(required=True)
    pickup_window_end = DateTime(required=True)
    delivery_window_start = DateTime(required=True)
    delivery_window_end = DateTime(required=True)

    # Logistics
    pickup_address = String(max_length=500)
    delivery_address = String(max_length=500)
    locker_id = String(max_length=100)
    special_instructions = Text()

    # Price inputs and the derived breakdown
    bag_count = Integer(required=True, min_value=1)
    preferences = HasMany(SelectedPreference)
    add_ons = ValueObject(AddOnSelection)
    promo_code = String(max_length=50)
    promo_percent_off = Integer(default=0, min_value=0, max_value=100)
    pricing = ValueObject(PricingSnapshot, required=True)
    line_items = HasMany(PriceLine)
    subtotal_amount_cents = Integer(default=0, min_value=0)
    discount_amount_cents = Integer(default=0, min_value=0)
    total_amount_cents = Integer(required=True, min_value=0)

    # Payment
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_intent_id = String(max_length=255)

    # Progress
    status = Status(OrderStatus, transitions=_VALID_TRANSITIONS, default=OrderStatus.PLACED)
    current_step = Integer(min_value=1)
    evidence = HasMany(StepEvidence)

    # Outcome
    refund_percentage = Integer(min_value=0, max_value=100)
    cancellation_reason = Text()
    cancelled_by = String(max_length=100)
    failure_reason = String(max_length=500)

    created_at = DateTime()
    updated_at = DateTime()
    completed_at = DateTime()
    cancelled_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def operator_assigned_exactly_when_claimed(self):
        status = OrderStatus(self.status)
        if status in OPERATOR_STATUSES and not self.operator_id:
            raise ValidationError({"operator_id": [f"An operator is required once the order is {status.value}"]})
        if status in PRE_CLAIM_STATUSES | {OrderStatus.FAILED} and self.operator_id:
            raise ValidationError({"operator_id": [f"An order that is {status.value} cannot have an operator"]})

    @invariant.post
    def total_is_reproducible_from_price_inputs(self):
        if self.total_amount_cents != self.quote().total_cents:
            raise ValidationError({"total_amount_cents": ["Total does not match the order's price inputs"]})

    @invariant.post
    def current_step_only_while_stepped(self):
        if self.current_step is not None and OrderStatus(self.status) not in STEPPED_STATUSES:
            raise ValidationError({"current_step": [f"No sub-steps while the order is {self.status}"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id: str,
        zip_code: str,
        pickup_type: str,
        service_type: str,
        is_express: bool,
        bag_count: int,
        windows: TimeWindows,
        window_slot: str | None = None,
        preferences: list[PreferenceCost] | None = None,
        add_ons: AddOns | None = None,
        promo_code: str | None = None,
        promotions: dict[str, int] | None = None,
        policy: PricingPolicy | None = None,
        pickup_address: str | None = None,
        delivery_address: str | None = None,
        locker_id: str | None = None,
        special_instructions: str | None = None,
    ):
        """Price a new order and create it in PLACED."""
        policy = policy or PricingPolicy()
        add_ons = add_ons or AddOns()
        preferences = preferences or []
        quote = price(
            bag_count=bag_count,
            is_express=is_express,
            preference_costs=preferences,
            add_ons=add_ons,
            promo_code=promo_code,
            promotions=promotions,
            policy=policy,
        )

        now = datetime.now(UTC)
        order = cls(
            customer_id=customer_id,
            zip_code=zip_code,
            pickup_type=pickup_type,
            service_type=service_type,
            is_express=is_express,
            window_slot=window_slot,
            pickup_window_start=windows.pickup_start,
            pickup_window_end=windows.pickup_end,
            delivery_window_start=windows.delivery_start,
            delivery_window_end=windows.delivery_end,
            pickup_address=pickup_address,
            delivery_address=delivery_address,
            locker_id=locker_id,
            special_instructions=special_instructions,
            bag_count=bag_count,
            preferences=[
                SelectedPreference(
                    preference_id=pref.preference_id,
                    category=pref.category,
                    price_cents=pref.price_cents,
                )
                for pref in preferences
            ],
            add_ons=AddOnSelection(
                fragrance_free=add_ons.fragrance_free,
                shirts_on_hangers=add_ons.shirts_on_hangers,
                extra_rinse=add_ons.extra_rinse,
            ),
            promo_code=quote.promo_code,
            promo_percent_off=quote.promo_percent_off,
            pricing=PricingSnapshot.from_policy(policy),
            line_items=[
                PriceLine(code=line.code, description=line.description, amount_cents=line.amount_cents)
                for line in quote.line_items
            ],
            subtotal_amount_cents=quote.subtotal_cents,
            discount_amount_cents=quote.discount_cents,
            total_amount_cents=quote.total_cents,
            payment_status=(PaymentStatus.PENDING.value if quote.total_cents > 0 else PaymentStatus.NOT_REQUIRED.value),
            status=OrderStatus.PLACED.value,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=customer_id,
                zip_code=zip_code,
                pickup_type=pickup_type,
                service_type=service_type,
                is_express=is_express,
                bag_count=bag_count,
                total_amount_cents=order.total_amount_cents,
                discount_amount_cents=order.discount_amount_cents,
                promo_code=order.promo_code,
                pickup_window_start=windows.pickup_start,
                pickup_window_end=windows.pickup_end,
                delivery_window_start=windows.delivery_start,
                delivery_window_end=windows.delivery_end,
                status=order.status,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def order_number(self) -> str:
        """Short human-facing reference used in customer messages."""
        return str(self.id)[:8].upper()

    @property
    def requires_payment(self) -> bool:
        return self.payment_status != PaymentStatus.NOT_REQUIRED.value

    def quote(self) -> PriceQuote:
        """Recompute the price from the stored inputs."""
        promotions = {self.promo_code: self.promo_percent_off} if self.promo_code else None
        return price(
            bag_count=self.bag_count,
            is_express=bool(self.is_express),
            preference_costs=[
                PreferenceCost(
                    preference_id=str(p.preference_id),
                    category=p.category,
                    price_cents=p.price_cents or 0,
                )
                for p in (self.preferences or [])
            ],
            add_ons=self.add_ons.as_add_ons() if self.add_ons else AddOns(),
            promo_code=self.promo_code,
            promotions=promotions,
            policy=self.pricing.as_policy() if self.pricing else PricingPolicy(),
        )

    def refund_amount_for(self, percentage: int) -> int:
        if self.payment_status != PaymentStatus.CAPTURED.value or not self.total_amount_cents:
            return 0
        return (self.total_amount_cents * percentage) // 100

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise invalid_transition(current, target_status)

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def attach_payment_intent(self, intent_id: str) -> None:
        """Remember the gateway intent created for this order."""
        if OrderStatus(self.status) != OrderStatus.PLACED:
            raise ValidationError({"status": ["A payment intent can only be attached while the order is placed"]})
        self.payment_intent_id = intent_id
        self.updated_at = datetime.now(UTC)

    def confirm_payment(self) -> None:
        """Payment captured (or nothing to pay): open the order to operators."""
        self._assert_can_transition(OrderStatus.UNCLAIMED)
        now = datetime.now(UTC)
        with atomic_change(self):
            if self.requires_payment:
                self.payment_status = PaymentStatus.CAPTURED.value
            self.status = OrderStatus.UNCLAIMED.value
            self.updated_at = now
        self.raise_(
            PaymentConfirmed(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                zip_code=self.zip_code,
                service_type=self.service_type,
                is_express=bool(self.is_express),
                total_amount_cents=self.total_amount_cents,
                payment_status=self.payment_status,
                pickup_window_start=self.pickup_window_start,
                pickup_window_end=self.pickup_window_end,
                status=self.status,
                confirmed_at=now,
            )
        )

    def mark_failed(self, reason: str) -> None:
        """Payment failed or its intent expired before capture."""
        previous = OrderStatus(self.status)
        self._assert_can_transition(OrderStatus.FAILED)
        now = datetime.now(UTC)
        with atomic_change(self):
            if self.requires_payment:
                self.payment_status = PaymentStatus.FAILED.value
            self.status = OrderStatus.FAILED.value
            self.failure_reason = reason
            self.updated_at = now
        self.raise_(
            OrderFailed(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                zip_code=self.zip_code,
                previous_status=previous.value,
                status=self.status,
                reason=reason,
                failed_at=now,
            )
        )

    def record_late_capture(self) -> None:
        """Capture landed after the order closed: keep it closed and owe a refund.

        A cancelled order refunds what its cancellation granted; a failed
        order never opened, so everything goes back.
        """
        current = OrderStatus(self.status)
        if current not in (OrderStatus.CANCELLED, OrderStatus.FAILED):
            raise invalid_transition(current, OrderStatus.UNCLAIMED)

        if current == OrderStatus.CANCELLED and self.refund_percentage is not None:
            percentage = self.refund_percentage
        else:
            percentage = 100

        now = datetime.now(UTC)
        with atomic_change(self):
            self.payment_status = PaymentStatus.CAPTURED.value
            self.updated_at = now
        self.raise_(
            PaymentCapturedAfterClose(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                zip_code=self.zip_code,
                status=self.status,
                refund_percentage=percentage,
                refund_amount_cents=self.refund_amount_for(percentage),
                captured_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Claim
    # -------------------------------------------------------------------
    def claim(self, operator_id: str) -> None:
        """Take ownership for ``operator_id``. Guard: unclaimed with no operator."""
        current = OrderStatus(self.status)
        if current != OrderStatus.UNCLAIMED or self.operator_id:
            # Someone else holds (or held) the order; otherwise it never opened
            code = "AlreadyClaimed" if self.operator_id else "NotClaimable"
            raise ValidationError(
                {
                    "code": [code],
                    "status": [f"Order is {current.value} and cannot be claimed"],
                }
            )

        now = datetime.now(UTC)
        with atomic_change(self):
            self.operator_id = operator_id
            self.claimed_at = now
            self.status = OrderStatus.CLAIMED.value
            self.updated_at = now
        self.raise_(
            OrderClaimed(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                zip_code=self.zip_code,
                operator_id=operator_id,
                status=self.status,
                claimed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Operator progression
    # -------------------------------------------------------------------
    def _assert_assigned(self, operator_id: str) -> None:
        if str(self.operator_id) != str(operator_id):
            raise ValidationError(
                {
                    "code": ["NotAssignedOperator"],
                    "operator_id": ["Only the assigned operator can update this order"],
                }
            )

    def advance_to(self, target: OrderStatus, operator_id: str, evidence_uri: str | None = None) -> None:
        """Move one step forward along the operator progression."""
        current = OrderStatus(self.status)
        target = OrderStatus(target)
        if target not in OPERATOR_PROGRESSION[1:]:
            raise invalid_transition(current, target)
        self._assert_can_transition(target)
        self._assert_assigned(operator_id)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target.value
            self.current_step = 1 if target in STEPPED_STATUSES else None
            if target == OrderStatus.COMPLETED:
                self.completed_at = now
            if evidence_uri:
                self.add_evidence(
                    StepEvidence(status=target.value, step=self.current_step, uri=evidence_uri, recorded_at=now)
                )
            self.updated_at = now
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                zip_code=self.zip_code,
                operator_id=str(self.operator_id),
                previous_status=current.value,
                status=self.status,
                current_step=self.current_step,
                evidence_uri=evidence_uri,
                changed_at=now,
            )
        )

    def record_progress(self, operator_id: str, step: int, evidence_uri: str | None = None) -> None:
        """Record a UI sub-step within the current stepped status."""
        current = OrderStatus(self.status)
        if current not in STEPPED_STATUSES:
            raise ValidationError({"status": [f"Sub-steps can only be recorded while in progress or out for delivery, not {current.value}"]})
        self._assert_assigned(operator_id)
        if step is None or step <= (self.current_step or 0):
            raise ValidationError({"current_step": [f"Step must move forward from {self.current_step}"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.current_step = step
            if evidence_uri:
                self.add_evidence(StepEvidence(status=current.value, step=step, uri=evidence_uri, recorded_at=now))
            self.updated_at = now
        self.raise_(
            OrderProgressRecorded(
                order_id=str(self.id),
                operator_id=str(self.operator_id),
                status=self.status,
                current_step=step,
                evidence_uri=evidence_uri,
                recorded_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self, reason: str | None, cancelled_by: str, refund_percentage: int) -> None:
        """Cancel before work starts; the claimant, if any, stays on record."""
        previous = OrderStatus(self.status)
        self._assert_can_transition(OrderStatus.CANCELLED)
        if not 0 <= refund_percentage <= 100:
            raise ValidationError({"refund_percentage": ["Refund percentage must be between 0 and 100"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = OrderStatus.CANCELLED.value
            self.refund_percentage = refund_percentage
            self.cancellation_reason = reason
            self.cancelled_by = cancelled_by
            self.cancelled_at = now
            self.updated_at = now
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                zip_code=self.zip_code,
                operator_id=str(self.operator_id) if self.operator_id else None,
                previous_status=previous.value,
                status=self.status,
                refund_percentage=refund_percentage,
                refund_amount_cents=self.refund_amount_for(refund_percentage),
                reason=reason,
                cancelled_by=cancelled_by,
                cancelled_at=now,
            )
        )
