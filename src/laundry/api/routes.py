"""FastAPI routes for the Laundry domain."""

import json
import os

from fastapi import APIRouter, Header, HTTPException
from protean.utils.globals import current_domain

from laundry.api.schemas import (
    AdvanceStatusRequest,
    AvailableOrderResponse,
    CancelOrderRequest,
    CancelOrderResponse,
    ClaimRequest,
    ClaimResponse,
    ConfigureDispatcherRequest,
    ConfigureGatewayRequest,
    DispatcherConfigResponse,
    EvidenceSchema,
    GatewayConfigResponse,
    IdResponse,
    LineItemSchema,
    OperatorAvailabilityRequest,
    OrderResponse,
    OrderStatusResponse,
    OrderSummaryResponse,
    PaymentWebhookRequest,
    PlaceOrderRequest,
    PlaceOrderResponse,
    PreferenceRequest,
    QuoteRequest,
    QuoteResponse,
    RecordProgressRequest,
    RegisterOperatorRequest,
    ServiceAreaRequest,
    StatusResponse,
)
from laundry.area.management import UpsertServiceArea
from laundry.dispatch import get_dispatcher
from laundry.dispatch.fake_adapter import FakeNotificationDispatcher
from laundry.gateway import get_gateway
from laundry.gateway.fake_adapter import FakeGateway
from laundry.operator.registration import RegisterOperatorCandidate, UpdateOperatorAvailability
from laundry.order.cancellation import CancelOrder
from laundry.order.claiming import ClaimCoordinator
from laundry.order.order import Order
from laundry.order.payment import ConfirmPayment, ExpirePaymentIntent, RecordPaymentFailure
from laundry.order.placement import PlaceOrder, quote_order
from laundry.order.progress import AdvanceOrderStatus, RecordStepProgress
from laundry.preference.management import UpsertPreference
from laundry.pricing import AddOns
from laundry.projections.available_orders import available_orders_for
from laundry.projections.order_summary import orders_for_customer


def _reject_in_production(what: str) -> None:
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail=f"{what} configuration not available in production")


def _order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        order_id=str(order.id),
        order_number=order.order_number,
        customer_id=str(order.customer_id),
        operator_id=str(order.operator_id) if order.operator_id else None,
        zip_code=order.zip_code,
        pickup_type=order.pickup_type,
        service_type=order.service_type,
        is_express=bool(order.is_express),
        bag_count=order.bag_count,
        status=order.status,
        current_step=order.current_step,
        payment_status=order.payment_status,
        pickup_window_start=order.pickup_window_start,
        pickup_window_end=order.pickup_window_end,
        delivery_window_start=order.delivery_window_start,
        delivery_window_end=order.delivery_window_end,
        line_items=[
            LineItemSchema(code=line.code, description=line.description, amount_cents=line.amount_cents)
            for line in order.line_items
        ],
        subtotal_cents=order.subtotal_amount_cents,
        discount_cents=order.discount_amount_cents,
        total_cents=order.total_amount_cents,
        promo_code=order.promo_code,
        refund_percentage=order.refund_percentage,
        evidence=[
            EvidenceSchema(status=item.status, step=item.step, uri=item.uri, recorded_at=item.recorded_at)
            for item in order.evidence
        ],
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("/quote", response_model=QuoteResponse)
async def quote(body: QuoteRequest) -> QuoteResponse:
    """Price an order without placing it."""
    result = quote_order(
        bag_count=body.bag_count,
        is_express=body.is_express,
        selected_preferences=body.preferences.model_dump(),
        add_ons=AddOns(**body.add_ons.model_dump()),
        promo_code=body.promo_code,
    )
    return QuoteResponse(
        line_items=[
            LineItemSchema(code=line.code, description=line.description, amount_cents=line.amount_cents)
            for line in result.line_items
        ],
        subtotal_cents=result.subtotal_cents,
        discount_cents=result.discount_cents,
        total_cents=result.total_cents,
        promo_code=result.promo_code,
    )


@order_router.post("", status_code=201, response_model=PlaceOrderResponse)
async def place_order(body: PlaceOrderRequest) -> PlaceOrderResponse:
    """Validate, price and schedule a new order, then open its payment intent."""
    command = PlaceOrder(
        customer_id=body.customer_id,
        zip_code=body.zip_code,
        pickup_type=body.pickup_type,
        service_type=body.service_type,
        is_express=body.is_express,
        bag_count=body.bag_count,
        pickup_date=body.pickup_date,
        window_slot=body.window_slot,
        soap_preference_id=body.preferences.soap,
        wash_temp_preference_id=body.preferences.wash_temp,
        dry_temp_preference_id=body.preferences.dry_temp,
        fragrance_free=body.add_ons.fragrance_free,
        shirts_on_hangers=body.add_ons.shirts_on_hangers,
        extra_rinse=body.add_ons.extra_rinse,
        promo_code=body.promo_code,
        pickup_address=body.pickup_address,
        delivery_address=body.delivery_address,
        locker_id=body.locker_id,
        special_instructions=body.special_instructions,
    )
    result = current_domain.process(command, asynchronous=False)
    return PlaceOrderResponse(**result)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    order = current_domain.repository_for(Order).get(order_id)
    return _order_response(order)


@order_router.post("/{order_id}/claim", response_model=ClaimResponse, response_model_exclude_none=True)
async def claim_order(order_id: str, body: ClaimRequest) -> ClaimResponse:
    """Try to take ownership of an unclaimed order. Losing is not an error."""
    result = ClaimCoordinator().claim(order_id, body.operator_id)
    return ClaimResponse(**result.to_dict())


@order_router.put("/{order_id}/status", response_model=OrderStatusResponse)
async def advance_status(order_id: str, body: AdvanceStatusRequest) -> OrderStatusResponse:
    command = AdvanceOrderStatus(
        order_id=order_id,
        operator_id=body.operator_id,
        target_status=body.target_status,
        evidence_uri=body.evidence_uri,
    )
    current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return OrderStatusResponse(order_id=str(order.id), status=order.status, current_step=order.current_step)


@order_router.put("/{order_id}/progress", response_model=OrderStatusResponse)
async def record_progress(order_id: str, body: RecordProgressRequest) -> OrderStatusResponse:
    """Record a sub-step (with optional evidence) within the current status."""
    command = RecordStepProgress(
        order_id=order_id,
        operator_id=body.operator_id,
        step=body.step,
        evidence_uri=body.evidence_uri,
    )
    current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return OrderStatusResponse(order_id=str(order.id), status=order.status, current_step=order.current_step)


@order_router.post("/{order_id}/cancel", response_model=CancelOrderResponse)
async def cancel_order(order_id: str, body: CancelOrderRequest) -> CancelOrderResponse:
    command = CancelOrder(order_id=order_id, initiator=body.initiator, reason=body.reason)
    result = current_domain.process(command, asynchronous=False)
    return CancelOrderResponse(**result)


@order_router.post("/{order_id}/expire", response_model=StatusResponse)
async def expire_payment(order_id: str) -> StatusResponse:
    """External timeout signal: the payment intent lapsed before capture."""
    status = current_domain.process(ExpirePaymentIntent(order_id=order_id), asynchronous=False)
    return StatusResponse(status=status)


# ---------------------------------------------------------------------------
# Customer Router
# ---------------------------------------------------------------------------
customer_router = APIRouter(prefix="/customers", tags=["customers"])


@customer_router.get("/{customer_id}/orders", response_model=list[OrderSummaryResponse])
async def list_customer_orders(customer_id: str) -> list[OrderSummaryResponse]:
    return [
        OrderSummaryResponse(
            order_id=str(summary.order_id),
            status=summary.status,
            current_step=summary.current_step,
            operator_id=str(summary.operator_id) if summary.operator_id else None,
            total_amount_cents=summary.total_amount_cents or 0,
            pickup_window_start=summary.pickup_window_start,
            created_at=summary.created_at,
        )
        for summary in orders_for_customer(customer_id)
    ]


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/webhook", response_model=StatusResponse)
async def process_webhook(
    body: PaymentWebhookRequest,
    x_gateway_signature: str = Header(default=""),
) -> StatusResponse:
    """Process a payment gateway capture/failure callback."""
    gateway = get_gateway()
    if not gateway.verify_webhook_signature(json.dumps(body.model_dump()), x_gateway_signature):
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    if body.gateway_status == "succeeded":
        command = ConfirmPayment(order_id=body.order_id, payment_intent_id=body.payment_intent_id)
    else:
        command = RecordPaymentFailure(order_id=body.order_id, reason=body.failure_reason)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="processed")


@payment_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only)."""
    _reject_in_production("Gateway")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(should_succeed=body.should_succeed, failure_reason=body.failure_reason)
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_reason=gateway.failure_reason,
    )


# ---------------------------------------------------------------------------
# Notification Router
# ---------------------------------------------------------------------------
notification_router = APIRouter(prefix="/notifications", tags=["notifications"])


@notification_router.post("/dispatcher/configure", response_model=DispatcherConfigResponse)
async def configure_dispatcher(body: ConfigureDispatcherRequest) -> DispatcherConfigResponse:
    """Configure the fake dispatcher behavior (non-production only)."""
    _reject_in_production("Dispatcher")

    dispatcher = get_dispatcher()
    if not isinstance(dispatcher, FakeNotificationDispatcher):
        raise HTTPException(status_code=400, detail="Dispatcher configuration only available for the fake")

    dispatcher.configure(should_succeed=body.should_succeed, failure_reason=body.failure_reason)
    return DispatcherConfigResponse(
        dispatcher=type(dispatcher).__name__,
        should_succeed=dispatcher.should_succeed,
        failure_reason=dispatcher.failure_reason,
    )


# ---------------------------------------------------------------------------
# Operator Router
# ---------------------------------------------------------------------------
operator_router = APIRouter(prefix="/operators", tags=["operators"])


@operator_router.post("", status_code=201, response_model=IdResponse)
async def register_operator(body: RegisterOperatorRequest) -> IdResponse:
    command = RegisterOperatorCandidate(
        operator_id=body.operator_id,
        name=body.name,
        zip_codes=body.zip_codes,
        is_online=body.is_online,
        notifications_enabled=body.notifications_enabled,
    )
    operator_id = current_domain.process(command, asynchronous=False)
    return IdResponse(id=operator_id)


@operator_router.put("/{operator_id}/availability", response_model=StatusResponse)
async def update_availability(operator_id: str, body: OperatorAvailabilityRequest) -> StatusResponse:
    command = UpdateOperatorAvailability(
        operator_id=operator_id,
        is_online=body.is_online,
        is_active=body.is_active,
        notifications_enabled=body.notifications_enabled,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="updated")


@operator_router.get("/{operator_id}/available-orders", response_model=list[AvailableOrderResponse])
async def available_orders(operator_id: str) -> list[AvailableOrderResponse]:
    """Unclaimed orders in the operator's zip codes, soonest pickup first."""
    return [
        AvailableOrderResponse(
            order_id=str(record.order_id),
            zip_code=record.zip_code,
            service_type=record.service_type,
            is_express=bool(record.is_express),
            total_amount_cents=record.total_amount_cents or 0,
            pickup_window_start=record.pickup_window_start,
            pickup_window_end=record.pickup_window_end,
        )
        for record in available_orders_for(operator_id)
    ]


# ---------------------------------------------------------------------------
# Admin Routers
# ---------------------------------------------------------------------------
service_area_router = APIRouter(prefix="/service-areas", tags=["admin"])


@service_area_router.put("/{zip_code}", response_model=IdResponse)
async def upsert_service_area(zip_code: str, body: ServiceAreaRequest) -> IdResponse:
    command = UpsertServiceArea(
        zip_code=zip_code,
        allows_delivery=body.allows_delivery,
        allows_locker=body.allows_locker,
        allows_express=body.allows_express,
        is_active=body.is_active,
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


preference_router = APIRouter(prefix="/preferences", tags=["admin"])


@preference_router.put("/{preference_id}", response_model=IdResponse)
async def upsert_preference(preference_id: str, body: PreferenceRequest) -> IdResponse:
    command = UpsertPreference(
        preference_id=preference_id,
        category=body.category,
        name=body.name,
        price_cents=body.price_cents,
        is_default=body.is_default,
        is_active=body.is_active,
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)
