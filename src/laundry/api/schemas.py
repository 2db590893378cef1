"""Pydantic request/response schemas for the Laundry API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class PreferenceSelection(BaseModel):
    soap: str | None = None
    wash_temp: str | None = None
    dry_temp: str | None = None


class AddOnsSchema(BaseModel):
    fragrance_free: bool = False
    shirts_on_hangers: bool = False
    extra_rinse: bool = False


class LineItemSchema(BaseModel):
    code: str
    description: str | None = None
    amount_cents: int


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class QuoteRequest(BaseModel):
    bag_count: int
    is_express: bool = False
    preferences: PreferenceSelection = Field(default_factory=PreferenceSelection)
    add_ons: AddOnsSchema = Field(default_factory=AddOnsSchema)
    promo_code: str | None = None


class PlaceOrderRequest(BaseModel):
    customer_id: str
    zip_code: str
    pickup_type: str  # locker, pickup_delivery
    service_type: str = "wash_fold"
    is_express: bool = False
    bag_count: int
    pickup_date: date
    window_slot: str  # morning, lunch, evening
    preferences: PreferenceSelection = Field(default_factory=PreferenceSelection)
    add_ons: AddOnsSchema = Field(default_factory=AddOnsSchema)
    promo_code: str | None = None
    pickup_address: str | None = None
    delivery_address: str | None = None
    locker_id: str | None = None
    special_instructions: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "zip_code": "10001",
                    "pickup_type": "pickup_delivery",
                    "service_type": "wash_fold",
                    "is_express": False,
                    "bag_count": 2,
                    "pickup_date": "2026-03-02",
                    "window_slot": "evening",
                    "preferences": {"soap": "soap-standard", "wash_temp": "wash-cold", "dry_temp": "dry-low"},
                    "add_ons": {"fragrance_free": True},
                    "pickup_address": "350 5th Ave, New York, NY",
                }
            ]
        }
    }


class ClaimRequest(BaseModel):
    operator_id: str


class AdvanceStatusRequest(BaseModel):
    operator_id: str
    target_status: str
    evidence_uri: str | None = None


class RecordProgressRequest(BaseModel):
    operator_id: str
    step: int = Field(ge=1)
    evidence_uri: str | None = None


class CancelOrderRequest(BaseModel):
    initiator: str
    reason: str | None = None


class PaymentWebhookRequest(BaseModel):
    order_id: str
    payment_intent_id: str | None = None
    gateway_status: str  # succeeded, failed
    failure_reason: str | None = None


# ---------------------------------------------------------------------------
# Admin Request Schemas
# ---------------------------------------------------------------------------
class ServiceAreaRequest(BaseModel):
    allows_delivery: bool = False
    allows_locker: bool = False
    allows_express: bool = False
    is_active: bool = True


class RegisterOperatorRequest(BaseModel):
    operator_id: str
    name: str | None = None
    zip_codes: list[str] = Field(default_factory=list)
    is_online: bool = False
    notifications_enabled: bool = True


class OperatorAvailabilityRequest(BaseModel):
    is_online: bool | None = None
    is_active: bool | None = None
    notifications_enabled: bool | None = None


class PreferenceRequest(BaseModel):
    category: str  # soap, wash_temp, dry_temp
    name: str
    price_cents: int = Field(default=0, ge=0)
    is_default: bool = False
    is_active: bool = True


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Card declined"


class ConfigureDispatcherRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Notification delivery failed"


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class QuoteResponse(BaseModel):
    line_items: list[LineItemSchema]
    subtotal_cents: int
    discount_cents: int
    total_cents: int
    promo_code: str | None = None


class PlaceOrderResponse(BaseModel):
    order_id: str
    client_secret: str | None = None
    total_cents: int
    status: str


class ClaimResponse(BaseModel):
    success: bool
    reason: str | None = None


class OrderStatusResponse(BaseModel):
    order_id: str
    status: str
    current_step: int | None = None


class CancelOrderResponse(BaseModel):
    refund_percentage: int
    new_status: str


class EvidenceSchema(BaseModel):
    status: str
    step: int | None = None
    uri: str
    recorded_at: datetime


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    customer_id: str
    operator_id: str | None = None
    zip_code: str
    pickup_type: str
    service_type: str
    is_express: bool
    bag_count: int
    status: str
    current_step: int | None = None
    payment_status: str | None = None
    pickup_window_start: datetime
    pickup_window_end: datetime
    delivery_window_start: datetime
    delivery_window_end: datetime
    line_items: list[LineItemSchema]
    subtotal_cents: int
    discount_cents: int
    total_cents: int
    promo_code: str | None = None
    refund_percentage: int | None = None
    evidence: list[EvidenceSchema] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderSummaryResponse(BaseModel):
    order_id: str
    status: str
    current_step: int | None = None
    operator_id: str | None = None
    total_amount_cents: int
    pickup_window_start: datetime | None = None
    created_at: datetime | None = None


class AvailableOrderResponse(BaseModel):
    order_id: str
    zip_code: str
    service_type: str
    is_express: bool
    total_amount_cents: int
    pickup_window_start: datetime | None = None
    pickup_window_end: datetime | None = None


class StatusResponse(BaseModel):
    status: str


class IdResponse(BaseModel):
    id: str


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    failure_reason: str


class DispatcherConfigResponse(BaseModel):
    dispatcher: str
    should_succeed: bool
    failure_reason: str
