"""Laundry API package."""

from laundry.api.routes import (
    customer_router,
    notification_router,
    operator_router,
    order_router,
    payment_router,
    preference_router,
    service_area_router,
)

__all__ = [
    "order_router",
    "customer_router",
    "payment_router",
    "notification_router",
    "operator_router",
    "service_area_router",
    "preference_router",
]
