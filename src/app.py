"""FreshDrop FastAPI application.

Web server that processes laundry order commands synchronously via HTTP.
Every request is wrapped in the laundry domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (handlers fire in the UoW)
#   - "production" → event_processing = "async" (handlers fire via Engine)
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from laundry.domain import laundry
from laundry.utils.logging import add_context, clear_context, configure_logging
from protean.integrations.fastapi import register_exception_handlers

configure_logging()
laundry.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="FreshDrop API",
    description="Laundry pickup & delivery: order fulfillment orchestrator",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the laundry domain context and a request id for each request."""
    clear_context()
    add_context(request_id=request.headers.get("x-request-id") or uuid4().hex, path=request.url.path)
    with laundry.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from laundry.api import (  # noqa: E402
    customer_router,
    notification_router,
    operator_router,
    order_router,
    payment_router,
    preference_router,
    service_area_router,
)

app.include_router(order_router)
app.include_router(customer_router)
app.include_router(payment_router)
app.include_router(notification_router)
app.include_router(operator_router)
app.include_router(service_area_router)
app.include_router(preference_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {"laundry": {"name": laundry.name}},
        }
    )
