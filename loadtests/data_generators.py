"""Faker-based data generators for Locust load test scenarios.

Payloads match the field names of the API's Pydantic request schemas and
only target the seeded zip codes, so every generated order is placeable.
"""

import hashlib
import hmac
import json
import random
import uuid
from datetime import date, timedelta

from faker import Faker

fake = Faker()

# Local webhook secret used by the fake gateway outside production
WEBHOOK_SECRET = "whsec_local"

SERVICE_AREAS = {
    "10001": {"allows_delivery": True, "allows_locker": True, "allows_express": True},
    "10002": {"allows_delivery": True, "allows_locker": False, "allows_express": False},
    "10003": {"allows_delivery": True, "allows_locker": True, "allows_express": False},
}

PREFERENCES = [
    ("soap-standard", "soap", "Standard detergent", 0, True),
    ("soap-hypo", "soap", "Hypoallergenic", 200, False),
    ("wash-cold", "wash_temp", "Cold", 0, True),
    ("wash-hot", "wash_temp", "Hot", 0, False),
    ("dry-low", "dry_temp", "Low heat", 0, True),
    ("dry-air", "dry_temp", "Air dry", 150, False),
]


# ---------- Reference data ----------


def unique_operator_id() -> str:
    return f"op-lt-{uuid.uuid4().hex[:8]}"


def unique_customer_id() -> str:
    return f"cust-lt-{uuid.uuid4().hex[:8]}"


def operator_data(zip_codes: list[str] | None = None) -> dict:
    """Generate RegisterOperatorRequest payload for an online operator."""
    return {
        "operator_id": unique_operator_id(),
        "name": fake.name()[:150],
        "zip_codes": zip_codes or random.sample(sorted(SERVICE_AREAS), k=random.randint(1, 2)),
        "is_online": True,
        "notifications_enabled": True,
    }


# ---------- Orders ----------


def order_data(customer_id: str | None = None, zip_code: str | None = None) -> dict:
    """Generate a PlaceOrderRequest for tomorrow, which always clears the lead time."""
    zip_code = zip_code or random.choice(sorted(SERVICE_AREAS))
    area = SERVICE_AREAS[zip_code]
    pickup_type = "locker" if area["allows_locker"] and random.random() < 0.2 else "pickup_delivery"

    payload = {
        "customer_id": customer_id or unique_customer_id(),
        "zip_code": zip_code,
        "pickup_type": pickup_type,
        "service_type": random.choice(["wash_fold", "wash_fold", "wash_hang_dry", "delicates_airdry"]),
        "bag_count": random.randint(1, 4),
        "pickup_date": (date.today() + timedelta(days=1)).isoformat(),
        "window_slot": random.choice(["morning", "lunch", "evening"]),
        "preferences": {
            "soap": random.choice([None, "soap-hypo"]),
            "dry_temp": random.choice([None, None, "dry-air"]),
        },
        "add_ons": {
            "fragrance_free": random.random() < 0.3,
            "shirts_on_hangers": random.random() < 0.2,
            "extra_rinse": random.random() < 0.1,
        },
    }
    if pickup_type == "locker":
        payload["locker_id"] = f"LKR-{random.randint(1, 40)}"
    else:
        payload["pickup_address"] = fake.street_address()[:500]
        payload["special_instructions"] = fake.sentence() if random.random() < 0.3 else None
    return payload


def webhook_payload(order_id: str, succeeded: bool = True) -> tuple[dict, dict]:
    """PaymentWebhookRequest body and its signature header.

    Keys are in schema order; the server signs ``json.dumps`` of the
    validated model, so the order matters.
    """
    body = {
        "order_id": order_id,
        "payment_intent_id": None,
        "gateway_status": "succeeded" if succeeded else "failed",
        "failure_reason": None if succeeded else "Card declined",
    }
    signature = hmac.new(WEBHOOK_SECRET.encode(), json.dumps(body).encode(), hashlib.sha256).hexdigest()
    return body, {"X-Gateway-Signature": signature}


def cancel_data() -> dict:
    return {"initiator": "customer", "reason": fake.sentence()[:200]}
