"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; nothing is shared
between simulated users except what the server itself arbitrates.
"""

from dataclasses import dataclass, field


@dataclass
class CustomerState:
    """A simulated customer and the orders they have placed."""

    customer_id: str | None = None
    order_ids: list[str] = field(default_factory=list)


@dataclass
class OrderState:
    """Tracks a single order through its lifecycle."""

    order_id: str | None = None
    zip_code: str | None = None
    total_cents: int = 0
    current_status: str = "placed"


@dataclass
class OperatorState:
    """A simulated operator and the orders they managed to claim."""

    operator_id: str | None = None
    zip_codes: list[str] = field(default_factory=list)
    claimed: list[str] = field(default_factory=list)
    claims_won: int = 0
    claims_lost: int = 0
