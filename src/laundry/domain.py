"""Laundry bounded context: FreshDrop order fulfillment.

Prices and schedules pickup/delivery orders, gates them on service-area
eligibility, arbitrates operator claims, and drives each order through its
status lifecycle while triggering payment and notification side effects.
"""

from protean.domain import Domain

laundry = Domain(name="laundry")
