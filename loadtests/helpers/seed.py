"""Reference data every scenario relies on.

Admin endpoints are upserts, so each simulated user can seed on start
without coordinating with the others.
"""

from loadtests.data_generators import PREFERENCES, SERVICE_AREAS


def seed_reference_data(client) -> None:
    for zip_code, flags in SERVICE_AREAS.items():
        client.put(f"/service-areas/{zip_code}", json=flags, name="PUT /service-areas/{zip}")
    for preference_id, category, name, price_cents, is_default in PREFERENCES:
        client.put(
            f"/preferences/{preference_id}",
            json={"category": category, "name": name, "price_cents": price_cents, "is_default": is_default},
            name="PUT /preferences/{id}",
        )
