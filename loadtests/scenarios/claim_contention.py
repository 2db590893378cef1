"""Claim contention between operators.

OperatorUser polls its available-orders feed and races to claim the first
order, then walks the order through to completion. Many operators share
the same few zip codes, so most claims lose. A lost claim is an expected
outcome and is recorded as a success on the Locust side.
"""

from locust import HttpUser, between, events, task

from loadtests.data_generators import operator_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import OperatorState

PROGRESSION = ["in_progress", "washed", "out_for_delivery", "completed"]

_claim_totals = {"won": 0, "lost": 0}


class OperatorUser(HttpUser):
    """An online operator competing for orders in its zip codes."""

    wait_time = between(0.2, 1.0)

    def on_start(self):
        self.state = OperatorState()
        payload = operator_data()
        with self.client.post("/operators", json=payload, catch_response=True, name="POST /operators") as resp:
            if resp.status_code == 201:
                self.state.operator_id = payload["operator_id"]
                self.state.zip_codes = payload["zip_codes"]
            else:
                resp.failure(f"Register operator failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task(5)
    def claim_next(self):
        if not self.state.operator_id:
            return
        resp = self.client.get(
            f"/operators/{self.state.operator_id}/available-orders",
            name="GET /operators/{id}/available-orders",
        )
        if resp.status_code != 200 or not resp.json():
            return

        order_id = resp.json()[0]["order_id"]
        with self.client.post(
            f"/orders/{order_id}/claim",
            json={"operator_id": self.state.operator_id},
            catch_response=True,
            name="POST /orders/{id}/claim",
        ) as claim:
            if claim.status_code != 200:
                claim.failure(f"Claim errored: {claim.status_code} - {extract_error_detail(claim)}")
                return
            if claim.json()["success"]:
                self.state.claims_won += 1
                _claim_totals["won"] += 1
                self.state.claimed.append(order_id)
            else:
                self.state.claims_lost += 1
                _claim_totals["lost"] += 1

    @task(3)
    def advance_claimed(self):
        if not self.state.claimed:
            return
        order_id = self.state.claimed[0]
        order = self.client.get(f"/orders/{order_id}", name="GET /orders/{id}")
        if order.status_code != 200:
            return

        status = order.json()["status"]
        if status == "cancelled" or status not in ["claimed", *PROGRESSION[:-1]]:
            self.state.claimed.pop(0)
            return
        target = PROGRESSION[0] if status == "claimed" else PROGRESSION[PROGRESSION.index(status) + 1]
        with self.client.put(
            f"/orders/{order_id}/status",
            json={"operator_id": self.state.operator_id, "target_status": target},
            catch_response=True,
            name=f"PUT /orders/{{id}}/status ({target})",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Advance failed: {resp.status_code} - {extract_error_detail(resp)}")
            elif target == "completed":
                self.state.claimed.pop(0)


@events.test_stop.add_listener
def report_claims(**_kwargs):
    total = _claim_totals["won"] + _claim_totals["lost"]
    if total:
        print(f"[LOADTEST] Claims won {_claim_totals['won']} / lost {_claim_totals['lost']} of {total}")
