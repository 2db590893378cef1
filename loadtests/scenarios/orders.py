"""Customer order journeys.

Sequential journeys covering the paid happy path, a failed payment and a
cancellation before any operator picks the order up.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import cancel_data, order_data, webhook_payload
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.seed import seed_reference_data
from loadtests.helpers.state import OrderState


class _OrderJourney(SequentialTaskSet):
    def on_start(self):
        self.state = OrderState()

    def _place(self):
        payload = order_data()
        with self.client.post("/orders", json=payload, catch_response=True, name="POST /orders") as resp:
            if resp.status_code == 201:
                data = resp.json()
                self.state.order_id = data["order_id"]
                self.state.zip_code = payload["zip_code"]
                self.state.total_cents = data["total_cents"]
                self.state.current_status = data["status"]
            else:
                resp.failure(f"Place order failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    def _webhook(self, succeeded: bool, expected_status: str):
        body, headers = webhook_payload(self.state.order_id, succeeded=succeeded)
        label = "success" if succeeded else "failure"
        with self.client.post(
            "/payments/webhook",
            json=body,
            headers=headers,
            catch_response=True,
            name=f"POST /payments/webhook ({label})",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = expected_status
            else:
                resp.failure(f"Webhook {label} failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()


class PaidOrderJourney(_OrderJourney):
    """Quote -> Place -> Payment captured -> Check status."""

    @task
    def quote(self):
        self.client.post(
            "/orders/quote",
            json={"bag_count": random.randint(1, 4), "is_express": random.random() < 0.2},
            name="POST /orders/quote",
        )

    @task
    def place(self):
        self._place()

    @task
    def pay(self):
        self._webhook(succeeded=True, expected_status="unclaimed")

    @task
    def check(self):
        self.client.get(f"/orders/{self.state.order_id}", name="GET /orders/{id}")

    @task
    def done(self):
        self.interrupt()


class FailedPaymentJourney(_OrderJourney):
    """Place -> Payment fails."""

    @task
    def place(self):
        self._place()

    @task
    def fail(self):
        self._webhook(succeeded=False, expected_status="failed")

    @task
    def done(self):
        self.interrupt()


class CancelBeforeClaimJourney(_OrderJourney):
    """Place -> Pay -> Cancel with a full refund."""

    @task
    def place(self):
        self._place()

    @task
    def pay(self):
        self._webhook(succeeded=True, expected_status="unclaimed")

    @task
    def cancel(self):
        with self.client.post(
            f"/orders/{self.state.order_id}/cancel",
            json=cancel_data(),
            catch_response=True,
            name="POST /orders/{id}/cancel",
        ) as resp:
            # An operator may have claimed it in between; both outcomes are valid
            if resp.status_code == 200:
                self.state.current_status = "cancelled"
            elif resp.status_code != 400:
                resp.failure(f"Cancel failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class CustomerUser(HttpUser):
    """Customers placing, paying for and occasionally cancelling orders."""

    wait_time = between(0.5, 2.0)
    tasks = {PaidOrderJourney: 6, FailedPaymentJourney: 1, CancelBeforeClaimJourney: 1}

    def on_start(self):
        seed_reference_data(self.client)
