"""Integration tests for Order persistence, schema setup and logging."""

import logging
import logging.handlers

import pytest
import structlog
from laundry.domain import laundry
from laundry.order.claiming import ClaimCoordinator
from laundry.order.progress import AdvanceOrderStatus
from laundry.utils.db import setup_db
from laundry.utils.logging import add_context, clear_context, setup_stdlib_logging
from protean import current_domain


class TestOrderPersistence:
    def test_children_survive_a_round_trip(self, place_order, load_order):
        order_id = place_order(soap_preference_id="soap-hypo", fragrance_free=True, promo_code="nothing")["order_id"]

        order = load_order(order_id)
        assert len(order.preferences) == 3
        assert {line.code for line in order.line_items} >= {"bags", "add_on:fragrance_free"}
        assert order.add_ons.fragrance_free is True
        assert order.pricing.base_bag_cents == 3500
        # Unknown promo codes are dropped rather than stored
        assert order.promo_code is None

    def test_reloaded_order_reprices_to_its_total(self, place_order, load_order):
        order_id = place_order(bag_count=4, dry_temp_preference_id="dry-air", extra_rinse=True)["order_id"]

        order = load_order(order_id)
        assert order.quote().total_cents == order.total_amount_cents == 4 * 3500 + 150 + 200

    def test_evidence_is_appended(self, claimed_order, load_order):
        current_domain.process(
            AdvanceOrderStatus(
                order_id=claimed_order,
                operator_id="op-a",
                target_status="in_progress",
                evidence_uri="s3://bags/123.jpg",
            ),
            asynchronous=False,
        )

        [evidence] = load_order(claimed_order).evidence
        assert evidence.uri == "s3://bags/123.jpg"
        assert evidence.recorded_at is not None

    def test_each_commit_bumps_the_version(self, unclaimed_order, load_order):
        before = load_order(unclaimed_order)._version
        ClaimCoordinator().claim(unclaimed_order, "op-b")
        assert load_order(unclaimed_order)._version == before + 1


def test_schema_setup_skips_non_sql_providers():
    assert setup_db(laundry) == []


def test_log_context_is_bound_and_cleared():
    clear_context()
    add_context(request_id="req-1", path="/orders")
    assert structlog.contextvars.get_contextvars() == {"request_id": "req-1", "path": "/orders"}

    clear_context()
    assert structlog.contextvars.get_contextvars() == {}


class TestLogHandlers:
    @pytest.fixture(autouse=True)
    def _restore_root_handlers(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        for handler in root.handlers:
            handler.close()
        root.handlers = handlers
        root.setLevel(level)

    def test_console_only_by_default(self, monkeypatch):
        monkeypatch.delenv("LOG_FILE", raising=False)
        setup_stdlib_logging()

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert not isinstance(handlers[0], logging.handlers.RotatingFileHandler)

    def test_rotating_file_when_configured(self, monkeypatch, tmp_path):
        log_file = tmp_path / "logs" / "freshdrop.log"
        monkeypatch.setenv("LOG_FILE", str(log_file))
        setup_stdlib_logging()

        [file_handler] = [
            h for h in logging.getLogger().handlers if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert file_handler.baseFilename == str(log_file)
        assert log_file.parent.is_dir()
