"""Unit tests for structlog processors."""

from datetime import date
from decimal import Decimal

import structlog

from pharmstock.config import get_settings
from pharmstock.config.logging import add_service, build_processors, render_ledger_values
from pharmstock.core.entities.inventory import MovementType


def test_ledger_values_rendered_as_strings():
    event = render_ledger_values(
        None,
        "info",
        {
            "event": "stock_movement_recorded",
            "movement_type": MovementType.SALE,
            "price": Decimal("0.45"),
            "movement_date": date(2024, 6, 3),
            "quantity": -3,
        },
    )

    assert event["movement_type"] == "sale"
    assert event["price"] == "0.45"
    assert event["movement_date"] == "2024-06-03"
    assert event["quantity"] == -3


def test_service_fields_do_not_override_event_fields():
    event = add_service(None, "info", {"event": "x", "version": 7})

    assert event["service"] == get_settings().app_name
    assert event["version"] == 7


def test_renderer_by_environment():
    assert isinstance(build_processors("development")[-1], structlog.dev.ConsoleRenderer)
    assert isinstance(build_processors("production")[-1], structlog.processors.JSONRenderer)
