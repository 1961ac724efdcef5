from __future__ import annotations

from venmo_web_client.browser.client import amount_input_value, parse_balance_cents
from venmo_web_client.browser.selectors import PaymentSelectors


def test_parse_balance_cents() -> None:
    assert parse_balance_cents("Venmo balance $1,234.56") == 123456
    assert parse_balance_cents("$0.5") == 50
    assert parse_balance_cents("Balance unavailable") is None
    assert parse_balance_cents("") is None


def test_amount_input_value_is_plain_dollars() -> None:
    assert amount_input_value(1234) == "12.34"
    assert amount_input_value(123456) == "1234.56"
    assert amount_input_value(5) == "0.05"


def test_selectors_cover_both_recipient_placeholders() -> None:
    s = PaymentSelectors()
    assert len(s.recipient_placeholders) == 2
    assert all("@username" in p for p in s.recipient_placeholders)
