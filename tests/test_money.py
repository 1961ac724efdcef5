from __future__ import annotations

import pytest

from venmo_web_client.util.money import cents_to_money_str, money_to_cents


def test_money_to_cents() -> None:
    assert money_to_cents("$3,040.16") == 304016
    assert money_to_cents("3040.16") == 304016
    assert money_to_cents("- $12.34") == -1234
    assert money_to_cents("+ $5.00") == 500
    assert money_to_cents("(12.34)") == -1234
    assert money_to_cents("7") == 700


@pytest.mark.parametrize("bad", ["", "   ", "abc", "$"])
def test_money_to_cents_rejects_garbage(bad: str) -> None:
    with pytest.raises(ValueError):
        money_to_cents(bad)


def test_cents_to_money_str() -> None:
    assert cents_to_money_str(304016) == "$3,040.16"
    assert cents_to_money_str(5) == "$0.05"
    assert cents_to_money_str(-1234) == "-$12.34"
