from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP


def money_to_cents(value: str) -> int:
    """
    Parse values like:
    - "$3,040.16"
    - "3040.16"
    - "- $12.34"   (feed display strings put a space after the sign)
    - "+ $5.00"
    - "(12.34)"
    """
    if value is None:
        raise ValueError("money_to_cents: value is None")

    s = value.strip()
    if not s:
        raise ValueError("money_to_cents: empty string")

    # Remove currency symbols/spaces/commas
    s = s.replace("$", "").replace(",", "").replace(" ", "")

    # Handle parentheses as negative
    if s.startswith("(") and s.endswith(")"):
        s = "-" + s[1:-1]

    try:
        dec = Decimal(s).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"money_to_cents: not a money amount: {value!r}") from e
    return int(dec * 100)


def cents_to_money_str(cents: int) -> str:
    dec = (Decimal(cents) / 100).quantize(Decimal("0.01"))
    if dec < 0:
        return f"-${-dec:,.2f}"
    return f"${dec:,.2f}"
