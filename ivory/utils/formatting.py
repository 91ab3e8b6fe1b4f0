# ivory/utils/formatting.py
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Normalize any numeric input to a 2-place Decimal."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def format_naira(amount) -> str:
    # en-NG / NGN: ₦10,375.00
    value = to_money(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}₦{abs(value):,.2f}"


def format_date(value: datetime | None) -> str | None:
    # en-US short: Oct 9, 2026
    if value is None:
        return None
    return f"{value:%b} {value.day}, {value.year}"
