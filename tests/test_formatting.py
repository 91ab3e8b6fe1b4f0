from datetime import datetime
from decimal import Decimal

from ivory.utils.formatting import format_date, format_naira, to_money


def test_format_naira():
    assert format_naira(10375) == "₦10,375.00"
    assert format_naira(Decimal("0.5")) == "₦0.50"
    assert format_naira("1234567.891") == "₦1,234,567.89"
    assert format_naira(-20) == "-₦20.00"
    assert format_naira(None) == "₦0.00"


def test_format_date():
    assert format_date(datetime(2026, 10, 9, 14, 30)) == "Oct 9, 2026"
    assert format_date(None) is None


def test_to_money_rounds_half_up():
    assert to_money("2.345") == Decimal("2.35")
    assert to_money(9.99) == Decimal("9.99")
