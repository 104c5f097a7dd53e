from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

D = Decimal


def _group_thousands(integer_part: str, separator: str) -> str:
    sign = ""
    if integer_part.startswith("-"):
        sign, integer_part = "-", integer_part[1:]
    groups = []
    while len(integer_part) > 3:
        groups.insert(0, integer_part[-3:])
        integer_part = integer_part[:-3]
    groups.insert(0, integer_part)
    return sign + separator.join(groups)


def format_number(value: Any, decimals: int = 0, *, thousands: Optional[str] = None, decimal_sep: Optional[str] = None) -> str:
    from quoter.config import get_settings

    s = get_settings()
    thousands = s.thousands_separator if thousands is None else thousands
    decimal_sep = s.decimal_separator if decimal_sep is None else decimal_sep

    q = D(str(value)).quantize(D(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    text = f"{q:.{decimals}f}"
    integer_part, _, fraction = text.partition(".")
    out = _group_thousands(integer_part, thousands)
    if decimals > 0:
        out = f"{out}{decimal_sep}{fraction}"
    return out


def format_currency(value: Any, *, symbol: Optional[str] = None, decimals: Optional[int] = None) -> str:
    """Single display convention, e.g. 'R$ 4.250,00' with the default settings."""
    from quoter.config import get_settings

    s = get_settings()
    symbol = s.currency_symbol if symbol is None else symbol
    decimals = s.price_decimals if decimals is None else decimals
    return f"{symbol} {format_number(value, decimals)}"


def format_percentage(value: Any, decimals: int = 1) -> str:
    return f"{D(str(value)):.{decimals}f}%"


def format_date(value: date) -> str:
    """dd/mm/yyyy"""
    return value.strftime("%d/%m/%Y")


def format_datetime(value: datetime) -> str:
    return value.strftime("%d/%m/%Y %H:%M")


def format_days(days: int) -> str:
    """Human day span: '1 day', '5 days', '2 weeks and 1 day', '1 month'."""
    if days == 1:
        return "1 day"
    if days < 7:
        return f"{days} days"

    if days < 30:
        unit, size = "week", 7
    else:
        unit, size = "month", 30

    whole, rest = divmod(days, size)
    out = f"1 {unit}" if whole == 1 else f"{whole} {unit}s"
    if rest:
        out += " and 1 day" if rest == 1 else f" and {rest} days"
    return out
