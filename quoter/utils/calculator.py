from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable

D = Decimal

CENT = D("0.01")
HUNDRED = D("100")


def to_decimal(x: Any) -> D:
    """Decimal from int/float/str/Decimal. Floats go through str() to avoid binary noise."""
    if isinstance(x, D):
        return x
    if isinstance(x, bool):
        raise TypeError("bool is not a currency amount")
    return D(str(x))


def money(x: Any, places: int = 2) -> D:
    return to_decimal(x).quantize(D(1).scaleb(-places))


def percentage_discount(price: D, pct: D) -> D:
    if pct < 0 or pct > HUNDRED:
        raise ValueError("Discount percentage must be between 0 and 100")
    return price * (1 - pct / HUNDRED)


def fixed_discount(price: D, amount: D) -> D:
    result = price - amount
    return result if result > 0 else D("0")


def percentage_surcharge(price: D, pct: D) -> D:
    if pct < 0:
        raise ValueError("Surcharge percentage cannot be negative")
    return price * (1 + pct / HUNDRED)


def fixed_surcharge(price: D, amount: D) -> D:
    return price + amount


def total_price(unit_price: D, quantity: Any) -> D:
    qty = to_decimal(quantity)
    if qty < 0:
        raise ValueError("Quantity cannot be negative")
    return to_decimal(unit_price) * qty


def average(values: Iterable[D]) -> D:
    items = list(values)
    if not items:
        return D("0")
    return sum(items, D("0")) / len(items)
