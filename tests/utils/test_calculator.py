from decimal import Decimal

import pytest

from quoter.utils.calculator import (
    average,
    fixed_discount,
    fixed_surcharge,
    money,
    percentage_discount,
    percentage_surcharge,
    to_decimal,
    total_price,
)

D = Decimal


def test_to_decimal_goes_through_str_for_floats():
    assert to_decimal(0.1) == D("0.1")
    assert to_decimal("12.50") == D("12.50")
    assert to_decimal(D("3")) == D("3")


def test_to_decimal_rejects_bool():
    with pytest.raises(TypeError):
        to_decimal(True)


def test_money_quantizes_to_cents():
    assert money(D("4250")) == D("4250.00")
    assert money(D("10.126")).as_tuple().exponent == -2


def test_percentage_discount_happy():
    assert percentage_discount(D("5000"), D("15")) == D("4250")


@pytest.mark.parametrize("pct", [D("-1"), D("100.01")])
def test_percentage_discount_out_of_range_raises(pct):
    with pytest.raises(ValueError):
        percentage_discount(D("100"), pct)


def test_fixed_discount_clamps_at_zero():
    assert fixed_discount(D("100"), D("30")) == D("70")
    assert fixed_discount(D("100"), D("130")) == D("0")


def test_surcharges():
    assert percentage_surcharge(D("1000"), D("20")) == D("1200")
    assert fixed_surcharge(D("1000"), D("150")) == D("1150")
    with pytest.raises(ValueError):
        percentage_surcharge(D("1000"), D("-5"))


def test_total_price():
    assert total_price(D("100"), 50) == D("5000")
    assert total_price(D("2.5"), "4") == D("10")
    with pytest.raises(ValueError):
        total_price(D("100"), -1)


def test_average():
    assert average([]) == D("0")
    assert average([D("10"), D("20")]) == D("15")
