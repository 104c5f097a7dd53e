from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from quoter.core.errors import UnknownVariantError
from quoter.domain.enums import FieldType
from quoter.domain.fields import (
    DateFormField,
    DropdownFormField,
    DropdownOption,
    FormField,
    NumberFormField,
    TextFormField,
)


@pytest.fixture
def quantity_field():
    return NumberFormField(
        id="quantity", name="quantity", label="Quantity",
        is_required=True, min_value=1, is_integer=True,
    )


@pytest.fixture
def support_field():
    return DropdownFormField(
        id="supportLevel",
        name="supportLevel",
        label="Support level",
        is_required=True,
        options=[
            DropdownOption("Basic", "Basic"),
            DropdownOption("Premium", "Premium"),
            DropdownOption("Legacy", "Legacy", is_enabled=False),
        ],
    )


def test_variant_tags():
    assert TextFormField(id="a", name="a", label="A").type is FieldType.TEXT
    assert NumberFormField(id="b", name="b", label="B").type is FieldType.NUMBER
    assert DropdownFormField(id="c", name="c", label="C").type is FieldType.DROPDOWN
    assert DateFormField(id="d", name="d", label="D").type is FieldType.DATE


def test_required_and_empty_reports_only_required(quantity_field):
    assert quantity_field.validate(None) == ["Quantity is required"]
    assert quantity_field.validate("") == ["Quantity is required"]


def test_empty_optional_passes_every_check():
    f = TextFormField(id="notes", name="notes", label="Notes", min_length=5, pattern=r"^\d+$")
    assert f.validate(None) == []
    assert f.validate("") == []


def test_number_non_numeric_input_is_reported_not_raised(quantity_field):
    assert quantity_field.validate("lots") == ["Quantity must be a valid number"]
    assert quantity_field.validate(True) == ["Quantity must be a valid number"]


def test_number_constraints(quantity_field):
    assert quantity_field.validate(0) == ["Quantity must be greater than or equal to 1"]
    assert quantity_field.validate(2.5) == ["Quantity must be a whole number"]
    assert quantity_field.validate("50") == []


def test_number_decimal_places():
    f = NumberFormField(id="kw", name="kw", label="Power", min_value=0.1, decimal_places=1)
    assert f.validate(15.0) == []
    assert f.validate(Decimal("15.25")) == ["Power must have at most 1 decimal places"]
    assert f.validate(0.05) == [
        "Power must be greater than or equal to 0.1",
        "Power must have at most 1 decimal places",
    ]


def test_text_constraints():
    f = TextFormField(id="code", name="code", label="Code", min_length=2, max_length=4, pattern=r"^[A-Z]+$")
    assert f.validate("AB") == []
    assert f.validate("A") == ["Code must have at least 2 characters"]
    assert f.validate("abcde") == [
        "Code must have at most 4 characters",
        "Code does not match the expected format",
    ]


def test_dropdown_membership_ignores_enabled_flag(support_field):
    assert support_field.validate("Premium") == []
    # retired option stays valid for values picked before it was disabled
    assert support_field.validate("Legacy") == []
    assert support_field.validate("Gold") == ["Support level: 'Gold' is not a valid option"]


def test_dropdown_single_vs_multiple(support_field):
    assert "Support level accepts a single option" in support_field.validate(["Basic", "Premium"])

    multi = DropdownFormField(
        id="tags", name="tags", label="Tags", allow_multiple=True,
        options=[DropdownOption("a", "A"), DropdownOption("b", "B")],
    )
    assert multi.validate(["a", "b"]) == []
    assert multi.validate(["a", "z"]) == ["Tags: 'z' is not a valid option"]


def test_dropdown_widget_lists_only_enabled_options(support_field):
    props = support_field.widget_properties()
    assert [o["value"] for o in props["options"]] == ["Basic", "Premium"]
    assert props["type"] == "dropdown"
    assert props["isRequired"] is True


def test_date_accepts_datetime_date_and_iso(fixed_now):
    f = DateFormField(id="d", name="d", label="Delivery", min_offset_days=0)
    assert f.validate(fixed_now + timedelta(days=3), now=fixed_now) == []
    assert f.validate(date(2025, 1, 10), now=fixed_now) == []
    assert f.validate("2025-01-10T00:00:00", now=fixed_now) == []
    assert f.validate("someday", now=fixed_now) == ["Delivery must be a valid date"]


def test_date_min_offset_is_start_of_today(fixed_now):
    f = DateFormField(id="d", name="d", label="Delivery", min_offset_days=0)
    # earlier the same day is still today
    assert f.validate(fixed_now.replace(hour=1), now=fixed_now) == []
    assert f.validate(fixed_now - timedelta(days=1), now=fixed_now) == [
        "Delivery must be on or after 01/01/2025"
    ]


def test_date_absolute_bounds():
    f = DateFormField(
        id="d", name="d", label="Delivery",
        min_date=datetime(2025, 1, 1), max_date=datetime(2025, 12, 31),
    )
    assert f.validate(datetime(2026, 1, 1)) == ["Delivery must be on or before 31/12/2025"]


def test_date_initial_value_is_relative_to_now(fixed_now):
    f = DateFormField(id="d", name="d", label="Delivery", default_offset_days=30)
    assert f.initial_value(fixed_now) == fixed_now + timedelta(days=30)


def test_initial_value_is_a_copy():
    f = DropdownFormField(id="t", name="t", label="T", allow_multiple=True, default_value=["a"])
    value = f.initial_value()
    value.append("b")
    assert f.default_value == ["a"]


def test_reset_visibility_restores_declared_value():
    f = NumberFormField(id="voltage", name="voltage", label="Voltage", is_visible=False)
    f.is_visible = True
    f.reset_visibility()
    assert f.is_visible is False
    assert f.declared_visible is False


def test_to_map_carries_constraints(quantity_field):
    m = quantity_field.to_map()
    assert m["type"] == "number"
    assert m["isVisible"] is True
    assert m["minValue"] == 1.0
    assert m["isInteger"] is True


def test_field_without_variant_is_rejected():
    bare = FormField(id="x", name="x", label="X")
    with pytest.raises(UnknownVariantError):
        bare.validate("anything")
