from decimal import Decimal

from quoter.domain.enums import ProductType
from quoter.engine.context import RuleContext


def test_get_resolves_camel_case_keys_to_typed_fields():
    ctx = RuleContext(
        product_type=ProductType.INDUSTRIAL,
        base_price=Decimal("100"),
        current_price=Decimal("5000"),
        quantity=50,
        delivery_days=5,
        values={"voltage": 380},
    )
    assert ctx.get("productType") == "industrial"
    assert ctx.get("basePrice") == Decimal("100")
    assert ctx.get("currentPrice") == Decimal("5000")
    assert ctx.get("quantity") == 50
    assert ctx.get("deliveryDays") == 5
    assert ctx.get("voltage") == 380
    assert ctx.get("missing") is None
    assert ctx.get("missing", "fallback") == "fallback"
    assert ctx["voltage"] == 380


def test_typed_field_shadows_raw_form_value():
    ctx = RuleContext(quantity=1, values={"quantity": "abc"})
    assert ctx.get("quantity") == 1


def test_from_mapping_and_as_dict():
    ctx = RuleContext.from_mapping({"currentPrice": Decimal("10"), "color": "White"})
    assert ctx.current_price == Decimal("10")
    assert ctx.values == {"color": "White"}

    d = ctx.as_dict()
    assert d["currentPrice"] == Decimal("10")
    assert d["color"] == "White"
    assert d["fieldVisibility"] == {}
    assert "deliveryDays" not in d
