from decimal import Decimal

import pytest

from quoter.core.errors import UnknownVariantError
from quoter.domain.enums import ProductType
from quoter.domain.products import IndustrialProduct, Product, ResidentialProduct


def test_variant_tag_is_fixed(motor, air_conditioner, erp):
    assert motor.type is ProductType.INDUSTRIAL
    assert air_conditioner.type is ProductType.RESIDENTIAL
    assert erp.type is ProductType.CORPORATE

    with pytest.raises(TypeError):
        IndustrialProduct(
            id="x", name="x", description="", base_price=1, category="", voltage=110,
            type=ProductType.RESIDENTIAL,
        )


def test_base_price_becomes_decimal():
    p = IndustrialProduct(id="p", name="P", description="", base_price=2500.0, category="", voltage=220)
    assert p.base_price == Decimal("2500.0")
    assert isinstance(p.base_price, Decimal)


def test_required_field_names_end_with_shared_fields(motor, air_conditioner, erp):
    assert motor.required_field_names() == [
        "voltage", "certification", "powerConsumption", "quantity", "deliveryDate",
    ]
    assert air_conditioner.required_field_names() == [
        "color", "warranty", "energyRating", "quantity", "deliveryDate",
    ]
    assert erp.required_field_names() == [
        "licenseType", "supportLevel", "maxUsers", "quantity", "deliveryDate",
    ]


def test_applicable_rule_ids(motor, erp):
    assert "certification_required" in motor.applicable_rule_ids()
    assert "support_level_fee" in erp.applicable_rule_ids()
    assert "certification_required" not in erp.applicable_rule_ids()


def test_equality_is_by_id_only(motor):
    clone = IndustrialProduct(
        id=motor.id, name="Other", description="", base_price=1, category="", voltage=110
    )
    assert clone == motor
    assert hash(clone) == hash(motor)
    assert len({motor, clone}) == 1


def test_industrial_validation_certification_above_220(motor):
    errors = motor.validate({"voltage": 380, "certification": ""})
    assert errors == ["certification is required for products above 220V"]

    assert motor.validate({"voltage": 380, "certification": "ISO 9001"}) == []
    assert motor.validate({"voltage": 220, "certification": ""}) == []


def test_industrial_validation_falls_back_to_product_values(motor):
    # motor is 380V without certification
    assert motor.validate({}) == ["certification is required for products above 220V"]


def test_industrial_voltage_must_be_positive(motor):
    assert "voltage must be greater than zero" in motor.validate({"voltage": 0})


def test_residential_validation(air_conditioner):
    assert air_conditioner.validate({"warranty": 24, "energyRating": "A"}) == []
    errors = air_conditioner.validate({"warranty": 3, "energyRating": "Z"})
    assert "warranty must be at least 6 months" in errors
    assert "energyRating must be one of: A, B, C, D, E" in errors


def test_corporate_validation(erp):
    assert erp.validate({"maxUsers": 10, "licenseType": "Enterprise"}) == []
    errors = erp.validate({"maxUsers": 0, "licenseType": "Pirate"})
    assert "maxUsers must be greater than zero" in errors
    assert "licenseType must be one of: Standard, Professional, Enterprise" in errors


def test_to_map_is_flat_camel_case(motor):
    m = motor.to_map()
    assert m["id"] == "ind_test"
    assert m["type"] == "industrial"
    assert m["basePrice"] == 100.0
    assert m["isActive"] is True
    assert m["voltage"] == 380
    assert m["powerConsumption"] == 15.0
    assert "createdAt" in m and "updatedAt" in m


def test_product_without_variant_is_rejected():
    bare = Product(id="bare", name="Bare", description="", base_price=1, category="")
    with pytest.raises(UnknownVariantError):
        bare.required_field_names()
    with pytest.raises(UnknownVariantError):
        bare.validate({})
