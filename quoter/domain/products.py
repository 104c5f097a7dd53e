from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Tuple

from quoter.core.errors import UnknownVariantError
from quoter.utils.calculator import to_decimal
from quoter.utils.validators import (
    is_empty,
    parse_number,
    validate_in_list,
    validate_positive,
)

from .base import Entity
from .enums import ProductType

D = Decimal

# Present on every form, whatever the product variant
SHARED_FIELD_NAMES: Tuple[str, ...] = ("quantity", "deliveryDate")

LICENSE_TYPES = ("Standard", "Professional", "Enterprise")
ENERGY_RATINGS = ("A", "B", "C", "D", "E")
MIN_WARRANTY_MONTHS = 6
CERTIFICATION_VOLTAGE_THRESHOLD = 220


# -----------------------------
# Entities
# -----------------------------


@dataclass(eq=False, kw_only=True)
class Product(Entity):
    name: str
    description: str
    base_price: D
    category: str
    is_active: bool = True

    # set by each variant, never changes afterwards
    type: ProductType = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.base_price = to_decimal(self.base_price)

    def variant_attributes(self) -> Dict[str, Any]:
        """Variant attributes keyed by the form field they prefill."""
        return {}

    def required_field_names(self) -> List[str]:
        return required_field_names(self)

    def applicable_rule_ids(self) -> List[str]:
        return list(_APPLICABLE_RULES[_tag(self)])

    def validate(self, form_data: Mapping[str, Any]) -> List[str]:
        return validate_product(self, form_data)

    def to_map(self) -> Dict[str, Any]:
        return {
            **super().to_map(),
            "name": self.name,
            "description": self.description,
            "basePrice": float(self.base_price),
            "type": self.type.value,
            "category": self.category,
            "isActive": self.is_active,
            **self.variant_attributes(),
        }


@dataclass(eq=False, kw_only=True)
class IndustrialProduct(Product):
    voltage: int
    certification: str = ""
    power_consumption: float = 0.0

    type: ProductType = field(default=ProductType.INDUSTRIAL, init=False)

    def variant_attributes(self) -> Dict[str, Any]:
        return {
            "voltage": self.voltage,
            "certification": self.certification,
            "powerConsumption": self.power_consumption,
        }


@dataclass(eq=False, kw_only=True)
class ResidentialProduct(Product):
    color: str
    warranty: int
    energy_rating: str = "A"

    type: ProductType = field(default=ProductType.RESIDENTIAL, init=False)

    def variant_attributes(self) -> Dict[str, Any]:
        return {
            "color": self.color,
            "warranty": self.warranty,
            "energyRating": self.energy_rating,
        }


@dataclass(eq=False, kw_only=True)
class CorporateProduct(Product):
    license_type: str
    support_level: str
    max_users: int

    type: ProductType = field(default=ProductType.CORPORATE, init=False)

    def variant_attributes(self) -> Dict[str, Any]:
        return {
            "licenseType": self.license_type,
            "supportLevel": self.support_level,
            "maxUsers": self.max_users,
        }


PRODUCT_CLASSES: Dict[ProductType, type] = {
    ProductType.INDUSTRIAL: IndustrialProduct,
    ProductType.RESIDENTIAL: ResidentialProduct,
    ProductType.CORPORATE: CorporateProduct,
}


# -----------------------------
# Behaviour per variant (dispatch on the tag)
# -----------------------------

_VARIANT_FIELDS: Dict[ProductType, Tuple[str, ...]] = {
    ProductType.INDUSTRIAL: ("voltage", "certification", "powerConsumption"),
    ProductType.RESIDENTIAL: ("color", "warranty", "energyRating"),
    ProductType.CORPORATE: ("licenseType", "supportLevel", "maxUsers"),
}

_APPLICABLE_RULES: Dict[ProductType, Tuple[str, ...]] = {
    ProductType.INDUSTRIAL: (
        "volume_discount",
        "urgency_fee",
        "certification_required",
        "high_voltage_fee",
    ),
    ProductType.RESIDENTIAL: (
        "volume_discount",
        "urgency_fee",
        "energy_rating_discount",
    ),
    ProductType.CORPORATE: ("volume_discount", "urgency_fee", "support_level_fee"),
}


def _tag(product: Product) -> ProductType:
    if product.type not in _VARIANT_FIELDS:
        raise UnknownVariantError("product", product.type)
    return product.type


def required_field_names(product: Product) -> List[str]:
    return [*_VARIANT_FIELDS[_tag(product)], *SHARED_FIELD_NAMES]


def _validate_industrial(product: IndustrialProduct, form_data: Mapping[str, Any]) -> List[str]:
    errors: List[str] = []

    voltage = parse_number(form_data.get("voltage", product.voltage))
    certification = form_data.get("certification", product.certification)

    if voltage is not None and voltage > CERTIFICATION_VOLTAGE_THRESHOLD and is_empty(certification):
        errors.append(
            f"certification is required for products above {CERTIFICATION_VOLTAGE_THRESHOLD}V"
        )

    errors.extend(validate_positive("voltage", voltage))
    return errors


def _validate_residential(product: ResidentialProduct, form_data: Mapping[str, Any]) -> List[str]:
    errors: List[str] = []

    warranty = parse_number(form_data.get("warranty"))
    if warranty is not None and warranty < MIN_WARRANTY_MONTHS:
        errors.append(f"warranty must be at least {MIN_WARRANTY_MONTHS} months")

    errors.extend(validate_in_list("energyRating", form_data.get("energyRating"), ENERGY_RATINGS))
    return errors


def _validate_corporate(product: CorporateProduct, form_data: Mapping[str, Any]) -> List[str]:
    errors: List[str] = []
    errors.extend(validate_positive("maxUsers", parse_number(form_data.get("maxUsers"))))
    errors.extend(validate_in_list("licenseType", form_data.get("licenseType"), LICENSE_TYPES))
    return errors


_VALIDATORS: Dict[ProductType, Callable[[Any, Mapping[str, Any]], List[str]]] = {
    ProductType.INDUSTRIAL: _validate_industrial,
    ProductType.RESIDENTIAL: _validate_residential,
    ProductType.CORPORATE: _validate_corporate,
}


def validate_product(product: Product, form_data: Mapping[str, Any]) -> List[str]:
    return _VALIDATORS[_tag(product)](product, form_data)
